"""Per-render identifier bookkeeping for headings and footnotes."""

from __future__ import annotations

import itertools

SEPARATOR = "_"


def normalize_heading(text: str) -> str:
    """Lowercase alphanumerics and collapse every other run into ``_``.

    Leading and trailing runs are kept, so ``"(Intro)"`` becomes ``"_intro_"``.

    >>> normalize_heading("Hello, World!")
    'hello_world_'
    """
    parts: list[str] = []
    ignored_last = False
    for char in text:
        if char.isalnum():
            ignored_last = False
            parts.append(char.lower())
        elif not ignored_last:
            ignored_last = True
            parts.append(SEPARATOR)
    return "".join(parts)


class HeadingAnchors:
    """Hand out unique heading identifiers within one document render.

    The first heading with a given normalized text receives the bare
    identifier; later ones get ``_2``, ``_3`` and so on.

    >>> anchors = HeadingAnchors()
    >>> anchors.allocate("Setup"), anchors.allocate("Setup")
    ('setup', 'setup_2')
    """

    def __init__(self) -> None:
        self._issued: set[str] = set()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._issued

    def __len__(self) -> int:
        return len(self._issued)

    def allocate(self, heading: str) -> str:
        """Return a fresh identifier for ``heading`` and record it as issued."""
        identifier = normalize_heading(heading)
        candidate = identifier
        for suffix in itertools.count(2):
            if candidate not in self._issued:
                break
            candidate = f"{identifier}{SEPARATOR}{suffix}"
        self._issued.add(candidate)
        return candidate


class FootnoteNumbers:
    """Number footnote labels in first-seen order, starting at 1."""

    def __init__(self) -> None:
        self._numbers: dict[str, int] = {}

    def number(self, label: str) -> int:
        """Return the number for ``label``, assigning the next one if unseen."""
        return self._numbers.setdefault(label, len(self._numbers) + 1)


__all__ = ["FootnoteNumbers", "HeadingAnchors", "normalize_heading"]
