"""Tests for the ``pagong`` command line interface."""

from __future__ import annotations

import logging
import typing as typ

import pytest

from pagong import cli
from pagong.config import SiteConfigError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


def _make_site(root: Path) -> None:
    content = root / "content"
    (content / "notes").mkdir(parents=True)
    (content / "index.md").write_text("# Home\n", encoding="utf-8")
    (content / "notes" / "one.md").write_text("# One\n", encoding="utf-8")


def test_generate_reports_written_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _make_site(tmp_path)
    monkeypatch.chdir(tmp_path)
    cli.generate(root=tmp_path)
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["wrote dist/index.html", "wrote dist/notes/one.html"], (
        "expected one cwd-relative line per generated page"
    )
    assert (tmp_path / "dist" / "notes" / "one.html").is_file(), "expected the page on disk"


def test_generate_applies_option_overrides(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _make_site(tmp_path)
    (tmp_path / "pagong.yaml").write_text("dist_ext: htm\n", encoding="utf-8")
    cli.generate(root=tmp_path, dist_ext=".xhtml", highlight=True)
    out = capsys.readouterr().out
    assert f"wrote {tmp_path / 'dist' / 'index.xhtml'}" in out, (
        "expected the command line extension to win over the file"
    )
    assert "pygments.css" in out, "expected the highlight stylesheet to be written"


def test_generate_passes_only_given_options(tmp_path: Path, mocker: MockerFixture) -> None:
    load = mocker.patch.object(cli, "load_site_config")
    generator = mocker.patch.object(cli, "SiteGenerator")
    generator.return_value.run.return_value = []
    cli.generate(root=tmp_path, clean=True)
    overrides = load.call_args.args[1]
    assert overrides["clean"] is True, "expected the flag to be forwarded"
    assert overrides["highlight"] is None, "unset flags should leave the configuration alone"
    assert load.call_args.kwargs == {"config_path": None}, "expected no explicit config file"
    generator.assert_called_once_with(load.return_value)


def test_generate_surfaces_config_errors(tmp_path: Path) -> None:
    _make_site(tmp_path)
    (tmp_path / "pagong.yaml").write_text("surprise: 1\n", encoding="utf-8")
    with pytest.raises(SiteConfigError, match="surprise"):
        cli.generate(root=tmp_path)


@pytest.mark.parametrize(("verbose", "level"), [(True, logging.INFO), (False, logging.WARNING)])
def test_configure_logging_levels(*, verbose: bool, level: int) -> None:
    cli.configure_logging(verbose=verbose)
    assert logging.getLogger().level == level, "expected the root level to follow verbosity"
