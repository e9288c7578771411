"""Static site generation from markdown posts and directive templates.

This package exposes the CLI entry points used by the ``pagong`` console
script to turn a ``content`` directory into a finished site.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from pagong import main
>>> main()  # doctest: +SKIP
>>> from pagong import app
>>> callable(app)
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
