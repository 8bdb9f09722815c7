"""CLI command modules for ticket-lifecycle.

Each module exposes a ``typer.Typer`` app that is mounted on the root
application by :func:`register_commands`.
"""

from __future__ import annotations

import typer

from . import lifecycle


def register_commands(app: typer.Typer) -> None:
    """Attach every command group to the root application."""
    app.add_typer(lifecycle.app, name="lifecycle")


__all__ = ["register_commands"]
