"""Project root discovery."""

from __future__ import annotations

from pathlib import Path

PROJECT_DIRNAME = ".tickets"


def locate_project_root(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` to the first directory containing ``.tickets/``."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / PROJECT_DIRNAME).is_dir():
            return candidate
    return None
