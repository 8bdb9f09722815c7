"""Strings introduced by lifecycle configuration that need translation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import GLOBAL_LIFECYCLE
from .rights import rights_description
from .statuses import dedupe_statuses

if TYPE_CHECKING:
    from .registry import LifecycleRegistry


def for_localization(registry: LifecycleRegistry) -> list[str]:
    """Status names, action labels and right descriptions, deduplicated.

    Deduplication is case-insensitive and keeps the first spelling seen.
    """
    snapshot = registry.snapshot
    strings: list[str] = list(snapshot.lifecycles[GLOBAL_LIFECYCLE].statuses.all)
    for name in snapshot.names():
        strings.extend(
            entry.label for entry in snapshot.lifecycles[name].actions if entry.label
        )
    strings.extend(rights_description(registry).values())
    return list(dedupe_statuses(strings))
