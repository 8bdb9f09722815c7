from __future__ import annotations

from ticket_lifecycle.lifecycles import LifecycleRegistry, for_localization


def test_strings_for_translation(registry: LifecycleRegistry) -> None:
    assert for_localization(registry) == [
        "new",
        "open",
        "stalled",
        "Waiting",
        "resolved",
        "rejected",
        "deleted",
        "closed",
        "Open It",
        "Resolve",
        "Reject",
        "Delete",
        "Reopen",
        "Change status to closed",
        "Change status to deleted",
        "Change status",
        "Change status to rejected",
        "Change status from rejected",
    ]


def test_duplicates_are_dropped_case_insensitively() -> None:
    registry = LifecycleRegistry(
        source={
            "a": {
                "initial": ["new"],
                "inactive": ["Closed"],
                "actions": {"new -> Closed": {"label": "closed"}, "Closed -> new": {"label": "New"}},
            }
        }
    )
    assert for_localization(registry) == ["new", "Closed"]


def test_empty_registry() -> None:
    assert for_localization(LifecycleRegistry()) == []
