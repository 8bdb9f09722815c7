"""Status sets, case-insensitive deduplication, and status name validation.

Statuses are compared case-insensitively but always displayed in the case
the configuration author used for their first occurrence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from .models import STATUS_TYPES

STATUS_PATTERN = re.compile(r"^[A-Za-z0-9.,! ]+$")

INVALID_STATUS_MESSAGE = (
    "Status should contain ASCII characters only. Translate via po files."
)
DUPLICATE_STATUS_MESSAGE = "Statuses must be unique within a lifecycle"


def dedupe_statuses(statuses: Iterable[str]) -> tuple[str, ...]:
    """Drop case-insensitive duplicates, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for status in statuses:
        key = status.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(status)
    return tuple(result)


def contains_status(statuses: Iterable[str], status: str | None) -> bool:
    """Case-insensitive membership test."""
    if status is None:
        return False
    value = status.lower()
    return any(candidate.lower() == value for candidate in statuses)


def is_valid_status_name(status: str) -> bool:
    """Check a status name against the translatable character set."""
    return bool(STATUS_PATTERN.fullmatch(status))


def coerce_status_list(value: Any) -> tuple[str, ...]:
    """Turn a raw configuration value into a tuple of status names.

    Non-list values yield an empty tuple; blank and non-string items are
    dropped.
    """
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item)


@dataclass(frozen=True)
class StatusSet:
    """Ordered statuses of a lifecycle, partitioned into three classes."""

    initial: tuple[str, ...] = ()
    active: tuple[str, ...] = ()
    inactive: tuple[str, ...] = ()
    all: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "all", dedupe_statuses(self.initial + self.active + self.inactive)
        )

    def of_type(self, status_type: str) -> tuple[str, ...]:
        """Statuses of one class; unknown class names yield nothing."""
        if status_type not in STATUS_TYPES:
            return ()
        return getattr(self, status_type)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "initial": list(self.initial),
            "active": list(self.active),
            "inactive": list(self.inactive),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StatusSet:
        return cls(
            initial=coerce_status_list(data.get("initial")),
            active=coerce_status_list(data.get("active")),
            inactive=coerce_status_list(data.get("inactive")),
        )

    @classmethod
    def union(cls, status_sets: Iterable[StatusSet]) -> StatusSet:
        """Merge sets class by class, in iteration order, deduplicating each."""
        merged: dict[str, list[str]] = {status_type: [] for status_type in STATUS_TYPES}
        for status_set in status_sets:
            for status_type in STATUS_TYPES:
                merged[status_type].extend(status_set.of_type(status_type))
        return cls(
            initial=dedupe_statuses(merged["initial"]),
            active=dedupe_statuses(merged["active"]),
            inactive=dedupe_statuses(merged["inactive"]),
        )


def clean_status_lists(
    *,
    initial: Iterable[str | None] | None = None,
    active: Iterable[str | None] | None = None,
    inactive: Iterable[str | None] | None = None,
) -> dict[str, list[str]]:
    """Drop ``None`` and empty entries from caller supplied status lists."""
    supplied = {"initial": initial, "active": active, "inactive": inactive}
    return {
        status_type: [status for status in (supplied[status_type] or ()) if status]
        for status_type in STATUS_TYPES
    }


def validate_statuses(statuses: dict[str, list[str]]) -> tuple[bool, str | None]:
    """Validate status lists for a single lifecycle. Returns (ok, error_message).

    Every status must match :data:`STATUS_PATTERN` and be unique,
    case-insensitively, across all three classes combined. Statuses shared
    with other lifecycles are allowed.
    """
    seen: list[str] = []
    for status_type in STATUS_TYPES:
        for status in statuses.get(status_type, []):
            if not isinstance(status, str) or not is_valid_status_name(status):
                return False, INVALID_STATUS_MESSAGE
            if contains_status(seen, status):
                return False, DUPLICATE_STATUS_MESSAGE
            seen.append(status)
    return True, None
