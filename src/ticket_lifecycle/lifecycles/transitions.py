"""Transition graphs and right resolution.

A lifecycle's transitions are an adjacency list of legal ``from -> [to...]``
moves. Rights map ``from -> to`` keys, where either side may be the ``*``
wildcard, to the permission that must be checked for the move.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .models import WILDCARD
from .statuses import contains_status, dedupe_statuses

logger = logging.getLogger(__name__)

TRANSITION_SEPARATOR = re.compile(r"\s*->\s*")

DELETED_STATUS = "deleted"
DELETE_RIGHT = "DeleteTicket"
MODIFY_RIGHT = "ModifyTicket"


def transition_key(from_status: str, to_status: str) -> str:
    """Render the canonical ``from -> to`` key."""
    return f"{from_status} -> {to_status}"


def split_transition_key(key: Any) -> tuple[str, str] | None:
    """Split a ``from -> to`` key. Returns None when the key is malformed."""
    if not isinstance(key, str):
        return None
    parts = TRANSITION_SEPARATOR.split(key.strip(), maxsplit=1)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


@dataclass(frozen=True)
class TransitionGraph:
    """Legal next statuses per status. Absent keys mean no transitions."""

    edges: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_raw(cls, raw: Any, *, lifecycle: str = "") -> TransitionGraph:
        """Build a graph from ``{status: [next, ...]}``, skipping bad entries."""
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            logger.warning("Ignoring non-mapping transitions for lifecycle %r", lifecycle)
            return cls()
        edges: dict[str, tuple[str, ...]] = {}
        for status, targets in raw.items():
            if not isinstance(status, str) or not isinstance(targets, (list, tuple)):
                logger.warning(
                    "Ignoring malformed transitions entry %r in lifecycle %r",
                    status,
                    lifecycle,
                )
                continue
            edges[status] = dedupe_statuses(
                target for target in targets if isinstance(target, str) and target
            )
        return cls(edges=MappingProxyType(edges))

    def targets(self, status: str) -> tuple[str, ...]:
        """Next statuses for ``status``; exact key first, then case-insensitive."""
        if status in self.edges:
            return self.edges[status]
        lowered = status.lower()
        for candidate, targets in self.edges.items():
            if candidate.lower() == lowered:
                return targets
        return ()

    def allows(self, from_status: str | None, to_status: str | None) -> bool:
        if not from_status or not to_status:
            return False
        return contains_status(self.targets(from_status), to_status)

    def to_dict(self) -> dict[str, list[str]]:
        return {status: list(targets) for status, targets in self.edges.items()}


@dataclass(frozen=True)
class RightTable:
    """Rights keyed by ``(from, to)`` pairs with wildcard support.

    ``entries`` keeps the author's spelling for descriptions and
    persistence; ``index`` holds lower-cased pairs for resolution.
    """

    entries: tuple[tuple[str, str, str], ...] = ()
    index: Mapping[tuple[str, str], str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_raw(cls, raw: Any, *, lifecycle: str = "") -> RightTable:
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            logger.warning("Ignoring non-mapping rights for lifecycle %r", lifecycle)
            return cls()
        entries: list[tuple[str, str, str]] = []
        index: dict[tuple[str, str], str] = {}
        for key, right in raw.items():
            pair = split_transition_key(key)
            if pair is None or not isinstance(right, str) or not right:
                logger.warning(
                    "Ignoring malformed right %r -> %r in lifecycle %r",
                    key,
                    right,
                    lifecycle,
                )
                continue
            entries.append((pair[0], pair[1], right))
            index[(pair[0].lower(), pair[1].lower())] = right
        return cls(entries=tuple(entries), index=MappingProxyType(index))

    @staticmethod
    def candidates(from_status: str, to_status: str) -> tuple[tuple[str, str], ...]:
        """Lookup keys ordered from most to least specific."""
        from_key = from_status.lower()
        to_key = to_status.lower()
        return (
            (from_key, to_key),
            (WILDCARD, to_key),
            (from_key, WILDCARD),
            (WILDCARD, WILDCARD),
        )

    def resolve(self, from_status: str, to_status: str) -> str | None:
        """First configured right among the ranked candidates, if any."""
        for candidate in self.candidates(from_status, to_status):
            right = self.index.get(candidate)
            if right:
                return right
        return None

    def check(self, from_status: str | None, to_status: str | None) -> str:
        """Resolve the right for a move, falling back to the built-in rights."""
        from_status = from_status or ""
        to_status = to_status or ""
        right = self.resolve(from_status, to_status)
        if right:
            return right
        return DELETE_RIGHT if to_status.lower() == DELETED_STATUS else MODIFY_RIGHT

    def to_dict(self) -> dict[str, str]:
        return {
            transition_key(from_status, to_status): right
            for from_status, to_status, right in self.entries
        }


def validate_transitions(raw: Any) -> tuple[bool, str | None]:
    """Structural check for caller supplied transitions. Returns (ok, error)."""
    if not isinstance(raw, Mapping):
        return False, "Invalid transitions data"
    for status, targets in raw.items():
        if not isinstance(status, str):
            return False, "Invalid transitions data"
        if not isinstance(targets, (list, tuple)):
            return False, "Invalid transitions data"
        if not all(isinstance(target, str) and target for target in targets):
            return False, "Invalid transitions data"
    return True, None


def validate_rights(raw: Any) -> tuple[bool, str | None]:
    """Structural check for caller supplied rights. Returns (ok, error)."""
    if not isinstance(raw, Mapping):
        return False, "Invalid rights data"
    for key, right in raw.items():
        if split_transition_key(key) is None:
            return False, "Invalid rights data"
        if not isinstance(right, str) or not right.strip():
            return False, "Invalid rights data"
    return True, None
