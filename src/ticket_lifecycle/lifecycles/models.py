"""Canonical lifecycle models.

Defines the value types shared by the builder and the query surface:
StatusType and UpdateKind enums, ActionEntry, LifecycleData (one built
lifecycle) and RegistrySnapshot (the immutable, fully built registry).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from .statuses import StatusSet
    from .transitions import RightTable, TransitionGraph

GLOBAL_LIFECYCLE = ""
MAPS_KEY = "__maps__"
WILDCARD = "*"


class StatusType(StrEnum):
    """The three disjoint status classes of a lifecycle."""

    INITIAL = "initial"
    ACTIVE = "active"
    INACTIVE = "inactive"


# Fixed classification order used by status_type() and the builder.
STATUS_TYPES: tuple[str, ...] = (
    StatusType.INITIAL.value,
    StatusType.ACTIVE.value,
    StatusType.INACTIVE.value,
)


class UpdateKind(StrEnum):
    """Follow-up form suggested to the user when performing an action."""

    NONE = ""
    RESPOND = "Respond"
    COMMENT = "Comment"


@dataclass(frozen=True)
class ActionEntry:
    """A UI action attached to a ``from -> to`` transition.

    ``from_status`` is either a concrete status or the ``*`` wildcard.
    """

    from_status: str
    to_status: str
    label: str = ""
    update: str = UpdateKind.NONE.value

    @property
    def is_wildcard(self) -> bool:
        return self.from_status == WILDCARD

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_status,
            "to": self.to_status,
            "label": self.label,
            "update": self.update,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ActionEntry:
        return cls(
            from_status=data["from"],
            to_status=data["to"],
            label=data.get("label") or "",
            update=str(UpdateKind(data.get("update") or "")),
        )


@dataclass(frozen=True)
class LifecycleData:
    """One fully built lifecycle inside a registry snapshot."""

    name: str
    statuses: StatusSet
    transitions: TransitionGraph
    rights: RightTable
    actions: tuple[ActionEntry, ...] = ()
    default_initial: str | None = None
    default_inactive: str | None = None

    @property
    def is_global(self) -> bool:
        return self.name == GLOBAL_LIFECYCLE


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable view of every configured lifecycle plus the global one.

    Produced by :func:`ticket_lifecycle.lifecycles.builder.build_snapshot`
    and published by the registry through a single reference swap.
    """

    lifecycles: Mapping[str, LifecycleData]
    maps: Mapping[tuple[str, str], Mapping[str, str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def names(self) -> list[str]:
        """Sorted names of configured lifecycles, without the global one."""
        return sorted(name for name in self.lifecycles if name != GLOBAL_LIFECYCLE)

    def get(self, name: str | None) -> LifecycleData | None:
        return self.lifecycles.get(name or GLOBAL_LIFECYCLE)

    def get_map(self, from_name: str, to_name: str) -> Mapping[str, str]:
        return self.maps.get((from_name, to_name), MappingProxyType({}))
