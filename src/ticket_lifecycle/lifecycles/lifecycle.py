"""Lifecycle handle: the query and scoped mutation surface.

A lifecycle is a list of statuses a ticket can have, split into three
groups: initial, active and inactive. It also defines the transitions
between statuses, the right required for each transition, and UI actions
(a label and a suggested follow-up form) for transitions.

A handle holds the name and the built data of one lifecycle as of the
moment it was loaded. Mutations made through the handle reload it; changes
made elsewhere are only visible after :meth:`Lifecycle.reload` or a fresh
``registry.load(name)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from .actions import resolve_actions
from .models import STATUS_TYPES, GLOBAL_LIFECYCLE, ActionEntry, LifecycleData
from .statuses import contains_status

if TYPE_CHECKING:
    from .registry import LifecycleRegistry

NOT_LOADED_MESSAGE = "Lifecycle is not loaded"


class Lifecycle:
    """Read-oriented handle on one lifecycle of a registry."""

    def __init__(self, registry: LifecycleRegistry, data: LifecycleData):
        self._registry = registry
        self._data = data

    @classmethod
    def load(cls, registry: LifecycleRegistry, name: str | None = None) -> Lifecycle | None:
        """Load a lifecycle by name; empty or None loads the global lifecycle."""
        return registry.load(name)

    def __repr__(self) -> str:
        return f"Lifecycle(name={self.name!r})"

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def data(self) -> LifecycleData:
        return self._data

    @property
    def registry(self) -> LifecycleRegistry:
        return self._registry

    def reload(self) -> bool:
        """Refresh this handle from the registry. Returns False if it vanished."""
        data = self._registry.snapshot.get(self.name)
        if data is None:
            return False
        self._data = data
        return True

    # ------------------------------------------------------------------
    # Statuses
    # ------------------------------------------------------------------

    def valid(self, *types: str) -> list[str]:
        """All valid statuses, or the concatenation of the requested classes.

        Without arguments, statuses come in initial, active, inactive order
        with case-insensitive duplicates removed. With arguments, the
        requested classes are concatenated in the order given.
        """
        statuses = self._data.statuses
        if not types:
            return list(statuses.all)
        result: list[str] = []
        for status_type in types:
            result.extend(statuses.of_type(status_type))
        return result

    def is_valid(self, status: str | None, *types: str) -> bool:
        return contains_status(self.valid(*types), status)

    def status_type(self, status: str | None) -> str:
        """``initial``, ``active`` or ``inactive``; empty string if unknown."""
        for status_type in STATUS_TYPES:
            if self.is_valid(status, status_type):
                return status_type
        return ""

    def initial(self) -> list[str]:
        return self.valid("initial")

    def active(self) -> list[str]:
        return self.valid("active")

    def inactive(self) -> list[str]:
        return self.valid("inactive")

    def is_initial(self, status: str | None) -> bool:
        return self.is_valid(status, "initial")

    def is_active(self, status: str | None) -> bool:
        return self.is_valid(status, "active")

    def is_inactive(self, status: str | None) -> bool:
        return self.is_valid(status, "inactive")

    def default_initial(self) -> str | None:
        return self._data.default_initial

    def default_inactive(self) -> str | None:
        return self._data.default_inactive

    # ------------------------------------------------------------------
    # Transitions, rights and actions
    # ------------------------------------------------------------------

    def transitions(self, status: str | None = None) -> list[str] | dict[str, list[str]]:
        """Next statuses for ``status``, or the whole transition mapping."""
        if status:
            return list(self._data.transitions.targets(status))
        return self._data.transitions.to_dict()

    def creation_statuses(self) -> list[str]:
        """Statuses a ticket may be created in (the ``""`` transitions key)."""
        return list(self._data.transitions.targets(""))

    def is_transition(self, from_status: str | None, to_status: str | None) -> bool:
        """True when ``from -> to`` is a legal move. Empty sides are never legal."""
        return self._data.transitions.allows(from_status, to_status)

    def check_right(self, from_status: str | None, to_status: str | None) -> str:
        """Right to check on the ticket for the ``from -> to`` move."""
        return self._data.rights.check(from_status, to_status)

    def actions(self, from_status: str | None) -> list[ActionEntry]:
        return resolve_actions(self._data.actions, from_status)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _scoped(self, result: tuple[bool, str]) -> tuple[bool, str]:
        self.reload()
        return result

    def set_statuses(
        self,
        *,
        initial: list[str] | None = None,
        active: list[str] | None = None,
        inactive: list[str] | None = None,
    ) -> tuple[bool, str]:
        if self.name == GLOBAL_LIFECYCLE:
            return False, NOT_LOADED_MESSAGE
        return self._scoped(
            self._registry.set_statuses(
                self.name, initial=initial, active=active, inactive=inactive
            )
        )

    def set_transitions(self, transitions: Mapping[str, list[str]]) -> tuple[bool, str]:
        if self.name == GLOBAL_LIFECYCLE:
            return False, NOT_LOADED_MESSAGE
        return self._scoped(self._registry.set_transitions(self.name, transitions))

    def set_actions(self, actions: Any) -> tuple[bool, str]:
        if self.name == GLOBAL_LIFECYCLE:
            return False, NOT_LOADED_MESSAGE
        return self._scoped(self._registry.set_actions(self.name, actions))

    def set_rights(self, rights: Mapping[str, str]) -> tuple[bool, str]:
        if self.name == GLOBAL_LIFECYCLE:
            return False, NOT_LOADED_MESSAGE
        return self._scoped(self._registry.set_rights(self.name, rights))

    # ------------------------------------------------------------------
    # Lifecycle maps
    # ------------------------------------------------------------------

    def map(self, to: Lifecycle | str) -> dict[str, str]:
        """Status translation table from this lifecycle to ``to``."""
        return self._registry.get_map(self.name, _lifecycle_name(to))

    def set_map(self, to: Lifecycle | str, mapping: Mapping[str, str]) -> tuple[bool, str]:
        if self.name == GLOBAL_LIFECYCLE:
            return False, NOT_LOADED_MESSAGE
        return self._scoped(self._registry.set_map(self.name, _lifecycle_name(to), mapping))

    def has_map(self, to: Lifecycle | str) -> bool:
        return self._registry.has_map(self.name, _lifecycle_name(to))


def _lifecycle_name(value: Lifecycle | str | None) -> str:
    if isinstance(value, Lifecycle):
        return value.name
    return value or GLOBAL_LIFECYCLE
