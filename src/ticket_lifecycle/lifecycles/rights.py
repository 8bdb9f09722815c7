"""Rights defined by lifecycle transitions and their registration.

Every right named in a lifecycle's rights table gets a generated,
translatable description. :func:`register_rights` publishes those rights
into a :class:`PermissionCatalog` for the authorization layer; it is an
explicit call made once by the composing application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .models import WILDCARD

if TYPE_CHECKING:
    from .registry import LifecycleRegistry

logger = logging.getLogger(__name__)

STATUS_RIGHT_CATEGORY = "Status"


def _describe_side(values: list[str]) -> str:
    if WILDCARD in values:
        return ""
    distinct: list[str] = []
    for value in values:
        if value not in distinct:
            distinct.append(value)
    return ", ".join(distinct)


def rights_description(registry: LifecycleRegistry) -> dict[str, str]:
    """Map each transition right to a human-readable description.

    Transitions are grouped by the right they require. A side (``from`` or
    ``to``) is left out of the description when any grouped transition
    uses the wildcard for it.
    """
    grouped: dict[str, list[tuple[str, str]]] = {}
    for lifecycle in registry.snapshot.lifecycles.values():
        for from_status, to_status, right in lifecycle.rights.entries:
            grouped.setdefault(right, []).append((from_status, to_status))

    descriptions: dict[str, str] = {}
    for right in sorted(grouped):
        transitions = grouped[right]
        from_side = _describe_side([from_status for from_status, _ in transitions])
        to_side = _describe_side([to_status for _, to_status in transitions])
        description = "Change status"
        if from_side:
            description += f" from {from_side}"
        if to_side:
            description += f" to {to_side}"
        descriptions[right] = description
    return descriptions


@dataclass
class PermissionCatalog:
    """Catalog of right names, descriptions and categories."""

    rights: dict[str, str] = field(default_factory=dict)
    categories: dict[str, list[str]] = field(default_factory=dict)
    _lowercase_names: dict[str, str] = field(default_factory=dict, repr=False)

    def __contains__(self, name: object) -> bool:
        return name in self.rights

    def add_right(self, name: str, description: str, *, category: str | None = None) -> bool:
        """Add a right unless it exists. Returns True when it was added."""
        if name in self.rights:
            return False
        self.rights[name] = description
        self._lowercase_names[name.lower()] = name
        if category:
            self.categories.setdefault(name, []).append(category)
        return True

    def lookup(self, name: str) -> str | None:
        """Canonical spelling of a right name, matched case-insensitively."""
        return self._lowercase_names.get(name.lower())


permission_catalog = PermissionCatalog()


def register_rights(
    registry: LifecycleRegistry,
    catalog: PermissionCatalog | None = None,
) -> list[str]:
    """Publish every lifecycle right into ``catalog``.

    Defaults to the process-wide :data:`permission_catalog`. Rights that
    are already present are skipped, so calling this again is harmless.
    Returns the names that were newly registered.
    """
    catalog = permission_catalog if catalog is None else catalog
    added: list[str] = []
    for right, description in rights_description(registry).items():
        if catalog.add_right(right, description, category=STATUS_RIGHT_CATEGORY):
            added.append(right)
    if added:
        logger.info("Registered %d lifecycle right(s): %s", len(added), ", ".join(added))
    return added
