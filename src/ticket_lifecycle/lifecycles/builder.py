"""Registry builder: raw lifecycle configuration to an immutable snapshot.

``build_snapshot`` is a pure function. It deep-copies its input, derives
every lifecycle plus the synthetic global lifecycle (``""``), normalizes
actions, transitions and rights, and extracts cross-lifecycle maps.

Malformed configuration never raises here: a missing or non-mapping
configuration builds an empty registry, and malformed pieces of a
lifecycle are skipped with a warning.
"""

from __future__ import annotations

import copy
import logging
from types import MappingProxyType
from typing import Any, Mapping

from .actions import normalize_actions
from .models import (
    GLOBAL_LIFECYCLE,
    MAPS_KEY,
    LifecycleData,
    RegistrySnapshot,
)
from .statuses import StatusSet
from .transitions import RightTable, TransitionGraph, split_transition_key

logger = logging.getLogger(__name__)


def _optional_status(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def build_lifecycle(name: str, definition: Mapping[str, Any]) -> LifecycleData:
    """Build one named lifecycle from its raw definition."""
    actions, problems = normalize_actions(definition.get("actions"))
    for problem in problems:
        logger.warning("Lifecycle %r: skipping %s", name, problem)

    return LifecycleData(
        name=name,
        statuses=StatusSet.from_dict(dict(definition)),
        transitions=TransitionGraph.from_raw(definition.get("transitions"), lifecycle=name),
        rights=RightTable.from_raw(definition.get("rights"), lifecycle=name),
        actions=actions,
        default_initial=_optional_status(definition.get("default_initial")),
        default_inactive=_optional_status(definition.get("default_inactive")),
    )


def build_global_lifecycle(lifecycles: list[LifecycleData]) -> LifecycleData:
    """Synthetic lifecycle whose statuses are the union of all lifecycles."""
    return LifecycleData(
        name=GLOBAL_LIFECYCLE,
        statuses=StatusSet.union(lifecycle.statuses for lifecycle in lifecycles),
        transitions=TransitionGraph(),
        rights=RightTable(),
    )


def build_maps(raw_maps: Any) -> dict[tuple[str, str], Mapping[str, str]]:
    """Extract ``{"from -> to": {status: status}}`` lifecycle maps."""
    if raw_maps is None:
        return {}
    if not isinstance(raw_maps, Mapping):
        logger.warning("Ignoring non-mapping %s section", MAPS_KEY)
        return {}

    maps: dict[tuple[str, str], Mapping[str, str]] = {}
    for key, mapping in raw_maps.items():
        pair = split_transition_key(key)
        if pair is None or not isinstance(mapping, Mapping):
            logger.warning("Ignoring malformed lifecycle map %r", key)
            continue
        maps[pair] = MappingProxyType(
            {
                str(status).lower(): "" if target is None else str(target)
                for status, target in mapping.items()
            }
        )
    return maps


def build_snapshot(raw: Any) -> RegistrySnapshot:
    """Build a complete registry snapshot from raw configuration."""
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning(
                "Lifecycle configuration is a %s, not a mapping; no lifecycles loaded",
                type(raw).__name__,
            )
        raw = {}

    config = copy.deepcopy(dict(raw))

    built: list[LifecycleData] = []
    for name, definition in config.items():
        if name == MAPS_KEY:
            continue
        if not isinstance(name, str) or not name:
            logger.warning("Ignoring lifecycle with invalid name %r", name)
            continue
        if not isinstance(definition, Mapping):
            logger.warning("Ignoring lifecycle %r: definition is not a mapping", name)
            continue
        built.append(build_lifecycle(name, definition))

    lifecycles: dict[str, LifecycleData] = {
        GLOBAL_LIFECYCLE: build_global_lifecycle(built)
    }
    for lifecycle in built:
        lifecycles[lifecycle.name] = lifecycle

    maps = build_maps(config.get(MAPS_KEY))

    logger.debug(
        "Built lifecycle snapshot: %d lifecycle(s), %d map(s)", len(built), len(maps)
    )
    return RegistrySnapshot(
        lifecycles=MappingProxyType(lifecycles),
        maps=MappingProxyType(maps),
    )
