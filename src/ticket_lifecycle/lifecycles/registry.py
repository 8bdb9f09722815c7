"""Lifecycle registry: the shared, rebuild-on-write lifecycle cache.

The registry owns two things:

* the *source-of-truth map*, a plain mutable mapping in the persisted
  shape, read once from the configuration source and staged by mutations;
* the published :class:`RegistrySnapshot`, rebuilt wholesale from the
  source-of-truth map and swapped in through a single reference.

Readers only ever touch the current snapshot. Writers are serialized by a
lock around stage -> persist -> rebuild. If the store fails to persist,
the staged change is rolled back before the snapshot is rebuilt.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Mapping

from .actions import actions_to_raw, normalize_actions, validate_actions
from .builder import build_snapshot
from .exceptions import StoreError
from .lifecycle import NOT_LOADED_MESSAGE, Lifecycle
from .models import GLOBAL_LIFECYCLE, MAPS_KEY, RegistrySnapshot
from .statuses import clean_status_lists, contains_status, validate_statuses
from .store import LifecycleStore
from .transitions import transition_key, validate_rights, validate_transitions

logger = logging.getLogger(__name__)

INVALID_NAME_MESSAGE = "Invalid lifecycle name"
ALREADY_EXISTS_MESSAGE = "Already exist"
STORE_FAILED_MESSAGE = "Couldn't store lifecycle"
INVALID_MAP_MESSAGE = "Invalid map data"

Stager = Callable[[dict[str, Any]], None]


class LifecycleRegistry:
    """Process-wide lifecycle cache with a pluggable persistence store.

    Args:
        store: Store used to persist the source-of-truth map after every
            mutation. When ``source`` is not given, the store's ``load()``
            is also the configuration source.
        source: Raw configuration mapping, read once on first use.
    """

    def __init__(
        self,
        store: LifecycleStore | None = None,
        source: Mapping[str, Any] | None = None,
    ):
        self._store = store
        self._source = source
        self._data: dict[str, Any] | None = None
        self._snapshot: RegistrySnapshot | None = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Cache fill
    # ------------------------------------------------------------------

    def _read_source(self) -> dict[str, Any]:
        if self._source is not None:
            raw: Any = self._source
        elif self._store is not None:
            try:
                raw = self._store.load()
            except StoreError as exc:
                logger.warning("Could not load lifecycle configuration: %s", exc)
                raw = {}
        else:
            raw = {}
        if not isinstance(raw, Mapping):
            logger.warning("Lifecycle configuration is not a mapping; starting empty")
            return {}
        return copy.deepcopy(dict(raw))

    def _ensure_data(self) -> dict[str, Any]:
        if self._data is None:
            self._data = self._read_source()
        return self._data

    def _publish(self) -> RegistrySnapshot:
        snapshot = build_snapshot(self._ensure_data())
        self._snapshot = snapshot
        return snapshot

    @property
    def snapshot(self) -> RegistrySnapshot:
        """Current snapshot, filling the cache on first use."""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                logger.debug("Filling lifecycle cache")
                self._publish()
            return self._snapshot

    def rebuild(self) -> RegistrySnapshot:
        """Rebuild the snapshot from the source-of-truth map."""
        with self._lock:
            return self._publish()

    def reset(self) -> None:
        """Drop cached data; the next read re-reads the configuration source."""
        with self._lock:
            self._data = None
            self._snapshot = None

    def source_data(self) -> dict[str, Any]:
        """Deep copy of the source-of-truth map, in the persisted shape."""
        with self._lock:
            return copy.deepcopy(self._ensure_data())

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def load(self, name: str | None = None) -> Lifecycle | None:
        """Handle on lifecycle ``name``; ``None`` if it is not configured."""
        data = self.snapshot.get(name)
        if data is None:
            return None
        return Lifecycle(self, data)

    def list(self) -> list[str]:
        """Sorted names of configured lifecycles."""
        return self.snapshot.names()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(name) and name in self.snapshot.lifecycles

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _commit(self, stage: Stager, message: str, description: str) -> tuple[bool, str]:
        """Stage a change, persist everything, and rebuild.

        Must be called with the writer lock held. Any failure while staging
        or persisting restores the source-of-truth map; ``StoreError``
        becomes an ``(ok, message)`` result and anything else is re-raised.
        """
        data = self._ensure_data()
        backup = copy.deepcopy(data)

        try:
            stage(data)
            if self._store is not None:
                self._store.persist(copy.deepcopy(data))
        except StoreError as exc:
            logger.error("Failed to persist %s: %s", description, exc)
            self._rollback(backup)
            return False, f"{STORE_FAILED_MESSAGE}: {exc}"
        except Exception:
            logger.exception("Unexpected error while committing %s", description)
            self._rollback(backup)
            raise

        self._publish()
        logger.info("Committed %s", description)
        return True, message

    def _rollback(self, backup: dict[str, Any]) -> None:
        self._data = backup
        self._publish()

    def _require_named(self, name: str | None) -> bool:
        return bool(name) and name != GLOBAL_LIFECYCLE and name in self.snapshot.lifecycles

    def create_lifecycle(
        self,
        name: str | None,
        *,
        initial: list[str] | None = None,
        active: list[str] | None = None,
        inactive: list[str] | None = None,
        transitions: Mapping[str, list[str]] | None = None,
        actions: Any = None,
        rights: Mapping[str, str] | None = None,
        default_initial: str | None = None,
        default_inactive: str | None = None,
    ) -> tuple[bool, str]:
        """Create and persist a new lifecycle. Returns (ok, message).

        All arguments except ``name`` are optional and can be filled later
        through the handle returned by ``load(name)``.
        """
        if not name or not isinstance(name, str) or name == MAPS_KEY:
            return False, INVALID_NAME_MESSAGE

        statuses = clean_status_lists(initial=initial, active=active, inactive=inactive)
        ok, error = validate_statuses(statuses)
        if not ok:
            return False, error or INVALID_NAME_MESSAGE

        if default_initial and not contains_status(statuses["initial"], default_initial):
            return False, "Default initial status must be one of the initial statuses"
        if default_inactive and not contains_status(statuses["inactive"], default_inactive):
            return False, "Default inactive status must be one of the inactive statuses"

        for value, validator in (
            (transitions, validate_transitions),
            (actions, validate_actions),
            (rights, validate_rights),
        ):
            if value is not None:
                ok, error = validator(value)
                if not ok:
                    return False, error or "Invalid lifecycle data"

        definition: dict[str, Any] = {
            **statuses,
            "default_initial": default_initial or None,
            "default_inactive": default_inactive or None,
            "transitions": _plain_transitions(transitions or {}),
            "actions": _plain_actions(actions),
            "rights": dict(rights or {}),
        }

        with self._lock:
            if name in self.snapshot.lifecycles or name in self._ensure_data():
                return False, ALREADY_EXISTS_MESSAGE

            def _stage(data: dict[str, Any]) -> None:
                data[name] = definition

            return self._commit(_stage, "Created a new lifecycle", f"new lifecycle {name!r}")

    def _update(self, name: str, field_values: dict[str, Any], message: str) -> tuple[bool, str]:
        with self._lock:
            if not self._require_named(name):
                return False, NOT_LOADED_MESSAGE

            def _stage(data: dict[str, Any]) -> None:
                definition = data.get(name)
                if not isinstance(definition, dict):
                    definition = {}
                    data[name] = definition
                definition.update(copy.deepcopy(field_values))

            return self._commit(_stage, message, f"{', '.join(field_values)} of lifecycle {name!r}")

    def set_statuses(
        self,
        name: str,
        *,
        initial: list[str] | None = None,
        active: list[str] | None = None,
        inactive: list[str] | None = None,
    ) -> tuple[bool, str]:
        """Replace all three status classes of a lifecycle."""
        statuses = clean_status_lists(initial=initial, active=active, inactive=inactive)
        ok, error = validate_statuses(statuses)
        if not ok:
            return False, error or "Invalid statuses"
        return self._update(name, statuses, "Updated lifecycle")

    def set_transitions(self, name: str, transitions: Mapping[str, list[str]]) -> tuple[bool, str]:
        ok, error = validate_transitions(transitions)
        if not ok:
            return False, error or "Invalid transitions data"
        return self._update(
            name,
            {"transitions": _plain_transitions(transitions)},
            "Updated lifecycle with transitions data",
        )

    def set_actions(self, name: str, actions: Any) -> tuple[bool, str]:
        ok, error = validate_actions(actions)
        if not ok:
            return False, error or "Invalid actions data"
        return self._update(
            name,
            {"actions": _plain_actions(actions)},
            "Updated lifecycle with actions data",
        )

    def set_rights(self, name: str, rights: Mapping[str, str]) -> tuple[bool, str]:
        ok, error = validate_rights(rights)
        if not ok:
            return False, error or "Invalid rights data"
        return self._update(name, {"rights": dict(rights)}, "Updated lifecycle with rights data")

    # ------------------------------------------------------------------
    # Lifecycle maps
    # ------------------------------------------------------------------

    def get_map(self, from_name: str, to_name: str) -> dict[str, str]:
        """Status translation table between two lifecycles, or ``{}``."""
        return dict(self.snapshot.get_map(from_name, to_name))

    def set_map(self, from_name: str, to_name: str, mapping: Mapping[str, str]) -> tuple[bool, str]:
        """Store the status map used when tickets move between lifecycles.

        Keys are stored lower-cased. Keys must be statuses of the source
        lifecycle; non-blank targets must be statuses of the target one.
        """
        with self._lock:
            source = self.load(from_name) if self._require_named(from_name) else None
            target = self.load(to_name) if self._require_named(to_name) else None
            if source is None or target is None:
                return False, NOT_LOADED_MESSAGE
            if not isinstance(mapping, Mapping):
                return False, INVALID_MAP_MESSAGE

            table: dict[str, str] = {}
            for status, mapped in mapping.items():
                if not isinstance(status, str) or not isinstance(mapped, (str, type(None))):
                    return False, INVALID_MAP_MESSAGE
                if not source.is_valid(status):
                    return False, f"Status '{status}' is not valid in lifecycle '{from_name}'"
                mapped = mapped or ""
                if mapped and not target.is_valid(mapped):
                    return False, f"Status '{mapped}' is not valid in lifecycle '{to_name}'"
                table[status.lower()] = mapped

            def _stage(data: dict[str, Any]) -> None:
                maps = data.get(MAPS_KEY)
                if not isinstance(maps, dict):
                    maps = {}
                    data[MAPS_KEY] = maps
                maps[transition_key(from_name, to_name)] = table

            return self._commit(
                _stage, "Updated lifecycle map", f"map {from_name!r} -> {to_name!r}"
            )

    def has_map(self, from_name: str, to_name: str) -> bool:
        """True when a map exists and translates at least one status."""
        mapping = self.snapshot.get_map(from_name, to_name)
        return any(mapping.values())

    def unmapped_lifecycle_pairs(self) -> list[tuple[str, str]]:
        """Ordered pairs of distinct lifecycles that lack a usable map."""
        names = self.list()
        return [
            (from_name, to_name)
            for from_name in names
            for to_name in names
            if from_name != to_name and not self.has_map(from_name, to_name)
        ]


def _plain_transitions(transitions: Mapping[str, list[str]]) -> dict[str, list[str]]:
    return {status: list(targets) for status, targets in transitions.items()}


def _plain_actions(actions: Any) -> list[dict[str, Any]]:
    entries, _problems = normalize_actions(actions)
    return actions_to_raw(entries)
