"""Persistence stores for lifecycle configuration.

A store loads and saves the *entire* source-of-truth structure: every
lifecycle keyed by name plus the reserved ``__maps__`` section. Stores
raise :class:`StoreError` on failure; the registry turns that into an
``(ok, message)`` result for callers.
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .exceptions import StoreError

LIFECYCLES_FILENAME = "lifecycles.yaml"


@runtime_checkable
class LifecycleStore(Protocol):
    """Load/persist contract used by the registry."""

    def load(self) -> dict[str, Any]:
        ...

    def persist(self, data: dict[str, Any]) -> None:
        ...


def _to_plain(value: Any) -> Any:
    """Convert ruamel containers (and tuples) to plain dicts and lists."""
    if isinstance(value, dict):
        return {str(key): _to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    return value


class YamlLifecycleStore:
    """Lifecycle store backed by a single YAML file.

    A missing file loads as an empty configuration. Writes go to a
    temporary sibling file which is then moved into place with
    ``os.replace`` so readers never see a partial file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"YamlLifecycleStore({str(self.path)!r})"

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        yaml = YAML()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = yaml.load(handle)
        except (OSError, YAMLError) as exc:
            raise StoreError(f"Failed to read {self.path}: {exc}") from exc

        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise StoreError(
                f"Invalid lifecycle file {self.path}: expected a mapping, "
                f"got {type(payload).__name__}"
            )
        return _to_plain(payload)

    def persist(self, data: dict[str, Any]) -> None:
        yaml = YAML()
        yaml.default_flow_style = False

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                yaml.dump(_to_plain(data), handle)
            os.replace(str(tmp_path), str(self.path))
        except (OSError, YAMLError) as exc:
            if tmp_path.exists():
                tmp_path.unlink()
            raise StoreError(f"Failed to write {self.path}: {exc}") from exc


class InMemoryLifecycleStore:
    """Store that keeps a private deep copy of the data in memory.

    ``fail_with`` makes every ``persist`` call raise :class:`StoreError`
    with that message, which is handy for exercising failure paths.
    """

    def __init__(self, data: dict[str, Any] | None = None, fail_with: str | None = None):
        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}
        self.fail_with = fail_with
        self.persist_count = 0

    def load(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def persist(self, data: dict[str, Any]) -> None:
        if self.fail_with is not None:
            raise StoreError(self.fail_with)
        self._data = copy.deepcopy(data)
        self.persist_count += 1
