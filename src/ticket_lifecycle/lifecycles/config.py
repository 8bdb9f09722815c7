"""Project-scoped lifecycle configuration.

The ``lifecycles`` section of ``.tickets/config.yaml`` says where the
lifecycle file lives and whether lifecycle rights are registered in the
permission catalog. Other sections of the file belong to other tools and
are carried through untouched when the section is rewritten.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ticket_lifecycle.core.paths import PROJECT_DIRNAME, locate_project_root

from .exceptions import LifecycleConfigError
from .registry import LifecycleRegistry
from .rights import register_rights
from .store import LIFECYCLES_FILENAME, YamlLifecycleStore

logger = logging.getLogger(__name__)

STORE_ENV_VAR = "TICKET_LIFECYCLE_STORE"
CONFIG_FILENAME = "config.yaml"
SECTION_KEY = "lifecycles"


@dataclass(slots=True)
class LifecycleProjectConfig:
    """Lifecycle configuration stored inside .tickets/config.yaml."""

    store_path: str = LIFECYCLES_FILENAME
    register_rights: bool = True

    def to_dict(self) -> dict[str, object]:
        return {
            "store_path": self.store_path,
            "register_rights": self.register_rights,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> "LifecycleProjectConfig":
        if not isinstance(data, dict):
            return cls()

        store_path = data.get("store_path")
        register = data.get("register_rights")
        return cls(
            store_path=store_path.strip()
            if isinstance(store_path, str) and store_path.strip()
            else LIFECYCLES_FILENAME,
            register_rights=register if isinstance(register, bool) else True,
        )


def require_repo_root(start: Path | None = None) -> Path:
    """Project root above ``start`` (default: cwd); raises when there is none."""
    found = locate_project_root(start)
    if found is not None:
        return found
    raise LifecycleConfigError(
        f"Not inside a ticket project: no {PROJECT_DIRNAME}/ directory above "
        f"{(start or Path.cwd()).resolve()}"
    )


def config_file(repo_root: Path) -> Path:
    return repo_root / PROJECT_DIRNAME / CONFIG_FILENAME


def _read_document(yaml: YAML, path: Path) -> Any:
    """Parsed config document, or an empty mapping when there is none."""
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            document = yaml.load(handle)
    except (OSError, YAMLError) as exc:
        raise LifecycleConfigError(f"Failed to parse {path}: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        logger.warning("Ignoring %s: top level is not a mapping", path)
        return {}
    return document


def load_lifecycle_config(repo_root: Path) -> LifecycleProjectConfig:
    document = _read_document(YAML(), config_file(repo_root))
    section = document.get(SECTION_KEY)
    return LifecycleProjectConfig.from_dict(dict(section) if isinstance(section, dict) else None)


def save_lifecycle_config(repo_root: Path, config: LifecycleProjectConfig) -> None:
    """Rewrite the ``lifecycles`` section in place, keeping the rest of the file.

    The file is written to a temporary sibling first and moved over the
    original, like the lifecycle store does.
    """
    path = config_file(repo_root)
    yaml = YAML()
    yaml.preserve_quotes = True

    document = _read_document(yaml, path)
    document[SECTION_KEY] = config.to_dict()

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding="utf-8") as handle:
            yaml.dump(document, handle)
        os.replace(str(tmp_path), str(path))
    except (OSError, YAMLError) as exc:
        if tmp_path.exists():
            tmp_path.unlink()
        raise LifecycleConfigError(f"Failed to write {path}: {exc}") from exc
    logger.info("Saved lifecycle configuration to %s", path)


def update_lifecycle_config(
    repo_root: Path,
    *,
    store_path: str | None = None,
    register_rights: bool | None = None,
) -> LifecycleProjectConfig:
    """Change the given settings, save, and return the resulting config."""
    changes: dict[str, Any] = {}
    if store_path is not None:
        if not store_path.strip():
            raise LifecycleConfigError("Store path must not be empty")
        changes["store_path"] = store_path.strip()
    if register_rights is not None:
        changes["register_rights"] = register_rights

    config = replace(load_lifecycle_config(repo_root), **changes)
    save_lifecycle_config(repo_root, config)
    return config


def resolve_store_path(repo_root: Path, config: LifecycleProjectConfig) -> Path:
    """Lifecycle file location; the environment override wins over config."""
    override = os.environ.get(STORE_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    store_path = Path(config.store_path).expanduser()
    if store_path.is_absolute():
        return store_path
    return repo_root / PROJECT_DIRNAME / store_path


def open_project_registry(repo_root: Path) -> LifecycleRegistry:
    """Build a registry persisted to the project's lifecycle file.

    Registers lifecycle rights in the process-wide permission catalog
    unless the project config turns that off.
    """
    config = load_lifecycle_config(repo_root)
    store_path = resolve_store_path(repo_root, config)
    logger.debug("Using lifecycle store %s", store_path)

    registry = LifecycleRegistry(store=YamlLifecycleStore(store_path))
    if config.register_rights:
        register_rights(registry)
    return registry
