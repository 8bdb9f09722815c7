"""Ticket lifecycle engine.

Public API surface -- all consumers import from this package.
"""

from .actions import normalize_actions, resolve_actions, validate_actions
from .builder import build_snapshot
from .config import (
    LifecycleProjectConfig,
    load_lifecycle_config,
    open_project_registry,
    require_repo_root,
    resolve_store_path,
    save_lifecycle_config,
    update_lifecycle_config,
)
from .exceptions import LifecycleConfigError, LifecycleError, StoreError
from .lifecycle import Lifecycle
from .localization import for_localization
from .models import (
    GLOBAL_LIFECYCLE,
    MAPS_KEY,
    STATUS_TYPES,
    WILDCARD,
    ActionEntry,
    LifecycleData,
    RegistrySnapshot,
    StatusType,
    UpdateKind,
)
from .registry import LifecycleRegistry
from .rights import (
    STATUS_RIGHT_CATEGORY,
    PermissionCatalog,
    permission_catalog,
    register_rights,
    rights_description,
)
from .statuses import STATUS_PATTERN, StatusSet, dedupe_statuses, validate_statuses
from .store import (
    LIFECYCLES_FILENAME,
    InMemoryLifecycleStore,
    LifecycleStore,
    YamlLifecycleStore,
)
from .transitions import (
    DELETE_RIGHT,
    MODIFY_RIGHT,
    RightTable,
    TransitionGraph,
    split_transition_key,
    transition_key,
)

__all__ = [
    "ActionEntry",
    "DELETE_RIGHT",
    "GLOBAL_LIFECYCLE",
    "InMemoryLifecycleStore",
    "LIFECYCLES_FILENAME",
    "Lifecycle",
    "LifecycleConfigError",
    "LifecycleData",
    "LifecycleError",
    "LifecycleProjectConfig",
    "LifecycleRegistry",
    "LifecycleStore",
    "MAPS_KEY",
    "MODIFY_RIGHT",
    "PermissionCatalog",
    "RegistrySnapshot",
    "RightTable",
    "STATUS_PATTERN",
    "STATUS_RIGHT_CATEGORY",
    "STATUS_TYPES",
    "StatusSet",
    "StatusType",
    "StoreError",
    "TransitionGraph",
    "UpdateKind",
    "WILDCARD",
    "YamlLifecycleStore",
    "build_snapshot",
    "dedupe_statuses",
    "for_localization",
    "load_lifecycle_config",
    "normalize_actions",
    "open_project_registry",
    "permission_catalog",
    "register_rights",
    "require_repo_root",
    "resolve_actions",
    "resolve_store_path",
    "rights_description",
    "save_lifecycle_config",
    "split_transition_key",
    "transition_key",
    "update_lifecycle_config",
    "validate_actions",
    "validate_statuses",
]
