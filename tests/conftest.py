from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest

from ticket_lifecycle.lifecycles import (
    InMemoryLifecycleStore,
    LifecycleRegistry,
    YamlLifecycleStore,
)
from ticket_lifecycle.lifecycles.config import STORE_ENV_VAR

LIFECYCLE_CONFIG: dict[str, Any] = {
    "default": {
        "initial": ["new"],
        "active": ["open", "stalled"],
        "inactive": ["resolved", "rejected", "deleted"],
        "default_initial": "new",
        "default_inactive": "resolved",
        "transitions": {
            "": ["new", "open", "resolved"],
            "new": ["open", "resolved", "rejected", "deleted"],
            "open": ["stalled", "resolved", "rejected", "deleted"],
            "stalled": ["open", "rejected", "resolved", "deleted"],
            "resolved": ["open"],
            "rejected": ["open"],
            "deleted": ["open"],
        },
        "rights": {
            "* -> deleted": "DeleteTicket",
            "* -> rejected": "RejectTicket",
            "rejected -> *": "ReopenTicket",
            "* -> *": "ModifyTicket",
        },
        "actions": [
            "new -> open", {"label": "Open It", "update": "Respond"},
            "new -> resolved", {"label": "Resolve", "update": "Comment"},
            "new -> rejected", {"label": "Reject", "update": "Respond"},
            "* -> deleted", {"label": "Delete"},
            "* -> open", {"label": "Reopen"},
            "open -> resolved", {"label": "Resolve", "update": "Comment"},
        ],
    },
    "support": {
        "initial": ["new"],
        "active": ["open", "Waiting"],
        "inactive": ["closed"],
        "transitions": {
            "new": ["open"],
            "open": ["waiting", "closed"],
            "waiting": ["open", "closed"],
            "closed": ["open"],
        },
        "rights": {"* -> closed": "CloseTicket"},
    },
    "__maps__": {
        "default -> support": {
            "new": "new",
            "open": "open",
            "stalled": "waiting",
            "resolved": "closed",
            "rejected": "closed",
            "deleted": "closed",
        },
    },
}


@pytest.fixture(autouse=True)
def _isolate_store_override(monkeypatch) -> None:
    monkeypatch.delenv(STORE_ENV_VAR, raising=False)


@pytest.fixture
def lifecycle_config() -> dict[str, Any]:
    return copy.deepcopy(LIFECYCLE_CONFIG)


@pytest.fixture
def memory_store(lifecycle_config: dict[str, Any]) -> InMemoryLifecycleStore:
    return InMemoryLifecycleStore(lifecycle_config)


@pytest.fixture
def registry(memory_store: InMemoryLifecycleStore) -> LifecycleRegistry:
    return LifecycleRegistry(store=memory_store)


@pytest.fixture
def ticket_project(tmp_path: Path, monkeypatch, lifecycle_config: dict[str, Any]) -> Path:
    """Project directory with .tickets/lifecycles.yaml, used as the cwd."""
    (tmp_path / ".tickets").mkdir()
    YamlLifecycleStore(tmp_path / ".tickets" / "lifecycles.yaml").persist(lifecycle_config)
    monkeypatch.chdir(tmp_path)
    return tmp_path
