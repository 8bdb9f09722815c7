"""Exception hierarchy for lifecycle configuration and persistence."""

from __future__ import annotations


class LifecycleError(Exception):
    """Base exception for lifecycle errors."""


class StoreError(LifecycleError):
    """Raised when a lifecycle store cannot load or persist its data."""


class LifecycleConfigError(LifecycleError, RuntimeError):
    """Raised when project lifecycle configuration is invalid."""
