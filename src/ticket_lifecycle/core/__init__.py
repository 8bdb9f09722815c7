"""Core helpers shared by the lifecycle engine and the CLI."""

from .paths import PROJECT_DIRNAME, locate_project_root

__all__ = ["PROJECT_DIRNAME", "locate_project_root"]
