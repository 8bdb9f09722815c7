"""Tests for project lifecycle configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from ticket_lifecycle.lifecycles import (
    LifecycleConfigError,
    LifecycleError,
    LifecycleProjectConfig,
    StoreError,
    YamlLifecycleStore,
    load_lifecycle_config,
    open_project_registry,
    require_repo_root,
    resolve_store_path,
    save_lifecycle_config,
    update_lifecycle_config,
)
from ticket_lifecycle.lifecycles.config import STORE_ENV_VAR


def test_error_hierarchy() -> None:
    assert issubclass(StoreError, LifecycleError)
    assert issubclass(LifecycleConfigError, LifecycleError)
    assert issubclass(LifecycleConfigError, RuntimeError)


class TestProjectConfig:
    def test_defaults(self) -> None:
        config = LifecycleProjectConfig()
        assert config.store_path == "lifecycles.yaml"
        assert config.register_rights is True

    def test_from_dict_ignores_bad_values(self) -> None:
        config = LifecycleProjectConfig.from_dict({"store_path": "  ", "register_rights": "no"})
        assert config == LifecycleProjectConfig()

    def test_from_dict(self) -> None:
        config = LifecycleProjectConfig.from_dict(
            {"store_path": "config/lifecycles.yaml", "register_rights": False}
        )
        assert config.to_dict() == {
            "store_path": "config/lifecycles.yaml",
            "register_rights": False,
        }

    def test_from_non_dict(self) -> None:
        assert LifecycleProjectConfig.from_dict(None) == LifecycleProjectConfig()


class TestLoadSave:
    def test_missing_config_uses_defaults(self, tmp_path: Path) -> None:
        assert load_lifecycle_config(tmp_path) == LifecycleProjectConfig()

    def test_save_preserves_other_sections(self, tmp_path: Path) -> None:
        config_path = tmp_path / ".tickets" / "config.yaml"
        config_path.parent.mkdir()
        config_path.write_text("tracker:\n  provider: jira\n", encoding="utf-8")

        save_lifecycle_config(tmp_path, LifecycleProjectConfig(store_path="flows.yaml"))

        text = config_path.read_text(encoding="utf-8")
        assert "provider: jira" in text
        assert load_lifecycle_config(tmp_path).store_path == "flows.yaml"

    def test_save_creates_config(self, tmp_path: Path) -> None:
        save_lifecycle_config(tmp_path, LifecycleProjectConfig(register_rights=False))
        assert load_lifecycle_config(tmp_path).register_rights is False

    def test_invalid_config_raises(self, tmp_path: Path) -> None:
        config_path = tmp_path / ".tickets" / "config.yaml"
        config_path.parent.mkdir()
        config_path.write_text("lifecycles: [unclosed\n", encoding="utf-8")
        with pytest.raises(LifecycleConfigError, match="Failed to parse"):
            load_lifecycle_config(tmp_path)

    def test_non_mapping_document_is_ignored(self, tmp_path: Path, caplog) -> None:
        config_path = tmp_path / ".tickets" / "config.yaml"
        config_path.parent.mkdir()
        config_path.write_text("- one\n- two\n", encoding="utf-8")

        assert load_lifecycle_config(tmp_path) == LifecycleProjectConfig()
        assert "top level is not a mapping" in caplog.text

    def test_save_leaves_no_temporary_file(self, tmp_path: Path) -> None:
        save_lifecycle_config(tmp_path, LifecycleProjectConfig())
        assert not (tmp_path / ".tickets" / "config.yaml.tmp").exists()

    def test_unwritable_config_raises(self, tmp_path: Path) -> None:
        (tmp_path / ".tickets").write_text("not a directory", encoding="utf-8")
        with pytest.raises(LifecycleConfigError, match="Failed to write"):
            save_lifecycle_config(tmp_path, LifecycleProjectConfig())


class TestUpdate:
    def test_changes_only_given_settings(self, tmp_path: Path) -> None:
        update_lifecycle_config(tmp_path, store_path="flows.yaml")
        config = update_lifecycle_config(tmp_path, register_rights=False)

        assert config == LifecycleProjectConfig(store_path="flows.yaml", register_rights=False)
        assert load_lifecycle_config(tmp_path) == config

    def test_strips_store_path(self, tmp_path: Path) -> None:
        assert update_lifecycle_config(tmp_path, store_path=" flows.yaml ").store_path == "flows.yaml"

    def test_blank_store_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(LifecycleConfigError, match="must not be empty"):
            update_lifecycle_config(tmp_path, store_path=" ")


class TestStorePath:
    def test_relative_to_project_dir(self, tmp_path: Path) -> None:
        path = resolve_store_path(tmp_path, LifecycleProjectConfig())
        assert path == tmp_path / ".tickets" / "lifecycles.yaml"

    def test_absolute_path(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere" / "flows.yaml"
        path = resolve_store_path(tmp_path, LifecycleProjectConfig(store_path=str(target)))
        assert path == target

    def test_environment_override(self, tmp_path: Path, monkeypatch) -> None:
        override = tmp_path / "override.yaml"
        monkeypatch.setenv(STORE_ENV_VAR, str(override))
        assert resolve_store_path(tmp_path, LifecycleProjectConfig()) == override


class TestRepoRoot:
    def test_finds_root_from_subdirectory(self, ticket_project: Path) -> None:
        nested = ticket_project / "src" / "pkg"
        nested.mkdir(parents=True)
        assert require_repo_root(nested) == ticket_project.resolve()

    def test_outside_project_raises(self, tmp_path: Path) -> None:
        with pytest.raises(LifecycleConfigError, match="Not inside a ticket project"):
            require_repo_root(tmp_path)


class TestOpenProjectRegistry:
    def test_opens_project_lifecycles(self, ticket_project: Path) -> None:
        registry = open_project_registry(ticket_project)
        assert registry.list() == ["default", "support"]

    def test_mutations_are_written_to_project_file(self, ticket_project: Path) -> None:
        registry = open_project_registry(ticket_project)
        registry.create_lifecycle("triage", initial=["new"])

        stored = YamlLifecycleStore(ticket_project / ".tickets" / "lifecycles.yaml").load()
        assert stored["triage"]["initial"] == ["new"]

    def test_configured_store_path(self, ticket_project: Path, lifecycle_config) -> None:
        YamlLifecycleStore(ticket_project / ".tickets" / "flows.yaml").persist(
            {"only": lifecycle_config["support"]}
        )
        save_lifecycle_config(ticket_project, LifecycleProjectConfig(store_path="flows.yaml"))
        assert open_project_registry(ticket_project).list() == ["only"]
