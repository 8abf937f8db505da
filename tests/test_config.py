"""Tests for specbundle.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from specbundle.config import (
    atomic_write,
    get_config_dir,
    get_data_dir,
    global_config_path,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
    supported_formats,
)
from specbundle.exceptions import ConfigError
from specbundle.models import DocumentFormat, GlobalConfig, ResolverConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    """XDG paths on Linux (the default XDG platform)."""

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specbundle.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "specbundle"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("specbundle.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        result = get_config_dir()
        assert result == custom / "specbundle"
        assert result.is_dir()

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specbundle.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "specbundle"
        assert result.is_dir()


class TestXDGPathsFallback:
    """Non-XDG platforms (macOS, Windows) use ~/.specbundle/."""

    def test_config_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specbundle.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".specbundle"

    def test_data_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specbundle.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_data_dir() == tmp_path / ".specbundle" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "bundled.json"
        atomic_write(target, '{"a": 1}\n')
        assert target.read_text(encoding="utf-8") == '{"a": 1}\n'

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "bundled.json"
        target.write_text("old content", encoding="utf-8")
        atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "out" / "v2" / "bundled.yaml"
        atomic_write(target, "openapi: 3.0.0\n")
        assert target.read_text(encoding="utf-8") == "openapi: 3.0.0\n"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "bundled.json"
        atomic_write(target, "content")
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "bundled.json"
        with patch("specbundle.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []

    def test_unicode_content(self, tmp_path: Path) -> None:
        target = tmp_path / "unicode.txt"
        content = "Café 世界"
        atomic_write(target, content)
        assert target.read_text(encoding="utf-8") == content


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        cfg = load_global_config()
        assert cfg == GlobalConfig()
        assert cfg.resolver.max_passes == 3
        assert cfg.resolver.cleanup.stub_all_unresolved is True
        assert cfg.output.format == DocumentFormat.JSON

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        original = GlobalConfig(resolver=ResolverConfig(max_passes=7, inject_definitions=False))
        save_global_config(original)
        assert load_global_config() == original

    def test_saved_config_location(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig())
        path = isolated_config / "config" / "specbundle" / "config.json"
        assert global_config_path() == path
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["output"]["format"] == "json"

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        global_config_path().write_text("{invalid json!!!", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"resolver": {"max_passes": 0}})
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_load_returns_none_when_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_load_valid_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specbundle.json", {"resolver": {"max_passes": 5}})
        assert load_project_config() == {"resolver": {"max_passes": 5}}

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (isolated_config / "specbundle.json").write_text("nope{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specbundle.json", [1, 2])
        with pytest.raises(ConfigError, match="JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """Test the full precedence chain: CLI > env > project > global > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == GlobalConfig()

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(resolver=ResolverConfig(max_passes=2, inject_definitions=False)))
        _write_json(isolated_config / "specbundle.json", {"resolver": {"max_passes": 5}})

        cfg = resolve_config()
        assert cfg.resolver.max_passes == 5
        # Untouched keys of the same section survive the merge.
        assert cfg.resolver.inject_definitions is False

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "specbundle.json", {"resolver": {"max_passes": 5}})
        monkeypatch.setenv("SPECBUNDLE_MAX_PASSES", "8")
        monkeypatch.setenv("SPECBUNDLE_FORMAT", "yaml")

        cfg = resolve_config()
        assert cfg.resolver.max_passes == 8
        assert cfg.output.format == DocumentFormat.YAML

    def test_cli_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECBUNDLE_MAX_PASSES", "8")
        monkeypatch.setenv("SPECBUNDLE_FORMAT", "yaml")

        cfg = resolve_config(cli_max_passes=1, cli_format="json")
        assert cfg.resolver.max_passes == 1
        assert cfg.output.format == DocumentFormat.JSON

    def test_cli_switches(self, isolated_config: Path) -> None:
        cfg = resolve_config(cli_inject_definitions=False, cli_normalize=False)
        assert cfg.resolver.inject_definitions is False
        assert cfg.normalize.dedupe_responses is False
        assert cfg.normalize.sanitize_text is False

    def test_non_integer_env_raises(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECBUNDLE_MAX_PASSES", "many")
        with pytest.raises(ConfigError, match="SPECBUNDLE_MAX_PASSES"):
            resolve_config()

    def test_invalid_format_raises(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECBUNDLE_FORMAT", "xml")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config()

    def test_supported_formats(self) -> None:
        assert supported_formats() == ["json", "yaml"]
