"""
Unit tests for configuration loader.

Tests multi-layer config merging, environment variable overrides,
caching, and XDG directory handling.
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from brp_launch.core.config import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
)
from brp_launch.core.config.loader import (
    apply_env_overrides,
    deep_merge,
    get_default_config,
    get_xdg_config_home,
    load_json_file,
)
from brp_launch.core.config.models import (
    DEFAULT_PORT,
    MAX_VALID_PORT,
    PORT_ENV_VAR,
    LauncherConfig,
)

ENV_VARS = [
    "BRP_LAUNCH_PORT",
    "BRP_LAUNCH_PROFILE",
    "BRP_LAUNCH_LOG_DIR",
    "BRP_LAUNCH_BUILD_TOOL",
    "BRP_LAUNCH_REQUIRED_DEPENDENCY",
]


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict:
    """Point user config at tmp_path and clear BRP_LAUNCH_* variables."""
    xdg_home = tmp_path / "xdg"
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg_home))
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return {
        "user_config": xdg_home / "brp-launch" / "config.json",
        "project_dir": project_dir,
        "project_config": project_dir / ".brp-launch.json",
    }


def write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


# ==============================================================================
# Helper Functions Tests
# ==============================================================================


class TestDeepMerge:
    """Test the deep_merge helper function."""

    def test_simple_merge(self):
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        """Nested dicts are merged key by key."""
        base = {"scan": {"max_depth": 4, "required_dependency": "bevy"}}
        override = {"scan": {"max_depth": 2}}
        result = deep_merge(base, override)
        assert result == {"scan": {"max_depth": 2, "required_dependency": "bevy"}}

    def test_override_replaces_non_dict(self):
        base = {"scan": {"search_roots": ["a", "b"]}}
        result = deep_merge(base, {"scan": {"search_roots": ["c"]}})
        assert result["scan"]["search_roots"] == ["c"]

    def test_base_is_not_mutated(self):
        base = {"scan": {"max_depth": 4}}
        deep_merge(base, {"scan": {"max_depth": 1}})
        assert base == {"scan": {"max_depth": 4}}


class TestLoadJsonFile:
    """Test JSON file loading."""

    def test_load_existing_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        write_json(config_file, {"default_port": 20000})
        assert load_json_file(config_file) == {"default_port": 20000}

    def test_missing_file_returns_none(self, tmp_path):
        assert load_json_file(tmp_path / "missing.json") is None

    def test_invalid_json_returns_none(self, tmp_path, capsys):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        assert load_json_file(config_file) is None
        assert "Warning: Failed to parse config" in capsys.readouterr().out

    def test_non_object_returns_none(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("[1, 2, 3]")
        assert load_json_file(config_file) is None


class TestPaths:
    """Test config path helpers."""

    def test_xdg_config_home_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_xdg_config_home() == tmp_path

    def test_xdg_config_home_default(self, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert get_xdg_config_home() == Path.home() / ".config"

    def test_user_config_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_user_config_path() == tmp_path / "brp-launch" / "config.json"

    def test_project_config_path(self, tmp_path):
        assert get_project_config_path(tmp_path) == tmp_path / ".brp-launch.json"


# ==============================================================================
# Environment Overrides
# ==============================================================================


class TestApplyEnvOverrides:
    """Test BRP_LAUNCH_* environment overrides."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for var in ENV_VARS:
            monkeypatch.delenv(var, raising=False)

    def test_no_env_vars_leaves_config_unchanged(self):
        config = get_default_config()
        assert apply_env_overrides(config) == config

    def test_port_override(self, monkeypatch):
        monkeypatch.setenv("BRP_LAUNCH_PORT", "20000")
        assert apply_env_overrides({})["default_port"] == 20000

    def test_invalid_port_is_ignored(self, monkeypatch, capsys):
        monkeypatch.setenv("BRP_LAUNCH_PORT", "not-a-port")
        assert "default_port" not in apply_env_overrides({})
        assert "Invalid BRP_LAUNCH_PORT" in capsys.readouterr().out

    def test_out_of_range_port_is_ignored(self, monkeypatch, capsys):
        monkeypatch.setenv("BRP_LAUNCH_PORT", "70000")
        assert "default_port" not in apply_env_overrides({})
        assert "must be 1-65535" in capsys.readouterr().out

    def test_profile_override(self, monkeypatch):
        monkeypatch.setenv("BRP_LAUNCH_PROFILE", "release")
        assert apply_env_overrides({})["default_profile"] == "release"

    def test_invalid_profile_is_ignored(self, monkeypatch):
        monkeypatch.setenv("BRP_LAUNCH_PROFILE", "fast")
        assert "default_profile" not in apply_env_overrides({})

    def test_log_dir_and_build_tool(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BRP_LAUNCH_LOG_DIR", str(tmp_path))
        monkeypatch.setenv("BRP_LAUNCH_BUILD_TOOL", "cross")
        result = apply_env_overrides({})
        assert result["log_dir"] == str(tmp_path)
        assert result["build_tool"] == "cross"

    def test_required_dependency_override_keeps_other_scan_keys(self, monkeypatch):
        monkeypatch.setenv("BRP_LAUNCH_REQUIRED_DEPENDENCY", "macroquad")
        result = apply_env_overrides({"scan": {"max_depth": 2}})
        assert result["scan"] == {"max_depth": 2, "required_dependency": "macroquad"}

    @pytest.mark.parametrize("value", ["none", "NONE", ""])
    def test_required_dependency_can_be_disabled(self, monkeypatch, value):
        monkeypatch.setenv("BRP_LAUNCH_REQUIRED_DEPENDENCY", value)
        assert apply_env_overrides({})["scan"]["required_dependency"] is None


# ==============================================================================
# load_config Integration
# ==============================================================================


class TestLoadConfig:
    """Test full layered loading."""

    def test_defaults(self, isolated_config):
        config = load_config(isolated_config["project_dir"], use_cache=False)

        assert isinstance(config, LauncherConfig)
        assert config.default_port == DEFAULT_PORT
        assert config.max_valid_port == MAX_VALID_PORT
        assert config.port_env_var == PORT_ENV_VAR
        assert config.default_profile == "debug"
        assert config.scan.max_depth == 4
        assert config.scan.required_dependency == "bevy"

    def test_precedence_env_over_project_over_user(self, isolated_config, monkeypatch):
        write_json(
            isolated_config["user_config"],
            {"default_port": 16000, "default_profile": "release", "build_tool": "cross"},
        )
        write_json(isolated_config["project_config"], {"default_port": 17000})
        monkeypatch.setenv("BRP_LAUNCH_PROFILE", "debug")

        config = load_config(isolated_config["project_dir"], use_cache=False)

        assert config.default_port == 17000  # project beats user
        assert config.default_profile == "debug"  # env beats user
        assert config.build_tool == "cross"  # user beats defaults

    def test_search_roots_shorthand(self, isolated_config):
        write_json(isolated_config["project_config"], {"scan": ["games", "tools"]})
        config = load_config(isolated_config["project_dir"], use_cache=False)
        assert config.scan.search_roots == ["games", "tools"]

    def test_invalid_config_raises(self, isolated_config):
        write_json(isolated_config["project_config"], {"default_profile": "turbo"})
        with pytest.raises(ValidationError):
            load_config(isolated_config["project_dir"], use_cache=False)

    def test_cache(self, isolated_config):
        first = load_config(isolated_config["project_dir"])
        write_json(isolated_config["project_config"], {"default_port": 18000})

        assert load_config(isolated_config["project_dir"]) is first

        clear_cache()
        assert load_config(isolated_config["project_dir"]).default_port == 18000

    @pytest.mark.parametrize("name", ["BAD=NAME", "", "1PORT", "MY PORT"])
    def test_port_env_var_must_be_a_variable_name(self, name):
        with pytest.raises(ValidationError):
            LauncherConfig(port_env_var=name)

    def test_custom_port_env_var(self):
        assert LauncherConfig(port_env_var="GAME_PORT_2").port_env_var == "GAME_PORT_2"
