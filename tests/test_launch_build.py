"""
Tests for build orchestration.

cargo is never actually run: subprocess.run is patched and fed canned JSON
message streams.
"""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from brp_launch.core.errors import BuildError, ErrorKind, FileOrPathNotFoundError
from brp_launch.core.launch.build import (
    build_cargo_command,
    execute_build_command,
    parse_build_output,
    run_cargo_build,
    validate_manifest_directory,
)
from brp_launch.core.launch.models import BuildState
from brp_launch.core.targets.models import TargetKind


def cargo_messages(*messages: dict) -> str:
    """Render cargo --message-format=json output."""
    return "\n".join(json.dumps(message) for message in messages) + "\n"


def artifact(name: str, *, fresh: bool | None = None, kind: str = "bin") -> dict:
    """A compiler-artifact message for a target."""
    message: dict = {
        "reason": "compiler-artifact",
        "package_id": f"{name} 0.1.0",
        "target": {"kind": [kind], "name": name, "src_path": f"/src/{name}.rs"},
    }
    if fresh is not None:
        message["fresh"] = fresh
    return message


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    result = MagicMock(spec=subprocess.CompletedProcess)
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


# ==============================================================================
# Command Construction
# ==============================================================================


class TestBuildCargoCommand:
    def test_app_debug(self):
        assert build_cargo_command("game", TargetKind.APP, "debug") == [
            "cargo",
            "build",
            "--bin",
            "game",
            "--message-format=json",
        ]

    def test_example_release_with_features(self):
        args = build_cargo_command(
            "breakout", TargetKind.EXAMPLE, "release", ["dev", "bevy/dynamic_linking"]
        )
        assert args == [
            "cargo",
            "build",
            "--example",
            "breakout",
            "--features",
            "dev,bevy/dynamic_linking",
            "--release",
            "--message-format=json",
        ]

    def test_custom_build_tool(self):
        args = build_cargo_command("game", TargetKind.APP, "debug", build_tool="cross")
        assert args[0] == "cross"

    def test_empty_features_are_omitted(self):
        assert "--features" not in build_cargo_command("game", TargetKind.APP, "debug", [])


class TestValidateManifestDirectory:
    def test_returns_parent(self, tmp_path):
        assert validate_manifest_directory(tmp_path / "Cargo.toml") == tmp_path

    def test_root_has_no_parent(self):
        with pytest.raises(FileOrPathNotFoundError) as exc_info:
            validate_manifest_directory(Path("/"))
        assert exc_info.value.kind is ErrorKind.FILE_OR_PATH_NOT_FOUND


# ==============================================================================
# Output Parsing
# ==============================================================================


class TestParseBuildOutput:
    def test_fresh(self):
        stdout = cargo_messages(artifact("bevy_ecs", fresh=True), artifact("game", fresh=True))
        assert parse_build_output(stdout, "game") is BuildState.FRESH

    def test_fresh_false_means_rebuilt(self):
        stdout = cargo_messages(artifact("game", fresh=False))
        assert parse_build_output(stdout, "game") is BuildState.REBUILT

    def test_missing_fresh_means_rebuilt(self):
        stdout = cargo_messages(artifact("game"))
        assert parse_build_output(stdout, "game") is BuildState.REBUILT

    def test_non_bool_fresh_means_rebuilt(self):
        stdout = '{"target": {"name": "game"}, "fresh": "yes"}\n'
        assert parse_build_output(stdout, "game") is BuildState.REBUILT

    def test_target_absent(self):
        stdout = cargo_messages(artifact("bevy_ecs", fresh=True), {"reason": "build-finished"})
        assert parse_build_output(stdout, "game") is BuildState.NOT_FOUND

    def test_empty_output(self):
        assert parse_build_output("", "game") is BuildState.NOT_FOUND

    def test_first_matching_message_wins(self):
        stdout = cargo_messages(artifact("game", fresh=False), artifact("game", fresh=True))
        assert parse_build_output(stdout, "game") is BuildState.REBUILT

    def test_ignores_non_json_and_non_object_lines(self):
        noise = "   Compiling game v0.1.0\n[1, 2]\n\n"
        stdout = noise + cargo_messages(artifact("game", fresh=True))
        assert parse_build_output(stdout, "game") is BuildState.FRESH

    def test_target_name_must_match_exactly(self):
        stdout = cargo_messages(artifact("game_core", fresh=True))
        assert parse_build_output(stdout, "game") is BuildState.NOT_FOUND


# ==============================================================================
# Execution
# ==============================================================================


class TestExecuteBuildCommand:
    def test_runs_in_manifest_dir(self, tmp_path):
        with patch("brp_launch.core.launch.build.subprocess.run") as mock_run:
            mock_run.return_value = completed(stdout="ok")
            result = execute_build_command(
                ["cargo", "build"], "game", TargetKind.APP, "debug", tmp_path
            )

        assert result.stdout == "ok"
        _, kwargs = mock_run.call_args
        assert kwargs["cwd"] == tmp_path
        assert kwargs["capture_output"] is True

    def test_non_zero_exit_raises_build_error(self, tmp_path):
        with patch("brp_launch.core.launch.build.subprocess.run") as mock_run:
            mock_run.return_value = completed(returncode=101, stderr="error[E0425]: boom\n")
            with pytest.raises(BuildError) as exc_info:
                execute_build_command(
                    ["cargo", "build"], "game", TargetKind.APP, "release", tmp_path
                )

        error = exc_info.value
        assert error.kind is ErrorKind.BUILD_FAILED
        assert error.exit_code == 101
        assert "error[E0425]: boom" in error.stderr
        assert "game" in error.message
        assert "release" in error.message
        assert error.details["manifest_dir"] == str(tmp_path)

    def test_missing_tool_raises_build_error(self, tmp_path):
        with patch(
            "brp_launch.core.launch.build.subprocess.run",
            side_effect=FileNotFoundError("cargo"),
        ):
            with pytest.raises(BuildError) as exc_info:
                execute_build_command(
                    ["cargo", "build"], "game", TargetKind.APP, "debug", tmp_path
                )

        assert exc_info.value.exit_code is None
        assert "Failed to run cargo build" in exc_info.value.message


class TestRunCargoBuild:
    def test_returns_build_state(self, tmp_path):
        stdout = cargo_messages(artifact("breakout", fresh=True, kind="example"))
        with patch("brp_launch.core.launch.build.subprocess.run") as mock_run:
            mock_run.return_value = completed(stdout=stdout)
            state = run_cargo_build(
                "breakout", TargetKind.EXAMPLE, "debug", tmp_path, ("dev",)
            )

        assert state is BuildState.FRESH
        args = mock_run.call_args[0][0]
        assert args[:4] == ["cargo", "build", "--example", "breakout"]
        assert "--features" in args
