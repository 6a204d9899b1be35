"""Pytest fixtures and configuration."""

import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock

import pytest

from dcrun.core.types import CommandResult, RuntimeConfig
from dcrun.runtime.base import ContainerRuntime
from dcrun.runtime.commands import CommandRunner

CONTAINER_ID = "abc123def4567890"

DESCRIPTOR_JSONC = """\
// Development container for the app
{
    "name": "app-dev",
    "dockerComposeFile": ["../docker-compose.yml"],
    "service": "workspace",
    /* mounted from the named volume */
    "workspaceFolder": "/workspaces/app",
    "customizations": {
        "dcrun": {
            "stagingDir": "/tmp/stage",
        },
    },
}
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def descriptor_path(temp_dir: Path) -> Path:
    """Write a devcontainer.json with comments and trailing commas."""
    config_dir = temp_dir / "project" / ".devcontainer"
    config_dir.mkdir(parents=True)
    path = config_dir / "devcontainer.json"
    path.write_text(DESCRIPTOR_JSONC, encoding="utf-8")
    return path


@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """Runtime configuration with a test staging directory."""
    return RuntimeConfig(staging_dir="/tmp/stage")


@pytest.fixture
def mock_runtime(runtime_config: RuntimeConfig) -> MagicMock:
    """Container runtime with one running container for every service."""
    runtime = MagicMock(spec=ContainerRuntime)
    runtime.config = runtime_config
    runtime.list_project_containers.return_value = [CONTAINER_ID]
    runtime.is_running.return_value = True
    runtime.container_name.return_value = "proj-workspace-1"
    runtime.execute.return_value = CommandResult(exit_code=0)
    return runtime


@pytest.fixture
def mock_runner() -> MagicMock:
    """Command runner where every command succeeds."""
    runner = MagicMock(spec=CommandRunner)
    runner.run.return_value = CommandResult(exit_code=0)
    return runner


def make_exec_responder(
    listing: str = "",
    script_exit_code: int = 0,
    mkdir_exit_code: int = 0,
) -> Callable[..., CommandResult]:
    """Build an execute() side effect that answers by command.

    Args:
        listing: stdout returned for the workspace listing probe.
        script_exit_code: Exit code of the initialization script.
        mkdir_exit_code: Exit code of creating the staging directory.

    Returns:
        Side effect function for ContainerRuntime.execute.
    """

    def respond(
        container_id: str,
        command: str | list[str],
        workdir: str | None = None,
        user: str | None = None,
    ) -> CommandResult:
        program = command[0] if isinstance(command, list) else command
        if program == "ls":
            return CommandResult(exit_code=0, stdout=listing)
        if program == "mkdir":
            return CommandResult(exit_code=mkdir_exit_code, stderr="mkdir failed")
        if program == "rm":
            return CommandResult(exit_code=0)
        return CommandResult(
            exit_code=script_exit_code, stdout="hi\n", stderr="script failed"
        )

    return respond


@pytest.fixture
def exec_responder() -> Callable[..., Callable[..., CommandResult]]:
    """Factory for execute() side effects, see make_exec_responder."""
    return make_exec_responder
