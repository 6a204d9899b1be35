"""Tests for dcrun.runtime.commands module."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dcrun.core.errors import LifecycleCommandError
from dcrun.core.types import DevcontainerDescriptor, ExternalCommand, RuntimeConfig
from dcrun.runtime.commands import CommandRunner, ComposeCli, DevcontainerCli


@pytest.fixture
def descriptor() -> DevcontainerDescriptor:
    """Descriptor with one compose file."""
    return DevcontainerDescriptor(
        path=Path("/src/app/.devcontainer/devcontainer.json"),
        workspace_folder="/workspaces/app",
        docker_compose_file=[Path("/src/app/docker-compose.yml")],
    )


class TestCommandRunner:
    """Tests for CommandRunner class."""

    @patch("subprocess.run")
    def test_run_success(self, mock_run: MagicMock) -> None:
        """Test a successful command."""
        mock_run.return_value = MagicMock(returncode=0, stdout="ok\n", stderr="")

        result = CommandRunner().run(ExternalCommand(args=["echo", "ok"], step="echo"))

        assert result.ok
        assert result.stdout == "ok\n"
        mock_run.assert_called_once_with(
            ["echo", "ok"], cwd=None, env=None, capture_output=True, text=True
        )

    @patch("subprocess.run")
    def test_trusted_failure_raises(self, mock_run: MagicMock) -> None:
        """Test that trusted commands raise on non-zero exit."""
        mock_run.return_value = MagicMock(returncode=2, stdout="", stderr="no such project")

        with pytest.raises(LifecycleCommandError) as exc_info:
            CommandRunner().run(
                ExternalCommand(args=["docker", "compose", "down"], step="teardown"),
                project="proj1",
            )

        error = exc_info.value
        assert error.exit_code == 2
        assert error.step == "teardown"
        assert error.project == "proj1"
        assert "no such project" in str(error)

    @patch("subprocess.run")
    def test_untrusted_failure_returns(self, mock_run: MagicMock) -> None:
        """Test that untrusted commands return their result."""
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="warn")

        result = CommandRunner().run(
            ExternalCommand(args=["devcontainer", "up"], step="build", trusted_exit_status=False)
        )

        assert result.exit_code == 1
        assert not result.ok

    @patch("subprocess.run")
    def test_env_is_passed_per_command(
        self, mock_run: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test env overrides reach the child without touching os.environ."""
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        monkeypatch.delenv("COMPOSE_PROJECT_NAME", raising=False)

        CommandRunner().run(
            ExternalCommand(
                args=["devcontainer", "up"],
                step="build",
                env={"COMPOSE_PROJECT_NAME": "proj1"},
            )
        )

        env = mock_run.call_args.kwargs["env"]
        assert env["COMPOSE_PROJECT_NAME"] == "proj1"
        assert env.get("PATH") == os.environ.get("PATH")
        assert "COMPOSE_PROJECT_NAME" not in os.environ

    @patch("subprocess.run")
    def test_missing_binary(self, mock_run: MagicMock) -> None:
        """Test that a missing binary raises with exit code 127."""
        mock_run.side_effect = FileNotFoundError("devcontainer")

        with pytest.raises(LifecycleCommandError) as exc_info:
            CommandRunner().run(
                ExternalCommand(args=["devcontainer"], step="build", trusted_exit_status=False)
            )

        assert exc_info.value.exit_code == 127


class TestDevcontainerCli:
    """Tests for DevcontainerCli class."""

    def test_build_command(self, descriptor: DevcontainerDescriptor) -> None:
        """Test the no-cache build and recreate command."""
        command = DevcontainerCli(RuntimeConfig()).build_command(descriptor, "proj1")

        assert command.args == [
            "devcontainer",
            "up",
            "--workspace-folder",
            str(Path("/src/app")),
            "--config",
            str(Path("/src/app/.devcontainer/devcontainer.json")),
            "--build-no-cache",
            "--remove-existing-container",
        ]
        assert command.env == {"COMPOSE_PROJECT_NAME": "proj1"}
        assert command.trusted_exit_status is False
        assert command.step == "build"

    def test_custom_binary(self, descriptor: DevcontainerDescriptor) -> None:
        """Test that the configured binary is used."""
        config = RuntimeConfig(devcontainer_bin="/opt/bin/devcontainer")
        command = DevcontainerCli(config).build_command(descriptor, "p")
        assert command.args[0] == "/opt/bin/devcontainer"


class TestComposeCli:
    """Tests for ComposeCli class."""

    def test_up_command(self, descriptor: DevcontainerDescriptor) -> None:
        """Test bring-up reuses containers without building or pulling."""
        command = ComposeCli(RuntimeConfig()).up_command(descriptor, "proj2")

        assert command.args == [
            "docker",
            "compose",
            "--project-name",
            "proj2",
            "--file",
            str(Path("/src/app/docker-compose.yml")),
            "up",
            "--detach",
            "--no-build",
            "--pull",
            "never",
            "--wait",
        ]
        assert command.trusted_exit_status is True
        assert command.cwd == Path("/src/app/.devcontainer")
        assert command.env == {}

    def test_down_command_keeps_images(self, descriptor: DevcontainerDescriptor) -> None:
        """Test teardown removes volumes but not images."""
        command = ComposeCli(RuntimeConfig()).down_command(descriptor, "proj1")

        assert command.args[-2:] == ["down", "--volumes"]
        assert "--rmi" not in command.args
        assert command.trusted_exit_status is True
        assert command.step == "teardown"

    def test_without_compose_files(self) -> None:
        """Test that --file is omitted when the descriptor lists none."""
        descriptor = DevcontainerDescriptor(path=Path("/src/app/devcontainer.json"))
        command = ComposeCli(RuntimeConfig()).down_command(descriptor, "p")
        assert "--file" not in command.args
