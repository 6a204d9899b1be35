"""Tests for dcrun.core.types and dcrun.core.errors modules."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from dcrun.core.errors import (
    DcrunError,
    InitializationScriptError,
    TransferError,
)
from dcrun.core.types import (
    CommandResult,
    ContainerState,
    DevcontainerDescriptor,
    ExternalCommand,
    InitResult,
    InitState,
    RunInput,
    RuntimeConfig,
)


class TestEnums:
    """Tests for enum types."""

    def test_container_state_values(self) -> None:
        """Test ContainerState enum values."""
        assert ContainerState.RUNNING.value == "running"
        assert ContainerState.STOPPED.value == "stopped"
        assert ContainerState.NOT_FOUND.value == "not_found"

    def test_init_state_values(self) -> None:
        """Test InitState enum values."""
        assert InitState.SKIPPED.value == "skipped"
        assert InitState.CLEANED.value == "cleaned"


class TestDevcontainerDescriptor:
    """Tests for DevcontainerDescriptor model."""

    def test_workspace_root_inside_devcontainer_dir(self) -> None:
        """Test that .devcontainer/ descriptors use the parent as root."""
        descriptor = DevcontainerDescriptor(
            path=Path("/src/app/.devcontainer/devcontainer.json")
        )
        assert descriptor.config_dir == Path("/src/app/.devcontainer")
        assert descriptor.workspace_root == Path("/src/app")

    def test_workspace_root_elsewhere(self) -> None:
        """Test that other descriptors use their own directory as root."""
        descriptor = DevcontainerDescriptor(path=Path("/src/app/.devcontainer.json"))
        assert descriptor.workspace_root == Path("/src/app")

    def test_defaults(self) -> None:
        """Test default values."""
        descriptor = DevcontainerDescriptor(path=Path("/x/devcontainer.json"))
        assert descriptor.service == "workspace"
        assert descriptor.workspace_folder is None
        assert descriptor.docker_compose_file == []


class TestRuntimeConfig:
    """Tests for RuntimeConfig model."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = RuntimeConfig()
        assert config.devcontainer_bin == "devcontainer"
        assert config.docker_bin == "docker"
        assert config.staging_dir == "/tmp/dcrun-staging"
        assert config.disable_telemetry is True

    def test_staging_dir_must_be_absolute(self) -> None:
        """Test that relative staging directories are rejected."""
        with pytest.raises(ValidationError):
            RuntimeConfig(staging_dir="stage")

    def test_staging_dir_trailing_slash_stripped(self) -> None:
        """Test that trailing slashes are normalized."""
        assert RuntimeConfig(staging_dir="/tmp/stage/").staging_dir == "/tmp/stage"

    def test_extra_forbidden(self) -> None:
        """Test that unknown fields are rejected."""
        with pytest.raises(ValidationError):
            RuntimeConfig(unknown=True)


class TestModels:
    """Tests for small result and command models."""

    def test_command_result_ok(self) -> None:
        """Test CommandResult.ok."""
        assert CommandResult(exit_code=0).ok is True
        assert CommandResult(exit_code=2).ok is False

    def test_external_command_trusted_by_default(self) -> None:
        """Test that exit statuses are trusted unless stated otherwise."""
        command = ExternalCommand(args=["true"], step="noop")
        assert command.trusted_exit_status is True
        assert command.env == {}

    def test_init_result_defaults(self) -> None:
        """Test InitResult defaults."""
        result = InitResult(state=InitState.SKIPPED)
        assert result.probe == InitState.UNKNOWN
        assert result.staged == []
        assert result.script_exit_code is None

    def test_run_input_coerces_path(self) -> None:
        """Test that host paths are coerced to Path."""
        assert RunInput(host_path="/h/a").host_path == Path("/h/a")


class TestErrors:
    """Tests for the error taxonomy."""

    def test_message_without_context(self) -> None:
        """Test that bare errors render the message only."""
        assert str(DcrunError("boom")) == "boom"

    def test_message_with_context(self) -> None:
        """Test that context is rendered after the message."""
        error = TransferError("copy failed", project="proj1", step="copy_to", exit_code=404)
        assert str(error) == "copy failed (project=proj1, step=copy_to, exit_code=404)"
        assert error.exit_code == 404

    def test_subclasses_share_base(self) -> None:
        """Test that workflow errors can be caught as DcrunError."""
        with pytest.raises(DcrunError):
            raise InitializationScriptError("failed", exit_code=1)
