"""Type definitions for dcrun."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_SERVICE_NAME = "workspace"
DEFAULT_STAGING_DIR = "/tmp/dcrun-staging"


class ContainerState(Enum):
    """Container state as seen through the compose project labels."""

    RUNNING = "running"
    STOPPED = "stopped"
    NOT_FOUND = "not_found"


class InitState(Enum):
    """States of the workspace volume initialization protocol."""

    UNKNOWN = "unknown"
    EMPTY = "empty"
    NON_EMPTY = "non_empty"
    STAGING = "staging"
    EXECUTING = "executing"
    CLEANED = "cleaned"
    SKIPPED = "skipped"


class BuildInput(BaseModel):
    """Host artifact copied into the build context before building."""

    src_path: Path
    dest_path: Path

    model_config = {"extra": "forbid"}


class BuildOutput(BaseModel):
    """Built artifact copied out of the container after building."""

    container_path: str
    host_path: Path

    model_config = {"extra": "forbid"}


class RunInput(BaseModel):
    """Host artifact staged into the container on first run."""

    host_path: Path

    model_config = {"extra": "forbid"}


class DevcontainerDescriptor(BaseModel):
    """The parts of devcontainer.json the lifecycle workflows consume."""

    path: Path
    workspace_folder: str | None = None
    service: str = DEFAULT_SERVICE_NAME
    docker_compose_file: list[Path] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @property
    def config_dir(self) -> Path:
        """Directory containing the descriptor."""
        return self.path.parent

    @property
    def workspace_root(self) -> Path:
        """Host folder the devcontainer CLI treats as the workspace.

        This is the parent of ``.devcontainer/`` when the descriptor lives
        there, otherwise the descriptor's own directory.
        """
        if self.config_dir.name == ".devcontainer":
            return self.config_dir.parent
        return self.config_dir


class RuntimeConfig(BaseModel):
    """Tool settings for talking to the container runtime and editor."""

    devcontainer_bin: str = "devcontainer"
    docker_bin: str = "docker"
    editor_bin: str = "code"
    staging_dir: str = DEFAULT_STAGING_DIR
    script_shell: str = "/bin/bash"
    stop_timeout: int = 10
    disable_telemetry: bool = True
    exec_user: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator("staging_dir")
    @classmethod
    def staging_dir_is_absolute(cls, value: str) -> str:
        """Staging directory must be an absolute in-container path."""
        if not value.startswith("/"):
            raise ValueError("staging_dir must be an absolute path")
        return value.rstrip("/") or "/"


class ExternalCommand(BaseModel):
    """A blocking external process invocation.

    ``trusted_exit_status`` marks whether a non-zero exit status means
    failure. Untrusted commands must be followed by an explicit
    post-condition check by the caller.
    """

    args: list[str]
    step: str
    cwd: Path | None = None
    env: dict[str, str] = Field(default_factory=dict)
    trusted_exit_status: bool = True

    model_config = {"extra": "forbid"}


class CommandResult(BaseModel):
    """Outcome of an external command or in-container exec."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Whether the command exited with status zero."""
        return self.exit_code == 0


class InitResult(BaseModel):
    """Outcome of one run of the volume initialization protocol.

    ``state`` is the last state reached: ``skipped`` for an initialized
    volume, ``cleaned`` after a setup script ran, and ``staging`` when only
    inputs were staged because no script was given. ``probe`` records
    whether the volume was found ``empty`` or ``non_empty``.
    """

    state: InitState
    probe: InitState = InitState.UNKNOWN
    staged: list[str] = Field(default_factory=list)
    script_exit_code: int | None = None


class RunResult(BaseModel):
    """Outcome of the run workflow."""

    container_id: str
    workspace_folder: str
    init: InitResult
    editor_opened: bool = False
