"""dcrun - Devcontainer lifecycle orchestration tool.

This package builds devcontainer images, starts long-running development
containers and initializes their persistent workspace volumes exactly once.
"""

from dcrun.core.config import Config
from dcrun.core.errors import (
    BuildVerificationFailedError,
    ConfigNotFoundError,
    DcrunError,
    InitializationScriptError,
    LifecycleCommandError,
    MissingWorkspaceFolderError,
    StartFailedError,
    TransferError,
)
from dcrun.core.types import (
    BuildInput,
    BuildOutput,
    ContainerState,
    InitState,
    RunInput,
    RunResult,
    RuntimeConfig,
)
from dcrun.functions import build, create_controller, run, status
from dcrun.lifecycle.controller import LifecycleController

__version__ = "0.1.0"

__all__ = [
    # Core types
    "BuildInput",
    "BuildOutput",
    "Config",
    "ContainerState",
    "InitState",
    "LifecycleController",
    "RunInput",
    "RunResult",
    "RuntimeConfig",
    # Errors
    "BuildVerificationFailedError",
    "ConfigNotFoundError",
    "DcrunError",
    "InitializationScriptError",
    "LifecycleCommandError",
    "MissingWorkspaceFolderError",
    "StartFailedError",
    "TransferError",
    # Workflow functions
    "build",
    "create_controller",
    "run",
    "status",
]


def main() -> None:
    """CLI entry point."""
    import sys

    from dcrun.cli import main as cli_main

    sys.exit(cli_main())
