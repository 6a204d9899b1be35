"""Core layer for dcrun."""

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
    ContainerState,
    DevcontainerDescriptor,
    InitState,
    RuntimeConfig,
)

__all__ = [
    "BuildVerificationFailedError",
    "Config",
    "ConfigNotFoundError",
    "ContainerState",
    "DcrunError",
    "DevcontainerDescriptor",
    "InitState",
    "InitializationScriptError",
    "LifecycleCommandError",
    "MissingWorkspaceFolderError",
    "RuntimeConfig",
    "StartFailedError",
    "TransferError",
]
