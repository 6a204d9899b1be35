"""Container runtime layer for dcrun."""

from dcrun.runtime.base import ContainerRuntime
from dcrun.runtime.commands import CommandRunner, ComposeCli, DevcontainerCli
from dcrun.runtime.docker import DockerNotAvailableError, DockerRuntime

__all__ = [
    "CommandRunner",
    "ComposeCli",
    "ContainerRuntime",
    "DevcontainerCli",
    "DockerNotAvailableError",
    "DockerRuntime",
]
