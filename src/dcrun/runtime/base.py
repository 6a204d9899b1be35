"""Abstract base class for container runtimes."""

from abc import ABC, abstractmethod
from pathlib import Path

from dcrun.core.types import CommandResult, RuntimeConfig


class ContainerRuntime(ABC):
    """Abstract base class for container runtimes.

    Covers the per-container operations the lifecycle workflows need:
    identity lookup by compose labels, liveness, exec, stop and copying
    artifacts in both directions. Compose-level operations (build, up,
    down) go through :class:`dcrun.runtime.commands.CommandRunner`.
    """

    def __init__(self, config: RuntimeConfig | None = None) -> None:
        """Initialize container runtime.

        Args:
            config: Runtime configuration.
        """
        self._config = config or RuntimeConfig()

    @property
    def config(self) -> RuntimeConfig:
        """Get runtime configuration."""
        return self._config

    @abstractmethod
    def list_project_containers(
        self, project: str, service: str, running_only: bool = False
    ) -> list[str]:
        """List container IDs belonging to a compose project service.

        Args:
            project: Compose project name.
            service: Compose service name.
            running_only: Only include running containers.

        Returns:
            Container IDs, stopped containers included unless running_only.

        Raises:
            LifecycleCommandError: If the runtime cannot be queried.
        """
        pass

    @abstractmethod
    def is_running(self, container_id: str) -> bool:
        """Check whether a container is running.

        Args:
            container_id: Container ID.

        Returns:
            True if a running container with this ID exists.
        """
        pass

    @abstractmethod
    def container_name(self, container_id: str) -> str:
        """Get the name of a container.

        Args:
            container_id: Container ID.

        Returns:
            Container name without the leading slash.

        Raises:
            StartFailedError: If the container does not exist.
            LifecycleCommandError: If the runtime cannot be queried.
        """
        pass

    @abstractmethod
    def execute(
        self,
        container_id: str,
        command: str | list[str],
        workdir: str | None = None,
        user: str | None = None,
    ) -> CommandResult:
        """Execute a command inside a running container.

        Args:
            container_id: Container ID.
            command: Shell string or argument list.
            workdir: Working directory for the command.
            user: User to run as. Uses the configured exec user if None.

        Returns:
            Command result.

        Raises:
            LifecycleCommandError: If the runtime fails to run the command.
        """
        pass

    @abstractmethod
    def stop(self, container_id: str, timeout: int | None = None) -> None:
        """Stop a container.

        Args:
            container_id: Container ID.
            timeout: Seconds to wait before killing.

        Raises:
            LifecycleCommandError: If the container could not be stopped.
        """
        pass

    @abstractmethod
    def copy_to(self, container_id: str, host_path: Path, container_path: str) -> None:
        """Copy a host file or directory into a container.

        Args:
            container_id: Container ID.
            host_path: Host source path.
            container_path: Destination path naming the copy.

        Raises:
            TransferError: If the copy fails.
        """
        pass

    @abstractmethod
    def copy_from(self, container_id: str, container_path: str, host_path: Path) -> None:
        """Copy a container file or directory to the host.

        Args:
            container_id: Container ID.
            container_path: Source path inside the container.
            host_path: Destination naming the copy, or an existing directory
                to copy into.

        Raises:
            TransferError: If the copy fails.
        """
        pass
