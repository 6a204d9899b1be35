"""Container identity resolution for compose projects.

Container creation tools do not reliably report failure through their exit
status, so the existence and liveness of a container are always confirmed
by querying the runtime directly.
"""

import logging

from dcrun.core.errors import StartFailedError
from dcrun.core.types import ContainerState
from dcrun.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)


class ContainerIdentityResolver:
    """Derives container handles from a compose project and service name."""

    def __init__(self, runtime: ContainerRuntime) -> None:
        """Initialize resolver.

        Args:
            runtime: Container runtime to query.
        """
        self._runtime = runtime

    def resolve_container_id(self, project: str, service: str) -> str | None:
        """Find the container of a compose service, stopped ones included.

        Args:
            project: Compose project name.
            service: Compose service name.

        Returns:
            Container ID, or None when the service has no container.
        """
        container_ids = self._runtime.list_project_containers(project, service)
        if not container_ids:
            logger.debug(f"No container for service '{service}' in project '{project}'")
            return None
        if len(container_ids) > 1:
            logger.warning(
                f"Project '{project}' has {len(container_ids)} containers for "
                f"service '{service}'; using {container_ids[0][:12]}"
            )
        return container_ids[0]

    def is_running(self, container_id: str) -> bool:
        """Check container liveness with a query independent of resolution."""
        return self._runtime.is_running(container_id)

    def require_running(self, project: str, service: str) -> str:
        """Resolve the service container and confirm it is running.

        Args:
            project: Compose project name.
            service: Compose service name.

        Returns:
            Container ID.

        Raises:
            StartFailedError: If the container is absent or not running.
        """
        container_id = self.resolve_container_id(project, service)
        if container_id is None:
            raise StartFailedError(
                f"No container found for service '{service}'",
                project=project,
                step="resolve",
            )
        if not self.is_running(container_id):
            raise StartFailedError(
                f"Container {container_id[:12]} for service '{service}' is not running",
                project=project,
                step="resolve",
            )
        return container_id

    def state(self, project: str, service: str) -> ContainerState:
        """Get the state of the service container.

        Args:
            project: Compose project name.
            service: Compose service name.

        Returns:
            Container state.
        """
        container_id = self.resolve_container_id(project, service)
        if container_id is None:
            return ContainerState.NOT_FOUND
        if self.is_running(container_id):
            return ContainerState.RUNNING
        return ContainerState.STOPPED
