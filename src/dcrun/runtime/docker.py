"""Docker container runtime."""

import io
import logging
import shlex
import tarfile
from pathlib import Path, PurePosixPath

import docker
from docker.errors import DockerException, NotFound
from docker.models.containers import Container

from dcrun.core.errors import LifecycleCommandError, StartFailedError, TransferError
from dcrun.core.types import CommandResult, RuntimeConfig
from dcrun.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)

COMPOSE_PROJECT_LABEL = "com.docker.compose.project"
COMPOSE_SERVICE_LABEL = "com.docker.compose.service"


class DockerNotAvailableError(Exception):
    """Raised when Docker is not available or not running."""

    pass


def _status_code(error: DockerException) -> int:
    """Best exit code for a docker SDK error."""
    code = getattr(error, "status_code", None)
    return code if isinstance(code, int) else 1


def _command_error(message: str, step: str, error: DockerException) -> LifecycleCommandError:
    """Wrap a docker SDK error raised by a container operation."""
    return LifecycleCommandError(
        f"{message}: {error}", step=step, exit_code=_status_code(error)
    )


class DockerRuntime(ContainerRuntime):
    """Docker-based container runtime."""

    def __init__(self, config: RuntimeConfig | None = None) -> None:
        """Initialize Docker runtime.

        Args:
            config: Runtime configuration.

        Raises:
            DockerNotAvailableError: If Docker is not available or not running.
        """
        super().__init__(config)
        try:
            self._client = docker.from_env()
        except DockerException as e:
            raise DockerNotAvailableError(
                "Docker is not available. Please ensure the Docker daemon is running.\n"
                f"Original error: {e}"
            ) from e

    def _get_container(self, container_id: str) -> Container | None:
        """Get container by ID or name.

        Args:
            container_id: Container ID or name.

        Returns:
            Container object or None if not found.
        """
        try:
            return self._client.containers.get(container_id)
        except NotFound:
            return None

    def list_project_containers(
        self, project: str, service: str, running_only: bool = False
    ) -> list[str]:
        filters: dict[str, str | list[str]] = {
            "label": [
                f"{COMPOSE_PROJECT_LABEL}={project}",
                f"{COMPOSE_SERVICE_LABEL}={service}",
            ],
        }
        if running_only:
            filters["status"] = "running"

        try:
            containers = self._client.containers.list(
                all=not running_only, filters=filters
            )
        except DockerException as e:
            raise _command_error(
                f"Failed to list containers of service '{service}'", "list", e
            ) from e
        return [c.id for c in containers]

    def is_running(self, container_id: str) -> bool:
        try:
            containers = self._client.containers.list(
                filters={"id": container_id, "status": "running"},
            )
        except DockerException as e:
            raise _command_error(
                f"Failed to query state of container {container_id}", "inspect", e
            ) from e
        return len(containers) > 0

    def container_name(self, container_id: str) -> str:
        try:
            container = self._get_container(container_id)
        except DockerException as e:
            raise _command_error(
                f"Failed to inspect container {container_id}", "inspect", e
            ) from e
        if container is None:
            raise StartFailedError(
                f"Container {container_id} not found", step="inspect"
            )
        return container.name.lstrip("/")

    def execute(
        self,
        container_id: str,
        command: str | list[str],
        workdir: str | None = None,
        user: str | None = None,
    ) -> CommandResult:
        if isinstance(command, str):
            cmd = ["/bin/sh", "-c", command]
        else:
            cmd = command

        try:
            container = self._get_container(container_id)
            if container is None:
                return CommandResult(exit_code=-1, stderr="Container not found")

            logger.debug(f"exec in {container_id[:12]}: {shlex.join(cmd)}")
            result = container.exec_run(
                cmd,
                workdir=workdir,
                demux=True,
                user=user or self._config.exec_user or "",
            )
        except DockerException as e:
            raise _command_error(
                f"Failed to run '{shlex.join(cmd)}' in {container_id}", "exec", e
            ) from e

        stdout, stderr = result.output if result.output else (None, None)
        return CommandResult(
            exit_code=result.exit_code,
            stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
            stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
        )

    def stop(self, container_id: str, timeout: int | None = None) -> None:
        if timeout is None:
            timeout = self._config.stop_timeout
        try:
            self._client.containers.get(container_id).stop(timeout=timeout)
        except DockerException as e:
            raise _command_error(f"Failed to stop container {container_id}", "stop", e) from e

    def copy_to(self, container_id: str, host_path: Path, container_path: str) -> None:
        destination = PurePosixPath(container_path)
        logger.debug(f"copy {host_path} -> {container_id[:12]}:{destination}")

        tar_buffer = io.BytesIO()
        try:
            with tarfile.open(fileobj=tar_buffer, mode="w") as tar:
                tar.add(host_path, arcname=destination.name)
        except OSError as e:
            raise TransferError(
                f"Cannot read {host_path}: {e}", step="copy_to", exit_code=1
            ) from e
        tar_buffer.seek(0)

        try:
            container = self._client.containers.get(container_id)
            if not container.put_archive(str(destination.parent), tar_buffer):
                raise TransferError(
                    f"Copy of {host_path} to {container_id}:{destination} was rejected",
                    step="copy_to",
                    exit_code=1,
                )
        except DockerException as e:
            raise TransferError(
                f"Failed to copy {host_path} to {container_id}:{destination}: {e}",
                step="copy_to",
                exit_code=_status_code(e),
            ) from e

    def copy_from(self, container_id: str, container_path: str, host_path: Path) -> None:
        source = PurePosixPath(container_path)
        host_path = Path(host_path)
        logger.debug(f"copy {container_id[:12]}:{source} -> {host_path}")

        try:
            container = self._client.containers.get(container_id)
            bits, _ = container.get_archive(str(source))
            tar_buffer = io.BytesIO()
            for chunk in bits:
                tar_buffer.write(chunk)
        except DockerException as e:
            raise TransferError(
                f"Failed to copy {container_id}:{source} to {host_path}: {e}",
                step="copy_from",
                exit_code=_status_code(e),
            ) from e
        tar_buffer.seek(0)

        try:
            with tarfile.open(fileobj=tar_buffer, mode="r") as tar:
                if host_path.is_dir():
                    tar.extractall(host_path, filter="data")
                else:
                    host_path.parent.mkdir(parents=True, exist_ok=True)
                    members = self._rename_root(tar, source.name, host_path.name)
                    tar.extractall(host_path.parent, members=members, filter="data")
        except (OSError, tarfile.TarError) as e:
            raise TransferError(
                f"Cannot write {host_path}: {e}", step="copy_from", exit_code=1
            ) from e

    @staticmethod
    def _rename_root(
        tar: tarfile.TarFile, old_name: str, new_name: str
    ) -> list[tarfile.TarInfo]:
        """Rename the archive's top-level entry so the copy lands as new_name.

        Args:
            tar: Archive returned by the Docker API.
            old_name: Base name of the copied container path.
            new_name: Base name of the host destination.

        Returns:
            Members with renamed paths.
        """
        members = tar.getmembers()
        for member in members:
            if member.name == old_name:
                member.name = new_name
            elif member.name.startswith(old_name + "/"):
                member.name = new_name + member.name[len(old_name) :]
        return members
