"""External command invocation for compose-level operations.

The devcontainer CLI and ``docker compose`` are driven as blocking
subprocesses. Each :class:`ExternalCommand` says whether its exit status can
be trusted: ``devcontainer up`` does not reliably report failure, so its
result must be verified by resolving the container afterwards.
"""

import logging
import os
import shlex
import subprocess

from dcrun.core.errors import LifecycleCommandError
from dcrun.core.types import (
    CommandResult,
    DevcontainerDescriptor,
    ExternalCommand,
    RuntimeConfig,
)

logger = logging.getLogger(__name__)

MISSING_BINARY_EXIT_CODE = 127


class CommandRunner:
    """Runs external commands and enforces trusted exit statuses."""

    def run(self, command: ExternalCommand, project: str | None = None) -> CommandResult:
        """Run a command to completion.

        Args:
            command: Command to run.
            project: Compose project name for error context.

        Returns:
            Command result.

        Raises:
            LifecycleCommandError: If the binary is missing, or a trusted
                command exits non-zero.
        """
        env = None
        if command.env:
            env = os.environ.copy()
            env.update(command.env)

        logger.debug(f"[{command.step}] running: {shlex.join(command.args)}")
        try:
            proc = subprocess.run(
                command.args,
                cwd=command.cwd,
                env=env,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise LifecycleCommandError(
                f"Command not found: {command.args[0]}",
                project=project,
                step=command.step,
                exit_code=MISSING_BINARY_EXIT_CODE,
            ) from e

        result = CommandResult(
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        if result.ok:
            return result

        if command.trusted_exit_status:
            raise LifecycleCommandError(
                f"{command.step} failed: {result.stderr.strip() or result.stdout.strip()}",
                project=project,
                step=command.step,
                exit_code=result.exit_code,
            )

        logger.warning(
            f"[{command.step}] exited with {result.exit_code}; "
            "exit status is not trusted, verifying separately"
        )
        return result


class DevcontainerCli:
    """Builds devcontainer CLI invocations."""

    def __init__(self, config: RuntimeConfig) -> None:
        """Initialize devcontainer CLI builder.

        Args:
            config: Runtime configuration.
        """
        self._config = config

    def build_command(
        self, descriptor: DevcontainerDescriptor, project: str
    ) -> ExternalCommand:
        """Build the image and (re)create the container with no cache.

        Args:
            descriptor: Devcontainer descriptor.
            project: Compose project name.

        Returns:
            Untrusted external command.
        """
        return ExternalCommand(
            args=[
                self._config.devcontainer_bin,
                "up",
                "--workspace-folder",
                str(descriptor.workspace_root),
                "--config",
                str(descriptor.path),
                "--build-no-cache",
                "--remove-existing-container",
            ],
            cwd=descriptor.workspace_root,
            env={"COMPOSE_PROJECT_NAME": project},
            step="build",
            trusted_exit_status=False,
        )


class ComposeCli:
    """Builds ``docker compose`` invocations scoped to one project."""

    def __init__(self, config: RuntimeConfig) -> None:
        """Initialize compose CLI builder.

        Args:
            config: Runtime configuration.
        """
        self._config = config

    def _base_args(self, descriptor: DevcontainerDescriptor, project: str) -> list[str]:
        args = [self._config.docker_bin, "compose", "--project-name", project]
        for compose_file in descriptor.docker_compose_file:
            args.extend(["--file", str(compose_file)])
        return args

    def up_command(
        self, descriptor: DevcontainerDescriptor, project: str
    ) -> ExternalCommand:
        """Bring the project up without rebuilding or pulling.

        Existing containers and volumes are reused; the call blocks until
        services are healthy.

        Args:
            descriptor: Devcontainer descriptor.
            project: Compose project name.

        Returns:
            Trusted external command.
        """
        return ExternalCommand(
            args=self._base_args(descriptor, project)
            + ["up", "--detach", "--no-build", "--pull", "never", "--wait"],
            cwd=descriptor.config_dir,
            step="up",
        )

    def down_command(
        self, descriptor: DevcontainerDescriptor, project: str
    ) -> ExternalCommand:
        """Remove the project's containers and volumes, keeping images.

        Args:
            descriptor: Devcontainer descriptor.
            project: Compose project name.

        Returns:
            Trusted external command.
        """
        return ExternalCommand(
            args=self._base_args(descriptor, project) + ["down", "--volumes"],
            cwd=descriptor.config_dir,
            step="teardown",
        )
