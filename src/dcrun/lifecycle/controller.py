"""Build and run workflows for devcontainer compose projects.

Both workflows are strict sequences: every step blocks until its external
command finishes, and the first failure aborts the remaining steps. The
compose project name is passed explicitly to every command.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dcrun.core.config import Config
from dcrun.core.errors import (
    BuildVerificationFailedError,
    DcrunError,
    MissingWorkspaceFolderError,
)
from dcrun.core.types import (
    BuildInput,
    BuildOutput,
    ContainerState,
    RunInput,
    RunResult,
    RuntimeConfig,
)
from dcrun.editor import EditorLauncher
from dcrun.lifecycle.identity import ContainerIdentityResolver
from dcrun.lifecycle.transfer import ArtifactTransfer
from dcrun.lifecycle.volume import VolumeInitializer
from dcrun.runtime.base import ContainerRuntime
from dcrun.runtime.commands import CommandRunner, ComposeCli, DevcontainerCli

logger = logging.getLogger(__name__)


@contextmanager
def _workflow_context(project: str, step: str) -> Iterator[None]:
    """Attach the project name and step to errors escaping a workflow step."""
    try:
        yield
    except DcrunError as e:
        if e.project is None:
            e.project = project
        if e.step is None:
            e.step = step
        raise


class LifecycleController:
    """Sequences container lifecycle operations into build and run workflows."""

    def __init__(
        self,
        runtime: ContainerRuntime,
        runner: CommandRunner | None = None,
        config: RuntimeConfig | None = None,
    ) -> None:
        """Initialize lifecycle controller.

        Args:
            runtime: Container runtime for per-container operations.
            runner: Runner for compose-level commands.
            config: Runtime configuration. Uses the runtime's if None.
        """
        self._runtime = runtime
        self._runner = runner or CommandRunner()
        self._config = config or runtime.config
        self._identity = ContainerIdentityResolver(runtime)
        self._transfer = ArtifactTransfer(runtime)
        self._initializer = VolumeInitializer(
            runtime, config=self._config, transfer=self._transfer
        )
        self._devcontainer = DevcontainerCli(self._config)
        self._compose = ComposeCli(self._config)
        self._editor = EditorLauncher(self._config, self._runner)

    @property
    def config(self) -> RuntimeConfig:
        """Get runtime configuration."""
        return self._config

    def _load_descriptor(self, descriptor_path: Path, project: str) -> Config:
        with _workflow_context(project, "validate"):
            return Config.from_file(Path(descriptor_path))

    def build(
        self,
        descriptor_path: Path,
        project: str,
        inputs: dict[str, BuildInput] | None = None,
        outputs: dict[str, BuildOutput] | None = None,
    ) -> str:
        """Build the image, verify the container, extract outputs, tear down.

        Args:
            descriptor_path: devcontainer.json or a folder containing one.
            project: Compose project name.
            inputs: Host artifacts copied into the build context first.
            outputs: Built artifacts copied out of the container.

        Returns:
            ID of the container that was built (and removed).

        Raises:
            ConfigNotFoundError: If the descriptor does not exist.
            TransferError: If an input or output copy fails.
            BuildVerificationFailedError: If no container exists after building.
            LifecycleCommandError: If stopping or teardown fails.
        """
        config = self._load_descriptor(descriptor_path, project)
        descriptor = config.to_descriptor()
        logger.info(f"Building project '{project}' from {descriptor.path}")

        if inputs:
            with _workflow_context(project, "inputs"):
                self._transfer.stage_build_inputs(inputs)

        # Exit status of the build is not trusted; existence is verified below.
        self._runner.run(self._devcontainer.build_command(descriptor, project), project)

        with _workflow_context(project, "verify"):
            container_id = self._identity.resolve_container_id(project, descriptor.service)
        if container_id is None:
            raise BuildVerificationFailedError(
                f"No container for service '{descriptor.service}' after build",
                project=project,
                step="verify",
            )
        logger.info(f"Build produced container {container_id[:12]}")

        with _workflow_context(project, "stop"):
            self._runtime.stop(container_id)

        if outputs:
            with _workflow_context(project, "outputs"):
                self._transfer.collect_outputs(container_id, outputs)

        self._runner.run(self._compose.down_command(descriptor, project), project)
        logger.info(f"Project '{project}' built and torn down")
        return container_id

    def run(
        self,
        descriptor_path: Path,
        project: str,
        volume_init_script: str | None = None,
        inputs: dict[str, RunInput] | None = None,
        open_editor: bool = True,
    ) -> RunResult:
        """Start or reuse the environment and initialize its volume once.

        Args:
            descriptor_path: devcontainer.json or a folder containing one.
            project: Compose project name.
            volume_init_script: Body of the one-time setup script.
            inputs: Host artifacts staged on first run.
            open_editor: Hand off to the editor at the end.

        Returns:
            Run outcome.

        Raises:
            ConfigNotFoundError: If the descriptor does not exist.
            LifecycleCommandError: If bring-up or the editor hand-off fails.
            StartFailedError: If the container is absent or not running.
            MissingWorkspaceFolderError: If workspaceFolder is not set.
            TransferError: If staging fails.
            InitializationScriptError: If the setup script fails.
        """
        config = self._load_descriptor(descriptor_path, project)
        descriptor = config.to_descriptor()
        logger.info(f"Starting project '{project}' from {descriptor.path}")

        self._runner.run(self._compose.up_command(descriptor, project), project)

        with _workflow_context(project, "resolve"):
            container_id = self._identity.require_running(project, descriptor.service)

        workspace_folder = descriptor.workspace_folder
        if not workspace_folder:
            raise MissingWorkspaceFolderError(
                f"workspaceFolder is not set in {descriptor.path}",
                project=project,
                step="workspace-folder",
            )

        with _workflow_context(project, "initialize"):
            init = self._initializer.initialize(
                container_id,
                workspace_folder,
                inputs=inputs,
                script=volume_init_script,
            )

        result = RunResult(
            container_id=container_id,
            workspace_folder=workspace_folder,
            init=init,
        )
        if open_editor:
            with _workflow_context(project, "editor"):
                self._editor.open(
                    self._runtime.container_name(container_id), workspace_folder, project
                )
            result.editor_opened = True
        return result

    def status(self, descriptor_path: Path, project: str) -> ContainerState:
        """Report the state of the project's workspace container.

        Args:
            descriptor_path: devcontainer.json or a folder containing one.
            project: Compose project name.

        Returns:
            Container state.
        """
        descriptor = self._load_descriptor(descriptor_path, project).to_descriptor()
        with _workflow_context(project, "resolve"):
            return self._identity.state(project, descriptor.service)
