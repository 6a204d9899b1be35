"""Workspace volume initialization protocol.

Whether a workspace volume has been initialized is derived, never stored:
the workspace folder is listed inside the running container and any output
at all means a previous run already populated it. On an empty volume the
inputs are staged into a fixed directory and an optional setup script is
run once, with its transient files removed on every exit path.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath

from dcrun.core.errors import InitializationScriptError, LifecycleCommandError
from dcrun.core.types import InitResult, InitState, RunInput, RuntimeConfig
from dcrun.lifecycle.transfer import ArtifactTransfer
from dcrun.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)

SCRIPT_PREFIX = "dcrun-init-"
SCRIPT_SUFFIX = ".sh"
SCRIPT_MODE = 0o755


class VolumeProbe(ABC):
    """Decides whether a workspace volume was initialized before."""

    @abstractmethod
    def is_volume_initialized(self, container_id: str, path: str) -> bool:
        """Check the initialization state of a volume.

        Args:
            container_id: Running container the volume is mounted in.
            path: Mount path of the volume.

        Returns:
            True if initialization already ran.
        """
        pass


class ListingProbe(VolumeProbe):
    """Treats any entry under the workspace folder as initialized.

    A stray file left by an operator also counts, which keeps restarts of
    an existing environment from ever re-running setup.
    """

    def __init__(self, runtime: ContainerRuntime) -> None:
        """Initialize listing probe.

        Args:
            runtime: Container runtime used to list the workspace folder.
        """
        self._runtime = runtime

    def is_volume_initialized(self, container_id: str, path: str) -> bool:
        result = self._runtime.execute(container_id, ["ls", "-A", path])
        if not result.ok:
            logger.warning(
                f"Listing {path} exited with {result.exit_code}: "
                f"{result.stderr.strip()}; treating volume as empty"
            )
        return bool(result.stdout.strip())


class VolumeInitializer:
    """Runs first-time setup of a workspace volume exactly once."""

    def __init__(
        self,
        runtime: ContainerRuntime,
        config: RuntimeConfig | None = None,
        probe: VolumeProbe | None = None,
        transfer: ArtifactTransfer | None = None,
    ) -> None:
        """Initialize volume initializer.

        Args:
            runtime: Container runtime.
            config: Runtime configuration (staging dir, script shell).
            probe: Initialization state probe. Defaults to ListingProbe.
            transfer: Artifact transfer. Defaults to one over runtime.
        """
        self._runtime = runtime
        self._config = config or runtime.config
        self._probe = probe or ListingProbe(runtime)
        self._transfer = transfer or ArtifactTransfer(runtime)

    @property
    def staging_dir(self) -> str:
        """In-container directory artifacts are staged into."""
        return self._config.staging_dir

    def initialize(
        self,
        container_id: str,
        workspace_folder: str,
        inputs: dict[str, RunInput] | None = None,
        script: str | None = None,
    ) -> InitResult:
        """Initialize the workspace volume if it is empty.

        The container must already be confirmed running.

        Args:
            container_id: Running container ID.
            workspace_folder: Mount path of the workspace volume.
            inputs: Host artifacts to stage on first run.
            script: Body of the one-time setup script.

        Returns:
            Final protocol state and what was staged.

        Raises:
            TransferError: If staging an artifact or the script fails.
            InitializationScriptError: If the script exits non-zero.
            LifecycleCommandError: If the staging directory can't be created.
        """
        result = InitResult(state=InitState.UNKNOWN)

        if self._probe.is_volume_initialized(container_id, workspace_folder):
            result.probe = InitState.NON_EMPTY
            logger.info(f"Workspace {workspace_folder} already initialized, skipping")
            result.state = InitState.SKIPPED
            return result

        result.probe = InitState.EMPTY
        logger.info(f"Workspace {workspace_folder} is empty, initializing")
        result.state = InitState.STAGING
        self._ensure_staging_dir(container_id)
        if inputs:
            result.staged.extend(
                self._transfer.stage_run_inputs(container_id, inputs, self.staging_dir)
            )

        if script is None:
            return result

        result.state = InitState.EXECUTING
        with self.staged_script(container_id, script) as script_path:
            result.staged.append(script_path)
            result.script_exit_code = self._run_script(
                container_id, script_path, workspace_folder
            )
        result.state = InitState.CLEANED
        return result

    def _ensure_staging_dir(self, container_id: str) -> None:
        outcome = self._runtime.execute(container_id, ["mkdir", "-p", self.staging_dir])
        if not outcome.ok:
            raise LifecycleCommandError(
                f"Cannot create staging directory {self.staging_dir}: "
                f"{outcome.stderr.strip()}",
                step="stage",
                exit_code=outcome.exit_code,
            )

    @contextmanager
    def staged_script(self, container_id: str, script: str) -> Iterator[str]:
        """Stage a script in the container for the duration of the block.

        The host temp file and the in-container copy are removed on every
        exit path. Failure to remove the in-container copy is only logged
        so it cannot mask an error raised inside the block.

        Args:
            container_id: Running container ID.
            script: Script body.

        Yields:
            In-container path of the staged script.
        """
        fd, tmp_name = tempfile.mkstemp(prefix=SCRIPT_PREFIX, suffix=SCRIPT_SUFFIX)
        host_path = Path(tmp_name)
        container_path = str(PurePosixPath(self.staging_dir) / host_path.name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(script)
            # mkstemp creates 0600; the exec user may differ from the file owner.
            os.chmod(host_path, SCRIPT_MODE)
            self._transfer.copy_to_container(container_id, host_path, container_path)
            yield container_path
        finally:
            host_path.unlink(missing_ok=True)
            self._remove_in_container(container_id, container_path)

    def _remove_in_container(self, container_id: str, path: str) -> None:
        try:
            outcome = self._runtime.execute(container_id, ["rm", "-f", path])
        except Exception as e:
            logger.warning(f"Could not remove staged script {path}: {e}")
            return
        if not outcome.ok:
            logger.warning(
                f"Could not remove staged script {path}: {outcome.stderr.strip()}"
            )

    def _run_script(self, container_id: str, script_path: str, workspace_folder: str) -> int:
        logger.info(f"Running initialization script in {workspace_folder}")
        outcome = self._runtime.execute(
            container_id,
            [self._config.script_shell, script_path],
            workdir=workspace_folder,
        )
        for line in outcome.stdout.splitlines():
            logger.debug(f"init: {line}")
        if not outcome.ok:
            raise InitializationScriptError(
                f"Initialization script failed: {outcome.stderr.strip()}",
                step="init-script",
                exit_code=outcome.exit_code,
            )
        return outcome.exit_code
