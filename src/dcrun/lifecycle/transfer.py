"""Artifact transfer between host and container filesystems."""

import logging
import shutil
from pathlib import Path, PurePosixPath

from dcrun.core.errors import TransferError
from dcrun.core.types import BuildInput, BuildOutput, RunInput
from dcrun.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)


class ArtifactTransfer:
    """Copies named artifacts, one independent transfer per entry.

    Maps are processed in insertion order and the first failure aborts the
    remaining entries. Nothing is rolled back or retried.
    """

    def __init__(self, runtime: ContainerRuntime) -> None:
        """Initialize artifact transfer.

        Args:
            runtime: Container runtime performing the copies.
        """
        self._runtime = runtime

    def copy_to_container(
        self, container_id: str, host_path: Path, container_path: str
    ) -> None:
        """Copy a host path into the container.

        Raises:
            TransferError: If the copy fails.
        """
        self._runtime.copy_to(container_id, Path(host_path), container_path)

    def copy_from_container(
        self, container_id: str, container_path: str, host_path: Path
    ) -> None:
        """Copy a container path to the host.

        Raises:
            TransferError: If the copy fails.
        """
        self._runtime.copy_from(container_id, container_path, Path(host_path))

    def copy_local(self, src: Path, dest: Path) -> None:
        """Copy a host file or directory, e.g. into the build context.

        Args:
            src: Source file or directory.
            dest: Destination path naming the copy.

        Raises:
            TransferError: If the copy fails.
        """
        src = Path(src)
        dest = Path(dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if src.is_dir():
                shutil.copytree(src, dest, dirs_exist_ok=True)
            else:
                shutil.copy2(src, dest)
        except OSError as e:
            raise TransferError(
                f"Failed to copy {src} to {dest}: {e}",
                step="copy_local",
                exit_code=e.errno or 1,
            ) from e

    def stage_build_inputs(self, inputs: dict[str, BuildInput]) -> None:
        """Copy build inputs into the build context.

        Args:
            inputs: Artifact name to source/destination pair.
        """
        for name, artifact in inputs.items():
            logger.info(f"Staging build input '{name}': {artifact.src_path} -> {artifact.dest_path}")
            self.copy_local(artifact.src_path, artifact.dest_path)

    def collect_outputs(self, container_id: str, outputs: dict[str, BuildOutput]) -> None:
        """Copy built artifacts out of the container.

        Args:
            container_id: Container ID.
            outputs: Artifact name to container/host pair.
        """
        for name, artifact in outputs.items():
            logger.info(
                f"Collecting output '{name}': {artifact.container_path} -> {artifact.host_path}"
            )
            self.copy_from_container(container_id, artifact.container_path, artifact.host_path)

    def stage_run_inputs(
        self, container_id: str, inputs: dict[str, RunInput], staging_dir: str
    ) -> list[str]:
        """Copy run inputs into the in-container staging directory.

        Each artifact lands under its own base file name.

        Args:
            container_id: Container ID.
            inputs: Artifact name to host path.
            staging_dir: In-container staging directory.

        Returns:
            In-container paths of the staged artifacts.
        """
        staged: list[str] = []
        for name, artifact in inputs.items():
            destination = str(PurePosixPath(staging_dir) / Path(artifact.host_path).name)
            logger.info(f"Staging input '{name}': {artifact.host_path} -> {destination}")
            self.copy_to_container(container_id, artifact.host_path, destination)
            staged.append(destination)
        return staged
