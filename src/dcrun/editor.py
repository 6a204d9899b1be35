"""Editor hand-off for a running development container."""

import json
import logging

from dcrun.core.types import ExternalCommand, RuntimeConfig
from dcrun.runtime.commands import CommandRunner

logger = logging.getLogger(__name__)


def attached_container_uri(container_name: str, workspace_folder: str) -> str:
    """Build the remote folder URI for attaching to a container.

    Args:
        container_name: Container name, with or without leading slash.
        workspace_folder: In-container folder to open.

    Returns:
        ``vscode-remote://attached-container+<hex>/<folder>`` URI.
    """
    payload = json.dumps({"containerName": "/" + container_name.lstrip("/")})
    folder = "/" + workspace_folder.lstrip("/")
    return f"vscode-remote://attached-container+{payload.encode('utf-8').hex()}{folder}"


class EditorLauncher:
    """Opens the editor attached to a running container."""

    def __init__(self, config: RuntimeConfig, runner: CommandRunner) -> None:
        """Initialize editor launcher.

        Args:
            config: Runtime configuration (editor binary, telemetry option).
            runner: Command runner used to start the editor.
        """
        self._config = config
        self._runner = runner

    def command(self, container_name: str, workspace_folder: str) -> ExternalCommand:
        """Build the editor command.

        Args:
            container_name: Container to attach to.
            workspace_folder: In-container folder to open.

        Returns:
            Trusted external command.
        """
        args = [self._config.editor_bin]
        if self._config.disable_telemetry:
            args.append("--disable-telemetry")
        args.extend(["--folder-uri", attached_container_uri(container_name, workspace_folder)])
        return ExternalCommand(args=args, step="editor")

    def open(
        self, container_name: str, workspace_folder: str, project: str | None = None
    ) -> None:
        """Open the editor.

        Args:
            container_name: Container to attach to.
            workspace_folder: In-container folder to open.
            project: Compose project name for error context.
        """
        logger.info(f"Opening {workspace_folder} in container {container_name}")
        self._runner.run(self.command(container_name, workspace_folder), project=project)
