"""Host environment checks."""

import shutil

from dcrun.core.types import RuntimeConfig


def has_docker_daemon() -> bool:
    """Check if a Docker daemon answers on the default connection."""
    import docker
    from docker.errors import DockerException

    try:
        client = docker.from_env()
    except DockerException:
        return False
    try:
        return bool(client.ping())
    except DockerException:
        return False
    finally:
        client.close()


def missing_binaries(config: RuntimeConfig, include_editor: bool = True) -> list[str]:
    """List configured host binaries that are not on PATH.

    Args:
        config: Runtime configuration naming the binaries.
        include_editor: Also check the editor binary.

    Returns:
        Binary names that could not be found, in configuration order.
    """
    binaries = [config.devcontainer_bin, config.docker_bin]
    if include_editor:
        binaries.append(config.editor_bin)
    return [name for name in binaries if shutil.which(name) is None]
