"""Python API for dcrun.

This module provides high-level functions for driving the build and run
workflows as a library.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from dcrun.core.config import Config
from dcrun.core.env import missing_binaries
from dcrun.core.errors import ConfigNotFoundError
from dcrun.core.types import (
    BuildInput,
    BuildOutput,
    ContainerState,
    RunInput,
    RunResult,
    RuntimeConfig,
)
from dcrun.lifecycle.controller import LifecycleController
from dcrun.runtime.commands import CommandRunner
from dcrun.runtime.docker import DockerRuntime

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce_map(
    artifacts: Mapping[str, Any] | None, model: type[ModelT]
) -> dict[str, ModelT] | None:
    """Validate plain dict entries of an artifact map into models."""
    if artifacts is None:
        return None
    return {
        name: value if isinstance(value, model) else model.model_validate(value)
        for name, value in artifacts.items()
    }


def load_runtime_config(descriptor: str | Path, **overrides: Any) -> RuntimeConfig:
    """Load runtime settings from the descriptor's customizations block.

    A missing descriptor yields defaults; the workflows themselves report
    it with project context.

    Args:
        descriptor: devcontainer.json or a folder containing one.
        **overrides: Field values that win over the descriptor.

    Returns:
        RuntimeConfig instance.
    """
    try:
        return Config.from_file(Path(descriptor)).to_runtime_config(**overrides)
    except ConfigNotFoundError:
        return RuntimeConfig(**{k: v for k, v in overrides.items() if v is not None})


def create_controller(descriptor: str | Path, **overrides: Any) -> LifecycleController:
    """Create a lifecycle controller backed by Docker.

    Args:
        descriptor: devcontainer.json or a folder containing one.
        **overrides: RuntimeConfig field overrides.

    Returns:
        LifecycleController instance.
    """
    config = load_runtime_config(descriptor, **overrides)
    for name in missing_binaries(config):
        logger.warning(f"{name} not found on PATH")
    return LifecycleController(DockerRuntime(config), CommandRunner(), config)


def build(
    descriptor: str | Path,
    project: str,
    inputs: Mapping[str, Any] | None = None,
    outputs: Mapping[str, Any] | None = None,
    **overrides: Any,
) -> str:
    """Run the build workflow.

    Args:
        descriptor: devcontainer.json or a folder containing one.
        project: Compose project name.
        inputs: name -> {"src_path", "dest_path"} build context inputs.
        outputs: name -> {"container_path", "host_path"} artifacts to extract.
        **overrides: RuntimeConfig field overrides.

    Returns:
        ID of the built container.
    """
    controller = create_controller(descriptor, **overrides)
    return controller.build(
        Path(descriptor),
        project,
        inputs=_coerce_map(inputs, BuildInput),
        outputs=_coerce_map(outputs, BuildOutput),
    )


def run(
    descriptor: str | Path,
    project: str,
    volume_init_script: str | None = None,
    inputs: Mapping[str, Any] | None = None,
    open_editor: bool = True,
    **overrides: Any,
) -> RunResult:
    """Run the start-and-initialize workflow.

    Args:
        descriptor: devcontainer.json or a folder containing one.
        project: Compose project name.
        volume_init_script: Body of the one-time setup script.
        inputs: name -> {"host_path"} artifacts staged on first run.
        open_editor: Hand off to the editor at the end.
        **overrides: RuntimeConfig field overrides.

    Returns:
        Run outcome.
    """
    controller = create_controller(descriptor, **overrides)
    return controller.run(
        Path(descriptor),
        project,
        volume_init_script=volume_init_script,
        inputs=_coerce_map(inputs, RunInput),
        open_editor=open_editor,
    )


def status(descriptor: str | Path, project: str) -> ContainerState:
    """Report the state of a project's workspace container.

    Args:
        descriptor: devcontainer.json or a folder containing one.
        project: Compose project name.

    Returns:
        Container state.
    """
    return create_controller(descriptor).status(Path(descriptor), project)
