"""Configuration management for dcrun.

Reads devcontainer descriptors, which are JSON with comments and trailing
commas, and converts them into the models the workflows consume.
"""

import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from dcrun.core.errors import ConfigNotFoundError
from dcrun.core.types import (
    DEFAULT_SERVICE_NAME,
    DevcontainerDescriptor,
    RuntimeConfig,
)

DEFAULT_DESCRIPTOR_LOCATIONS = (
    Path(".devcontainer") / "devcontainer.json",
    Path(".devcontainer.json"),
)

# camelCase keys accepted under customizations.dcrun
RUNTIME_CONFIG_KEYS = {
    "devcontainerBin": "devcontainer_bin",
    "dockerBin": "docker_bin",
    "editorBin": "editor_bin",
    "stagingDir": "staging_dir",
    "scriptShell": "script_shell",
    "stopTimeout": "stop_timeout",
    "disableTelemetry": "disable_telemetry",
    "execUser": "exec_user",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas from JSONC text.

    String literals are left untouched, so ``"http://x"`` survives.

    Args:
        text: JSON-with-comments source.

    Returns:
        Plain JSON source.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1

    return _strip_trailing_commas("".join(out))


def _strip_trailing_commas(text: str) -> str:
    out: list[str] = []
    in_string = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j >= n or text[j] not in "}]":
                out.append(ch)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def load_jsonc(path: Path) -> Any:
    """Load a JSONC document from disk.

    Args:
        path: File to read.

    Returns:
        Decoded document.
    """
    return json.loads(strip_jsonc(path.read_text(encoding="utf-8")))


def resolve_descriptor_path(path: Path) -> Path:
    """Locate the devcontainer descriptor.

    Args:
        path: Descriptor file, or a folder containing
            ``.devcontainer/devcontainer.json`` or ``.devcontainer.json``.

    Returns:
        Path to the descriptor file.

    Raises:
        ConfigNotFoundError: If no descriptor exists at the location.
    """
    path = Path(path)
    if path.is_file():
        return path.resolve()
    if path.is_dir():
        for candidate in DEFAULT_DESCRIPTOR_LOCATIONS:
            if (path / candidate).is_file():
                return (path / candidate).resolve()
    raise ConfigNotFoundError(f"devcontainer descriptor not found: {path}")


def load_artifact_map(path: Path, model: type[ModelT]) -> dict[str, ModelT]:
    """Load a name -> fields artifact map from a JSON file.

    Args:
        path: JSON (or JSONC) file containing an object of objects.
        model: Model each entry is validated into.

    Returns:
        Ordered mapping of artifact name to model.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ValueError: If the document is not an object.
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"artifact map not found: {path}")
    data = load_jsonc(path)
    if not isinstance(data, dict):
        raise ValueError(f"artifact map must be a JSON object: {path}")
    return {name: model.model_validate(fields) for name, fields in data.items()}


class Config:
    """Configuration manager for a devcontainer descriptor."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to the descriptor file.
        """
        self._config_path = config_path
        self._config_data: dict[str, Any] = {}

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load configuration from a descriptor file or folder.

        Args:
            config_path: Descriptor file or folder containing one.

        Returns:
            Config instance with loaded configuration.

        Raises:
            ConfigNotFoundError: If the descriptor does not exist.
        """
        instance = cls(resolve_descriptor_path(config_path))
        instance.load()
        return instance

    @classmethod
    def from_dict(cls, data: dict[str, Any], config_path: Path | None = None) -> "Config":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary.
            config_path: Optional path the data is considered to live at.

        Returns:
            Config instance.
        """
        instance = cls(config_path)
        instance._config_data = data
        return instance

    def load(self) -> None:
        """Load configuration from file."""
        if self._config_path is None or not self._config_path.exists():
            raise ConfigNotFoundError(
                f"devcontainer descriptor not found: {self._config_path}"
            )

        data = load_jsonc(self._config_path)
        if not isinstance(data, dict):
            raise ValueError(f"descriptor must be a JSON object: {self._config_path}")
        self._config_data = data

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key (supports dot notation).
            default: Default value if key not found.

        Returns:
            Configuration value.
        """
        keys = key.split(".")
        value = self._config_data
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    @property
    def path(self) -> Path | None:
        """Get descriptor path."""
        return self._config_path

    @property
    def data(self) -> dict[str, Any]:
        """Get raw configuration data."""
        return self._config_data

    @property
    def workspace_folder(self) -> str | None:
        """Get the in-container workspace folder, or None when unset."""
        value = self.get("workspaceFolder")
        if not isinstance(value, str) or not value.strip():
            return None
        return value

    def to_descriptor(self) -> DevcontainerDescriptor:
        """Convert configuration to a DevcontainerDescriptor.

        Returns:
            DevcontainerDescriptor instance.
        """
        path = self._config_path or Path.cwd() / "devcontainer.json"

        compose_files = self.get("dockerComposeFile", [])
        if isinstance(compose_files, str):
            compose_files = [compose_files]

        return DevcontainerDescriptor(
            path=path,
            workspace_folder=self.workspace_folder,
            service=self.get("service") or DEFAULT_SERVICE_NAME,
            docker_compose_file=[
                (path.parent / f).resolve() for f in compose_files
            ],
        )

    def to_runtime_config(self, **overrides: Any) -> RuntimeConfig:
        """Convert the ``customizations.dcrun`` block to a RuntimeConfig.

        Args:
            **overrides: Field values that win over the descriptor; None
                values are ignored.

        Returns:
            RuntimeConfig instance.
        """
        section = self.get("customizations.dcrun", {}) or {}
        values: dict[str, Any] = {}
        for key, value in section.items():
            field = RUNTIME_CONFIG_KEYS.get(key, key)
            values[field] = value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return RuntimeConfig(**values)
