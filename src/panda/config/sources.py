"""Custom pydantic-settings sources for Panda configuration.

This module provides:

- YamlLayersSettingsSource: A pydantic-settings source that loads
  configuration from layered YAML files and deep-merges them.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
2. Project config: .panda/config.yaml in project root
3. User config: ~/.config/panda/config.yaml (or PANDA_CONFIG_DIR)

Nested mappings merge key by key; any other value in a higher layer
replaces the lower one.

Environment variables:
- PANDA_CONFIG_DIR: Override user config directory (default: ~/.config/panda)
"""

import collections.abc as _abc
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "PANDA_CONFIG_DIR"

PROJECT_CONFIG_DIR = ".panda"
CONFIG_FILE_NAME = "config.yaml"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def deep_merge(
    base: dict[str, _typing.Any],
    override: _abc.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Merge override into a copy of base.

    Mappings present in both are merged recursively; everything else in
    override replaces the value in base.
    """
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, _abc.Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML contents, or None if file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or contains non-dict content at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise ConfigFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return None

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return parsed


class YamlLayersSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that loads from layered YAML config files.

    Layers (lowest to highest precedence):
    1. User config (~/.config/panda/config.yaml)
    2. Project config (.panda/config.yaml)

    Both layers are optional. A layer that exists but can't be parsed
    raises ConfigFileError rather than being ignored.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_root: Optional project root path for project-level config.
            user_config_path: Override path for user config file (for testing).
                If not provided, uses PANDA_CONFIG_DIR env var or default XDG path.
        """
        super().__init__(settings_cls)
        self._project_root = project_root
        self._user_config_path = user_config_path
        # Layers actually loaded, highest precedence first
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._data = self._load_config_layers()

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        merged: dict[str, _typing.Any] = {}
        loaded: list[tuple[str, _pathlib.Path]] = []

        for layer_name, path, _exists in reversed(self.get_layer_paths()):
            if not path.exists():
                continue
            content = load_yaml_file(path)
            if content:
                merged = deep_merge(merged, content)
                loaded.append((layer_name, path))

        loaded.reverse()
        self._loaded_layers = loaded
        return merged

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """
        Get info about layers that were actually loaded.

        Returns:
            List of (layer_name, path) tuples, highest precedence first.
        """
        return list(self._loaded_layers)

    def get_layer_paths(self) -> list[tuple[str, _pathlib.Path, bool]]:
        """
        Get info about all config layers.

        Returns:
            List of (layer_name, path, exists) tuples in precedence order
            (highest first: project, user).
        """
        layers: list[tuple[str, _pathlib.Path, bool]] = []

        if self._project_root:
            project_path = get_project_config_path(self._project_root)
            layers.append(("project", project_path, project_path.exists()))

        user_path = self._user_config_path or get_user_config_path()
        layers.append(("user", user_path, user_path.exists()))

        return layers

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """
        Get value for a field from the merged layers.

        Returns:
            Tuple of (value, field_name, is_complex).
        """
        value = self._data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """
        Return merged config as a plain dict for Pydantic validation.

        Unknown keys are kept so Settings.model_extra can report them.
        """
        return dict(self._data)


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects PANDA_CONFIG_DIR environment variable if set,
    otherwise uses XDG standard path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "panda"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user config file."""
    return get_user_config_dir() / CONFIG_FILE_NAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to the project config file (.panda/config.yaml)."""
    return project_root / PROJECT_CONFIG_DIR / CONFIG_FILE_NAME
