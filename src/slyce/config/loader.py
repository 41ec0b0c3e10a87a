"""
Configuration file loading and saving.

The reader is chosen by file suffix (``.json``, ``.yaml``/``.yml`` or
``.toml``). Directory paths and the padding colour may reference
environment variables as ``${VAR}`` or ``${VAR:default}``; ``SLYCE_VAR`` is
looked up before ``VAR``.
"""

import json
import os
import re
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Union

import yaml
from pydantic import ValidationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .models import Config
from ..exceptions import ConfigurationError

PathLike = Union[str, Path]

ENV_PREFIX = "SLYCE_"

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")

# (section, key) pairs whose string values are expanded; None means every key
_ENV_FIELDS = (("directories", None), ("crop", "padding_color"))


def _read_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _read_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


_READERS: Dict[str, Callable[[Path], Dict[str, Any]]] = {
    ".json": _read_json,
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".toml": _read_toml,
}

_PARSE_ERRORS = (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError, UnicodeDecodeError)


def load_config(config_path: PathLike) -> Config:
    """
    Load and validate a configuration file.

    Args:
        config_path: Path to a .json, .yaml, .yml or .toml file

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If the file is missing, unreadable, of an
            unsupported type, or fails validation
    """
    path = Path(config_path)

    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise ConfigurationError(
            f"Unsupported configuration file type: {path.suffix or '(none)'}",
            {"path": str(path), "supported": ", ".join(sorted(_READERS))},
        )

    try:
        data = reader(path)
    except _PARSE_ERRORS as e:
        raise ConfigurationError(f"Cannot parse {path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")

    return load_config_from_dict(expand_env_vars(data))


def load_config_from_dict(config_data: Dict[str, Any]) -> Config:
    """
    Validate a configuration dictionary.

    Raises:
        ConfigurationError: Listing every invalid field as ``section -> key: message``
    """
    try:
        return Config(**config_data)
    except ValidationError as e:
        problems = [
            f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(problems))


def save_config(config: Config, output_path: PathLike) -> None:
    """
    Write a configuration as JSON or YAML, chosen by file suffix.

    Raises:
        ConfigurationError: If the suffix is not supported or writing fails
    """
    path = Path(output_path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".yaml", ".yml"):
        raise ConfigurationError(f"Cannot save configuration as {suffix or '(none)'}; use .json or .yaml")

    data = config.model_dump(mode="json")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            if suffix == ".json":
                json.dump(data, f, indent=2)
            else:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigurationError(f"Cannot write {path}: {e}")


def get_default_config() -> Config:
    """Configuration with every default value."""
    return Config()


def validate_config_file(config_path: PathLike) -> bool:
    """Return True if the file loads and validates; raise ConfigurationError otherwise."""
    load_config(config_path)
    return True


def expand_env_vars(data: Dict[str, Any], prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """
    Expand ``${VAR}`` references in the directory paths and the padding colour.

    Other fields are left untouched. Returns a new dictionary.

    Raises:
        ConfigurationError: If a referenced variable is unset and has no default
    """
    expanded = dict(data)
    for section, key in _ENV_FIELDS:
        values = expanded.get(section)
        if not isinstance(values, dict):
            continue
        values = dict(values)
        for name, value in values.items():
            if (key is None or name == key) and isinstance(value, str):
                values[name] = _expand_string(value, prefix, f"{section}.{name}")
        expanded[section] = values
    return expanded


def _expand_string(text: str, prefix: str, field: str) -> str:
    def lookup(match: "re.Match") -> str:
        name, default = match.group(1), match.group(2)
        for candidate in (f"{prefix}{name}", name):
            if candidate in os.environ:
                return os.environ[candidate]
        if default is not None:
            return default
        raise ConfigurationError(
            f"Environment variable {name} is not set",
            {"field": field, "tried": f"{prefix}{name}, {name}"},
        )

    return _ENV_PATTERN.sub(lookup, text)
