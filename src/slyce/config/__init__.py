"""
Configuration system with Pydantic models and validation.

Provides configuration management with type safety, validation, and
support for JSON, YAML and TOML files.
"""

from .models import (
    Config,
    DirectoryConfig,
    EdgeDetectionConfig,
    MarginConfig,
    CropConfig,
    LoggingConfig,
    EdgeMode,
    ComputeBackend,
    OutputFormat,
    LogLevel,
    parse_color,
)
from .loader import (
    load_config,
    load_config_from_dict,
    save_config,
    get_default_config,
    validate_config_file,
)

__all__ = [
    # Configuration models
    "Config",
    "DirectoryConfig",
    "EdgeDetectionConfig",
    "MarginConfig",
    "CropConfig",
    "LoggingConfig",
    "EdgeMode",
    "ComputeBackend",
    "OutputFormat",
    "LogLevel",
    "parse_color",
    # Configuration loading
    "load_config",
    "load_config_from_dict",
    "save_config",
    "get_default_config",
    "validate_config_file",
]
