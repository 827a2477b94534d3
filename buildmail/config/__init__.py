"""Configuration management module for buildmail."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import apply_environment_overrides, load_config, validate_config_file
from .models import (
    AppConfig,
    AttachmentsConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MessageConfig,
    WorkspaceConfig,
    WorkspaceType,
)
from .sizes import SizeParseError, format_size, parse_size

__all__ = [
    # Main loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    "apply_environment_overrides",
    # Configuration models
    "AppConfig",
    "AttachmentsConfig",
    "WorkspaceConfig",
    "MessageConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "WorkspaceType",
    "LogLevel",
    "LogFormat",
    # Sizes
    "parse_size",
    "format_size",
    "SizeParseError",
    # Exceptions
    "ConfigurationError",
]
