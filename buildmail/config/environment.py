"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError
from .sizes import SizeParseError, parse_size

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EnvironmentConfig:
    """Environment variable overrides and secrets.

    Values set here take precedence over the YAML configuration; the remote
    workspace token is only ever read from the environment.
    """

    def __init__(
        self,
        max_attachment_size: Optional[int] = None,
        log_level: Optional[str] = None,
        workspace_url: Optional[str] = None,
        workspace_token: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.max_attachment_size = max_attachment_size
        self.log_level = log_level
        self.workspace_url = workspace_url
        self.workspace_token = workspace_token
        self.environment = environment or "local"


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional:
    - BUILDMAIL_MAX_ATTACHMENT_SIZE: Attachment ceiling override (e.g. "10MB", 0 = unlimited)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - BUILDMAIL_WORKSPACE_URL: Remote workspace agent URL override
    - BUILDMAIL_WORKSPACE_TOKEN: Bearer token for the remote workspace agent
    - ENVIRONMENT: Environment label for log records (default: local)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If any variable is set to an invalid value
    """
    errors = []

    max_size_str = os.getenv("BUILDMAIL_MAX_ATTACHMENT_SIZE")
    log_level = os.getenv("LOG_LEVEL")
    workspace_url = os.getenv("BUILDMAIL_WORKSPACE_URL")
    workspace_token = os.getenv("BUILDMAIL_WORKSPACE_TOKEN")
    environment = os.getenv("ENVIRONMENT")

    max_attachment_size = None
    if max_size_str:
        try:
            max_attachment_size = max(parse_size(max_size_str), 0)
        except SizeParseError as e:
            errors.append(f"Invalid BUILDMAIL_MAX_ATTACHMENT_SIZE: {e}")

    if log_level:
        if log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        else:
            log_level = log_level.upper()

    if workspace_url and not workspace_url.startswith(("http://", "https://")):
        errors.append(
            f"Invalid BUILDMAIL_WORKSPACE_URL: '{workspace_url}'. Must start with http:// or https://"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the values",
                "Use sizes like 1048576, 512KB or 10MB for BUILDMAIL_MAX_ATTACHMENT_SIZE",
            ],
        )

    return EnvironmentConfig(
        max_attachment_size=max_attachment_size,
        log_level=log_level,
        workspace_url=workspace_url,
        workspace_token=workspace_token,
        environment=environment,
    )
