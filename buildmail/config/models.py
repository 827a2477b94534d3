"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .sizes import SizeParseError, parse_size


class WorkspaceType(str, Enum):
    """Supported workspace providers."""

    LOCAL = "local"
    REMOTE = "remote"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class AttachmentsConfig(BaseModel):
    """Which files to attach and how much may be attached in total."""

    pattern: str = Field(
        "",
        description="Comma-separated glob patterns, may contain {{ placeholders }}",
    )
    max_attachment_size: Union[int, str] = Field(
        0,
        description="Cumulative attachment ceiling, e.g. 10485760 or '10MB' (0 = unlimited)",
    )
    attach_build_log: bool = Field(False, description="Attach the build console log")
    compress_build_log: bool = Field(False, description="Zip the build log before attaching")

    @field_validator("pattern")
    @classmethod
    def strip_pattern(cls, v: str) -> str:
        """Strip surrounding whitespace from the pattern."""
        return v.strip()

    @field_validator("max_attachment_size")
    @classmethod
    def parse_max_attachment_size(cls, v: Union[int, str]) -> int:
        """Convert human-readable sizes to bytes; negative values collapse to 0."""
        try:
            size = parse_size(v)
        except SizeParseError as e:
            raise ValueError(str(e)) from e
        return max(size, 0)

    @model_validator(mode="after")
    def validate_compression(self):
        """Compression only applies when the build log is attached."""
        if self.compress_build_log and not self.attach_build_log:
            raise ValueError("compress_build_log requires attach_build_log to be true")
        return self


class WorkspaceConfig(BaseModel):
    """Where the build workspace lives."""

    type: WorkspaceType = Field(WorkspaceType.LOCAL, description="Workspace provider (local or remote)")
    path: Optional[str] = Field(None, description="Workspace directory for local workspaces")
    url: Optional[str] = Field(None, description="Agent base URL for remote workspaces")
    node: Optional[str] = Field(None, description="Execution node name for remote workspaces")
    timeout: int = Field(30, ge=5, le=300, description="Remote request timeout (seconds)")
    user_agent: str = Field("buildmail/1.0", min_length=1, description="User-Agent for remote requests")

    @field_validator("path", "url", "node")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank strings as unset."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @model_validator(mode="after")
    def validate_provider_fields(self):
        """Remote workspaces need a URL and a node; local ones ignore both."""
        if self.type == WorkspaceType.REMOTE:
            missing = [name for name in ("url", "node") if not getattr(self, name)]
            if missing:
                raise ValueError(
                    f"Remote workspace requires: {', '.join(missing)}"
                )
        return self

    model_config = {"use_enum_values": True, "validate_default": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class MessageConfig(BaseModel):
    """Defaults for the composed notification message."""

    subject: str = Field("Build notification for {{ build_id }}", min_length=1)
    body: str = Field("See the attached files for details.\n")
    sender: Optional[str] = Field(None, description="From address")
    recipients: List[str] = Field(default_factory=list, description="To addresses")


class AppConfig(BaseModel):
    """Root configuration object for buildmail."""

    attachments: AttachmentsConfig = Field(
        default_factory=AttachmentsConfig, description="Attachment settings"
    )
    workspace: WorkspaceConfig = Field(
        default_factory=WorkspaceConfig, description="Workspace provider"
    )
    message: MessageConfig = Field(default_factory=MessageConfig, description="Message defaults")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
