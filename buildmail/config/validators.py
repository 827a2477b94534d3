"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List

# Ceilings above this are allowed but most mail servers will refuse the message
LARGE_ATTACHMENT_WARNING_BYTES = 25 * 1024 * 1024


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check raw configuration for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    attachments = config_dict.get("attachments", {})
    if isinstance(attachments, dict):
        pattern = attachments.get("pattern", "")
        if isinstance(pattern, str):
            segments = [s.strip() for s in pattern.split(",")]
            if pattern.strip() and any(not s for s in segments):
                warning_messages.append(
                    "attachments.pattern contains empty segments, which are ignored"
                )
            if any(s.startswith("/") for s in segments):
                warning_messages.append(
                    "attachments.pattern contains absolute paths; patterns are relative to the workspace"
                )

        max_size = attachments.get("max_attachment_size", 0)
        if isinstance(max_size, int) and not isinstance(max_size, bool):
            if max_size > LARGE_ATTACHMENT_WARNING_BYTES:
                warning_messages.append(
                    f"max_attachment_size ({max_size} bytes) exceeds what most mail servers accept"
                )
            elif max_size < 0:
                warning_messages.append(
                    "Negative max_attachment_size is treated as unlimited"
                )

    workspace = config_dict.get("workspace", {})
    if isinstance(workspace, dict) and workspace.get("type", "local") == "local":
        if workspace.get("url") or workspace.get("node"):
            warning_messages.append(
                "workspace.url and workspace.node are ignored for local workspaces"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
