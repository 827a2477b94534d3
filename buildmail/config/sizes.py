"""Byte size parsing utilities for configuration."""

import re
from typing import Union


class SizeParseError(ValueError):
    """Raised when a size string cannot be parsed."""

    pass


_UNIT_MULTIPLIERS = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "kib": 1024,
    "m": 1024 ** 2,
    "mb": 1024 ** 2,
    "mib": 1024 ** 2,
    "g": 1024 ** 3,
    "gb": 1024 ** 3,
    "gib": 1024 ** 3,
}

_SIZE_PATTERN = re.compile(r"^(-?\d+(?:\.\d+)?)\s*([a-z]*)$")


def parse_size(value: Union[str, int]) -> int:
    """
    Parse a byte size to an integer number of bytes.

    Accepts plain integers and strings with an optional binary unit suffix.
    Zero or a negative value means "unlimited" and is returned unchanged.

    Args:
        value: Size as an int or a string like "10MB", "512k", "1.5 GiB"

    Returns:
        Size in bytes

    Raises:
        SizeParseError: If the value is not a recognizable size

    Examples:
        >>> parse_size("10MB")
        10485760
        >>> parse_size("512k")
        524288
        >>> parse_size(0)
        0
    """
    if isinstance(value, bool):
        raise SizeParseError(f"Invalid size: {value!r}")

    if isinstance(value, int):
        return value

    text = str(value).strip().lower()
    if not text:
        raise SizeParseError("Size string cannot be empty")

    match = _SIZE_PATTERN.match(text)
    if not match:
        raise SizeParseError(
            f"Invalid size format: '{value}'. "
            "Expected a number with an optional unit, e.g. '1048576', '512k', '10MB' or '1GiB'"
        )

    number, unit = match.groups()
    multiplier = _UNIT_MULTIPLIERS.get(unit)
    if multiplier is None:
        raise SizeParseError(
            f"Unknown size unit '{unit}' in '{value}'. Use B, KB, MB or GB"
        )

    return int(float(number) * multiplier)


def format_size(size: int) -> str:
    """
    Convert a byte count to a short human-readable string.

    Args:
        size: Number of bytes

    Returns:
        Human-readable string (e.g., "512 B", "1.5 MB"); "unlimited" for <= 0
    """
    if size <= 0:
        return "unlimited"
    if size < 1024:
        return f"{size} B"
    for unit in ("KB", "MB"):
        size_in_unit = size / (1024 if unit == "KB" else 1024 ** 2)
        if size_in_unit < 1024:
            return f"{size_in_unit:.1f} {unit}"
    return f"{size / 1024 ** 3:.1f} GB"
