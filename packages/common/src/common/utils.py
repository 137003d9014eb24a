"""Utility functions."""

import os
import re
from typing import Optional

from common.exceptions import ConfigurationError

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
    """
    Get environment variable with optional default and required flag.

    An empty value counts as missing.

    Args:
        key: Environment variable name
        default: Default value if not found
        required: If True, raise error if not found and no default

    Returns:
        Environment variable value

    Raises:
        ConfigurationError: If required=True and variable not found
    """
    value = os.getenv(key) or default

    if required and not value:
        raise ConfigurationError(
            f"Required environment variable '{key}' not found",
            context={"field": key},
        )

    return value or ""


def parse_duration(value: str) -> float:
    """
    Parse a duration such as ``5m``, ``1h30m``, ``90s`` or ``300`` into seconds.

    Raises:
        ConfigurationError: If the value is malformed or not positive
    """
    text = value.strip().lower()
    if not text:
        raise ConfigurationError("Empty duration", context={"value": value})

    try:
        seconds = float(text)
    except ValueError:
        seconds = 0.0
        position = 0
        for match in _DURATION_PART.finditer(text):
            if match.start() != position:
                break
            seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
            position = match.end()
        if position != len(text):
            raise ConfigurationError("Malformed duration", context={"value": value})

    if seconds <= 0:
        raise ConfigurationError("Duration must be positive", context={"value": value})

    return seconds
