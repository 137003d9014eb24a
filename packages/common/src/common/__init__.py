"""Common utilities package."""

from common.logging import setup_logging
from common.exceptions import (
    ExporterException,
    FatalStartupError,
    TransientLookupError,
    ConfigurationError,
)
from common.utils import get_env, parse_duration
from common import constants

__all__ = [
    "setup_logging",
    "ExporterException",
    "FatalStartupError",
    "TransientLookupError",
    "ConfigurationError",
    "get_env",
    "parse_duration",
    "constants",
]
