"""Helpers shared by the commands."""

import re
from typing import Any, Mapping

from configargparse import ArgumentTypeError

from .logging import LoggingConfigurator

BYTE_SIZE_PATTERN = re.compile(r"^(\d+)([kKmMgG]?)[bB]?$")
BYTE_SIZE_SHIFTS = {"": 0, "K": 10, "M": 20, "G": 30}


def common_config(settings: Mapping[str, Any]):
    """Configure logging before a command starts."""
    LoggingConfigurator.configure(
        settings.get("log.config"),
        settings.get("log.level"),
        settings.get("log.file"),
    )


def _check_bounds(value: int, min_value: int = None, max_value: int = None) -> int:
    if min_value is not None and value < min_value:
        raise ArgumentTypeError(f"Value must be greater than or equal to {min_value}")
    if max_value is not None and value > max_value:
        raise ArgumentTypeError(f"Value must be less than or equal to {max_value}")
    return value


class BoundedInt:
    """Argument type for an integer within optional bounds, like a port number."""

    def __init__(self, min: int = None, max: int = None):
        """Initialize the parser with its inclusive bounds."""
        self.min_val = min
        self.max_val = max

    def __call__(self, arg: str) -> int:
        """Parse the argument value."""
        try:
            value = int(arg)
        except (TypeError, ValueError):
            raise ArgumentTypeError(f"Invalid integer value: '{arg}'")
        return _check_bounds(value, self.min_val, self.max_val)

    def __repr__(self):
        """Name the type in argparse error messages."""
        return "integer"


class ByteSize:
    """Argument type for a size in bytes with an optional K, M or G suffix."""

    def __init__(self, min: int = 0, max: int = None):
        """Initialize the parser with its inclusive bounds."""
        self.min_size = min
        self.max_size = max

    def __call__(self, arg: str) -> int:
        """Parse the argument value."""
        match = BYTE_SIZE_PATTERN.match(arg or "")
        if not match:
            raise ArgumentTypeError(f"Invalid size value: '{arg}'")
        size = int(match[1]) << BYTE_SIZE_SHIFTS[match[2].upper()]
        return _check_bounds(size, self.min_size, self.max_size)

    def __repr__(self):
        """Name the type in argparse error messages."""
        return "bytes"
