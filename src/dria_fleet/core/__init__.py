"""
Shared building blocks: settings, logging, errors and subprocess execution.
"""

from .exceptions import (
    FleetError,
    ConfigurationError,
    NotFoundError,
    FormatError,
    ExternalServiceError,
)
from .runner import CommandRunner, CommandResult

__all__ = [
    "FleetError",
    "ConfigurationError",
    "NotFoundError",
    "FormatError",
    "ExternalServiceError",
    "CommandRunner",
    "CommandResult",
]
