"""
Error taxonomy shared by setup and fleet management.

Setup steps let these propagate and abort the run; the fleet controller
catches them per group and keeps going.
"""

from typing import Optional


class FleetError(Exception):
    """Base class for every error raised by dria-fleet."""


class ConfigurationError(FleetError):
    """Missing or invalid required input (empty API key, bad node count)."""


class NotFoundError(FleetError):
    """A required file, directory, binary or tool does not exist."""


class FormatError(FleetError):
    """A wallet file could not be parsed into wallet records."""


class ExternalServiceError(FleetError):
    """An external tool or API reported failure.

    Args:
        message: Human readable summary
        output: Raw output of the failing command or response body, if any
    """

    def __init__(self, message: str, output: Optional[str] = None):
        super().__init__(message)
        self.output = output

    def __str__(self) -> str:
        base = super().__str__()
        if self.output:
            return f"{base}: {self.output.strip()}"
        return base
