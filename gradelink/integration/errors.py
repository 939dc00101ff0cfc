"""
Exception hierarchy for the gradelink outcome service.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import datetime
from typing import Any, Dict, Optional


class LTIError(Exception):
    """Base exception for LTI-related errors with structured error context."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.timestamp = datetime.datetime.now(datetime.timezone.utc)


class ValidationError(LTIError):
    """Raised when a value handed to the base outcome service is out of range."""
    pass


class LTIConfigurationError(LTIError):
    """Missing launch attributes or invalid service settings."""
    pass


class OutcomeError(LTIError):
    """An outcome document could not be processed."""
    pass


class OutcomeTransportError(OutcomeError):
    """The outcome service could not be reached."""
    pass


__all__ = [
    "LTIError",
    "ValidationError",
    "LTIConfigurationError",
    "OutcomeError",
    "OutcomeTransportError",
]
