"""
Failure description — structured error information for the failure track.

An ErrorCode classifies the failure; FailureDescription carries the code,
a human-readable message, the optional causing exception and the moment
the failure was recorded.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    - Caller errors: VALIDATION, BUSINESS_RULE
    - System errors: TECHNICAL, CONFIGURATION, UNKNOWN
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Malformed or missing input."""

    BUSINESS_RULE_ERROR = "BUSINESS_RULE_ERROR"
    """Domain invariant violated."""

    TECHNICAL_ERROR = "TECHNICAL_ERROR"
    """Encoding, I/O or library failure."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """System misconfiguration."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """Unclassified failure."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor.

    >>> desc = FailureDescription(ErrorCode.VALIDATION_ERROR, "no certificates supplied")
    >>> desc.code
    <ErrorCode.VALIDATION_ERROR: 'VALIDATION_ERROR'>
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def create(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> FailureDescription:
        return FailureDescription(code=code, message=message, exception=exception)

    def with_cause(self) -> FailureDescription:
        """Copy of this description with the exception text appended to the message."""
        if self.exception is None:
            return self
        return FailureDescription(self.code, f"{self.message}: {self.exception}", self.exception)

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__))
        return f"{self.message}\n{tb}"
