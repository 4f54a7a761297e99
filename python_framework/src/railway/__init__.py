"""
Railway-Oriented Programming (ROP) framework.

Explicit, composable error handling — fallible steps return a Result
instead of raising.

    from railway import Result, ErrorCode

    def require_chains(chains: list[str]) -> Result[list[str]]:
        if not chains:
            return Result.failure(ErrorCode.VALIDATION_ERROR, "no certificates supplied")
        return Result.success(chains)
"""

from railway.result import Result, Success, Failure
from railway.failure import ErrorCode, FailureDescription
from railway.execution import (
    ExecutionContext,
    NoOpExecutionContext,
    LoggingExecutionContext,
)
from railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultAssertions",
]

__version__ = "1.0.0"
