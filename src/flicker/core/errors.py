from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flicker.core.assertions.result import AssertionResult

ERROR_CODE_TRACE_PARSE = "TRACE_PARSE_ERROR"
ERROR_CODE_TRACE_NOT_FOUND = "TRACE_NOT_FOUND"
ERROR_CODE_TRACE_READ = "TRACE_READ_ERROR"
ERROR_CODE_ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
ERROR_CODE_SPEC_INVALID = "SPEC_INVALID"
ERROR_CODE_ASSERTION_FAILED = "ASSERTION_FAILED"


@dataclass(slots=True, frozen=True)
class FlickerError:
    code: str
    message: str
    timestamp: int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
        if self.timestamp is not None:
            payload["timestamp"] = self.timestamp
        return payload


class TraceParseError(ValueError):
    """Raised when a serialized trace cannot be turned into entries."""


class EntryNotFoundError(LookupError):
    def __init__(self, timestamp: int) -> None:
        super().__init__(f"Entry does not exist for timestamp {timestamp}")
        self.timestamp = timestamp


class TraceAssertionError(AssertionError):
    """Raised by trace subjects when one or more assertions fail."""

    def __init__(self, message: str, failures: list[AssertionResult] | None = None) -> None:
        super().__init__(message)
        self.failures: list[AssertionResult] = list(failures or [])


__all__ = [
    "ERROR_CODE_ASSERTION_FAILED",
    "ERROR_CODE_ENTRY_NOT_FOUND",
    "ERROR_CODE_SPEC_INVALID",
    "ERROR_CODE_TRACE_NOT_FOUND",
    "ERROR_CODE_TRACE_PARSE",
    "ERROR_CODE_TRACE_READ",
    "EntryNotFoundError",
    "FlickerError",
    "TraceAssertionError",
    "TraceParseError",
]
