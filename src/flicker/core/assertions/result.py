from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_NS_PER_MS = 1_000_000
_TIME_UNITS = (
    ("d", 24 * 60 * 60 * 1000 * _NS_PER_MS),
    ("h", 60 * 60 * 1000 * _NS_PER_MS),
    ("m", 60 * 1000 * _NS_PER_MS),
    ("s", 1000 * _NS_PER_MS),
    ("ms", _NS_PER_MS),
)


def pretty_timestamp(timestamp_ns: int) -> str:
    """Render a nanosecond timestamp as ``<d>d<h>h<m>m<s>s<ms>ms``."""
    parts: list[str] = []
    remaining = timestamp_ns
    for suffix, unit_ns in _TIME_UNITS:
        value, remaining = divmod(remaining, unit_ns)
        parts.append(f"{value}{suffix}")
    return "".join(parts)


@dataclass(slots=True, frozen=True)
class AssertionResult:
    reason: str = ""
    assertion_name: str = ""
    timestamp: int = 0
    success: bool = False

    @classmethod
    def passing(cls, assertion_name: str, timestamp: int, reason: str = "") -> AssertionResult:
        return cls(reason=reason, assertion_name=assertion_name, timestamp=timestamp, success=True)

    @classmethod
    def failing(cls, assertion_name: str, timestamp: int, reason: str) -> AssertionResult:
        return cls(reason=reason, assertion_name=assertion_name, timestamp=timestamp, success=False)

    def passed(self) -> bool:
        return self.success

    def failed(self) -> bool:
        return not self.success

    def negate(self) -> AssertionResult:
        return AssertionResult(
            reason=f"!{self.reason}",
            assertion_name=f"!{self.assertion_name}",
            timestamp=self.timestamp,
            success=not self.success,
        )

    def assert_passed(self) -> None:
        if self.failed():
            raise AssertionError(f"Expected assertion to pass\n{self}")

    def assert_failed(self, reason: str = "") -> None:
        if self.passed():
            raise AssertionError(f"Expected assertion to fail\n{self}")
        if reason and reason not in self.reason:
            raise AssertionError(f"Expected failure reason to contain {reason!r}\n{self}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "assertion_name": self.assertion_name,
            "reason": self.reason,
            "success": self.success,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        return (
            f"Timestamp: {pretty_timestamp(self.timestamp)}\n"
            f"Assertion: {self.assertion_name}\n"
            f"Reason:   {self.reason}"
        )


__all__ = ["AssertionResult", "pretty_timestamp"]
