from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from flicker.core.assertions.result import AssertionResult
from flicker.core.constants import REPORT_SCHEMA_VERSION, STATUS_ERROR, STATUS_FAIL, STATUS_PASS
from flicker.core.errors import FlickerError

CheckStatus = Literal["PASS", "FAIL", "ERROR"]

_VALID_STATUSES = {STATUS_PASS, STATUS_FAIL, STATUS_ERROR}


@dataclass(slots=True)
class CheckReport:
    spec_name: str
    spec_path: str
    trace_path: str
    status: CheckStatus = "PASS"
    trace_kind: str | None = None
    trace_checksum: str | None = None
    entry_count: int = 0
    assertions: list[str] = field(default_factory=list)
    failures: list[AssertionResult] = field(default_factory=list)
    errors: list[FlickerError] = field(default_factory=list)
    schema_version: str = REPORT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "schema_version": self.schema_version,
            "spec_name": self.spec_name,
            "spec_path": self.spec_path,
            "trace_path": self.trace_path,
            "status": self.status,
            "entry_count": self.entry_count,
            "assertions": list(self.assertions),
            "failures": [failure.to_dict() for failure in self.failures],
            "errors": [error.to_dict() for error in self.errors],
        }
        if self.trace_kind is not None:
            payload["trace_kind"] = self.trace_kind
        if self.trace_checksum is not None:
            payload["trace_checksum"] = self.trace_checksum
        return payload


def validate_report_dict(data: dict[str, Any]) -> dict[str, Any]:
    if data.get("schema_version") != REPORT_SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported report schema_version '{data.get('schema_version')}'. Expected '{REPORT_SCHEMA_VERSION}'."
        )
    status = data.get("status")
    if status not in _VALID_STATUSES:
        raise ValueError(f"Report requires status in {sorted(_VALID_STATUSES)}, got: {status!r}")
    for key in ("failures", "errors", "assertions"):
        if not isinstance(data.get(key), list):
            raise ValueError(f"Report requires list field `{key}`")
    if status == STATUS_PASS and (data["failures"] or data["errors"]):
        raise ValueError("Passing report must not carry failures or errors")
    return data


__all__ = ["CheckReport", "CheckStatus", "validate_report_dict"]
