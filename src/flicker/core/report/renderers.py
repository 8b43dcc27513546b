from __future__ import annotations

import json
from pathlib import Path

from flicker.core.assertions.result import pretty_timestamp
from flicker.core.report.schema import CheckReport, validate_report_dict


def render_markdown(report: CheckReport) -> str:
    lines: list[str] = []
    lines.append(f"## Flicker Report: {report.spec_name}")
    lines.append("")
    status = {"PASS": "Passed", "FAIL": "Assertion failure", "ERROR": "Error"}[report.status]
    lines.append(f"- Status: **{status}**")
    lines.append(f"- Trace: `{report.trace_path}`")
    if report.trace_checksum:
        lines.append(f"- Checksum: `{report.trace_checksum}`")
    lines.append(f"- Entries: **{report.entry_count}**")

    lines.append("")
    lines.append("### Assertions")
    lines.append("")
    if not report.assertions:
        lines.append("No assertions.")
    for index, assertion in enumerate(report.assertions):
        lines.append(f"{index + 1}. `{assertion}`")

    lines.append("")
    lines.append("### Failures")
    lines.append("")
    if not report.failures and not report.errors:
        lines.append("No failures.")
    for failure in report.failures:
        reason = failure.reason.replace("\n", " ")
        lines.append(f"- `{failure.assertion_name}` at {pretty_timestamp(failure.timestamp)}: {reason}")
    for error in report.errors:
        lines.append(f"- `{error.code}`: {error.message}")

    lines.append("")
    return "\n".join(lines)


def write_reports(report: CheckReport, json_path: Path, md_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    md_path.parent.mkdir(parents=True, exist_ok=True)
    payload = validate_report_dict(report.to_dict())
    json_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    md_path.write_text(render_markdown(report), encoding="utf-8")


__all__ = ["render_markdown", "write_reports"]
