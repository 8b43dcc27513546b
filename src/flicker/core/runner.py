"""Run check specs against their traces and collect reports."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from flicker.core.constants import (
    CHECK_AT_END,
    CHECK_AT_RANGE,
    CHECK_AT_START,
    EXIT_INTERNAL_ERROR,
    EXIT_REGRESSION,
    EXIT_SUCCESS,
    REPORTS_DIR,
    STATUS_ERROR,
    STATUS_FAIL,
    TRACE_KIND_LAYERS,
    TRACE_KIND_WINDOW_MANAGER,
)
from flicker.core.errors import (
    ERROR_CODE_ASSERTION_FAILED,
    ERROR_CODE_ENTRY_NOT_FOUND,
    ERROR_CODE_SPEC_INVALID,
    ERROR_CODE_TRACE_NOT_FOUND,
    ERROR_CODE_TRACE_PARSE,
    ERROR_CODE_TRACE_READ,
    EntryNotFoundError,
    FlickerError,
    TraceAssertionError,
    TraceParseError,
)
from flicker.core.report import CheckReport, write_reports
from flicker.core.specs import STEPS_BY_KIND, CheckSpec, load_specs
from flicker.core.subjects import LayersTraceSubject, WindowManagerTraceSubject, assert_that
from flicker.core.trace import AnyTrace, LayersTrace, read_trace

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandOutcome:
    exit_code: int
    processed_specs: int
    failed_specs: int = 0
    errors: list[str] = field(default_factory=list)
    reports: list[CheckReport] = field(default_factory=list)
    report_paths: list[Path] = field(default_factory=list)


def _slugify(value: str) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", value.strip().lower())
    slug = slug.strip("-")
    return slug or "check"


def build_subject(trace: AnyTrace, spec: CheckSpec) -> LayersTraceSubject | WindowManagerTraceSubject:
    """Translate the spec's assertion sets into chained subject calls."""
    kind = TRACE_KIND_LAYERS if isinstance(trace, LayersTrace) else TRACE_KIND_WINDOW_MANAGER
    allowed = STEPS_BY_KIND[kind]
    subject = assert_that(trace)
    for set_index, steps in enumerate(spec.assertion_sets):
        if set_index > 0:
            subject.then()
        for step_index, step in enumerate(steps):
            if step.method not in allowed:
                raise ValueError(f"Assertion '{step.method}' is not available for {kind} traces")
            if step_index > 0:
                subject.and_()
            getattr(subject, step.method)(*step.args, **step.kwargs)
    if spec.skip_until_first_assertion:
        subject.skip_until_first_assertion()
    return subject


def _evaluate(subject: LayersTraceSubject | WindowManagerTraceSubject, spec: CheckSpec) -> None:
    if spec.at == CHECK_AT_START:
        subject.in_the_beginning()
    elif spec.at == CHECK_AT_END:
        subject.at_the_end()
    elif spec.at == CHECK_AT_RANGE:
        assert spec.range_start is not None and spec.range_end is not None
        subject.for_range(spec.range_start, spec.range_end)
    else:
        subject.for_all_entries()


def run_check(spec: CheckSpec) -> CheckReport:
    trace_path = spec.resolved_trace_path()
    report = CheckReport(
        spec_name=spec.name,
        spec_path=str(spec.source_path),
        trace_path=str(trace_path),
        assertions=[" and ".join(step.describe() for step in steps) for steps in spec.assertion_sets],
    )

    try:
        trace = read_trace(trace_path, spec.kind, dump=spec.dump)
    except FileNotFoundError:
        report.status = STATUS_ERROR
        report.errors.append(FlickerError(code=ERROR_CODE_TRACE_NOT_FOUND, message=f"Trace not found: {trace_path}"))
        return report
    except OSError as exc:
        report.status = STATUS_ERROR
        report.errors.append(
            FlickerError(code=ERROR_CODE_TRACE_READ, message=f"Cannot read trace {trace_path}: {exc.strerror or exc}")
        )
        return report
    except TraceParseError as exc:
        report.status = STATUS_ERROR
        report.errors.append(FlickerError(code=ERROR_CODE_TRACE_PARSE, message=str(exc)))
        return report

    report.trace_kind = TRACE_KIND_LAYERS if isinstance(trace, LayersTrace) else TRACE_KIND_WINDOW_MANAGER
    report.trace_checksum = trace.source_checksum
    report.entry_count = len(trace.entries)

    try:
        subject = build_subject(trace, spec)
    except (TypeError, ValueError) as exc:
        report.status = STATUS_ERROR
        report.errors.append(FlickerError(code=ERROR_CODE_SPEC_INVALID, message=str(exc)))
        return report

    try:
        _evaluate(subject, spec)
    except TraceAssertionError as exc:
        report.status = STATUS_FAIL
        report.failures = list(exc.failures)
        if not exc.failures:
            report.errors.append(FlickerError(code=ERROR_CODE_ASSERTION_FAILED, message=str(exc)))
    except EntryNotFoundError as exc:
        report.status = STATUS_ERROR
        report.errors.append(
            FlickerError(code=ERROR_CODE_ENTRY_NOT_FOUND, message=str(exc), timestamp=exc.timestamp)
        )
    except (TypeError, ValueError) as exc:
        report.status = STATUS_ERROR
        report.errors.append(FlickerError(code=ERROR_CODE_SPEC_INVALID, message=str(exc)))

    logger.info("Check %s: %s", spec.name, report.status)
    return report


def run_checks(
    *,
    targets: list[str],
    project_root: Path,
    report_dir: Path | None = None,
) -> CommandOutcome:
    try:
        specs = load_specs(targets, cwd=project_root)
    except (OSError, ValueError) as exc:
        return CommandOutcome(exit_code=EXIT_INTERNAL_ERROR, processed_specs=0, errors=[str(exc)])

    reports_root = report_dir or (project_root / REPORTS_DIR)
    outcome = CommandOutcome(exit_code=EXIT_SUCCESS, processed_specs=0)
    seen_slugs: dict[str, int] = {}
    for spec in specs:
        report = run_check(spec)
        slug = _slugify(spec.name)
        seen_slugs[slug] = seen_slugs.get(slug, 0) + 1
        if seen_slugs[slug] > 1:
            slug = f"{slug}-{seen_slugs[slug]}"
        json_path = reports_root / f"{slug}.json"
        md_path = reports_root / f"{slug}.md"
        write_reports(report, json_path, md_path)

        outcome.processed_specs += 1
        outcome.reports.append(report)
        outcome.report_paths.append(md_path)
        if report.status == STATUS_FAIL:
            outcome.failed_specs += 1
        elif report.status == STATUS_ERROR:
            outcome.errors.extend(f"{spec.name}: {error.message}" for error in report.errors)

    if outcome.errors:
        outcome.exit_code = EXIT_INTERNAL_ERROR
    elif outcome.failed_specs:
        outcome.exit_code = EXIT_REGRESSION
    return outcome


__all__ = [
    "CommandOutcome",
    "build_subject",
    "run_check",
    "run_checks",
]
