from __future__ import annotations

import logging
from pathlib import Path

import typer

from flicker.core.constants import EXIT_INTERNAL_ERROR, EXIT_REGRESSION, EXIT_SUCCESS, TRACE_KINDS
from flicker.core.errors import EntryNotFoundError, TraceParseError
from flicker.core.runner import CommandOutcome, run_checks
from flicker.core.trace import LayerTraceEntry, WindowManagerTraceEntry, read_trace

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _version_callback(value: bool) -> None:
    if value:
        from flicker import __version__

        typer.echo(f"flicker {__version__}")
        raise typer.Exit()


app = typer.Typer(add_completion=False, help="Assertions over window manager and layers traces")


@app.callback(invoke_without_command=True)
def _main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def _emit_outcome(outcome: CommandOutcome) -> None:
    for report in outcome.reports:
        typer.echo(f"{report.status}: {report.spec_name}")
        for failure in report.failures:
            typer.echo(f"  {failure.assertion_name}: {failure.reason}")

    if outcome.errors:
        for error in outcome.errors:
            typer.echo(f"ERROR: {error}", err=True)

    if outcome.report_paths:
        typer.echo(f"Reports written to: {outcome.report_paths[0].parent}")

    if outcome.exit_code == EXIT_REGRESSION:
        typer.echo(f"{outcome.failed_specs} of {outcome.processed_specs} check(s) failed", err=True)

    raise typer.Exit(outcome.exit_code)


@app.command()
def check(
    targets: list[str] = typer.Argument(..., help="Check spec files or glob patterns"),
    project_root: Path = typer.Option(Path("."), "--project-root", help="Project root"),
    report_dir: Path | None = typer.Option(None, "--report-dir", help="Directory for JSON/Markdown reports"),
) -> None:
    """Run check specs against their traces and report assertion failures."""
    outcome = run_checks(
        targets=targets,
        project_root=project_root.resolve(),
        report_dir=report_dir,
    )
    _emit_outcome(outcome)


def _describe_entry(entry: WindowManagerTraceEntry | LayerTraceEntry) -> list[str]:
    lines = [f"Entry {entry.timestamp}"]
    if isinstance(entry, LayerTraceEntry):
        for layer in entry.visible_layers:
            lines.append(f"  layer {layer.id} {layer.name} {layer.visible_region}")
        return lines
    if entry.focused_window:
        lines.append(f"  focus: {entry.focused_window}")
    for window in entry.visible_windows:
        lines.append(f"  {window.kind:<9} {window.title} {window.frame}")
    return lines


@app.command()
def inspect(
    trace_path: Path = typer.Argument(..., help="Serialized trace file"),
    kind: str | None = typer.Option(None, "--kind", help="Trace kind: windowmanager | layers"),
    timestamp: int | None = typer.Option(None, "--timestamp", help="Show visible state of one entry"),
    dump: bool = typer.Option(False, "--dump", help="Read a single window manager snapshot"),
) -> None:
    """Summarize a trace: entry count, time span and visible state."""
    if kind is not None and kind not in TRACE_KINDS:
        typer.echo(f"ERROR: unsupported kind {kind!r}", err=True)
        raise typer.Exit(EXIT_INTERNAL_ERROR)
    try:
        trace = read_trace(trace_path, kind, dump=dump)
        entry = trace.get_entry(timestamp) if timestamp is not None else None
    except (OSError, TraceParseError, EntryNotFoundError) as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(EXIT_INTERNAL_ERROR) from exc

    typer.echo(f"{trace.trace_name}: {len(trace)} entries")
    if trace.entries:
        typer.echo(f"First timestamp: {trace.first_timestamp}")
        typer.echo(f"Last timestamp: {trace.last_timestamp}")
    typer.echo(f"Checksum: {trace.source_checksum}")
    if entry is not None:
        for line in _describe_entry(entry):
            typer.echo(line)
    raise typer.Exit(EXIT_SUCCESS)
