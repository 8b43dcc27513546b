from __future__ import annotations

import json
import logging
from pathlib import Path

from flicker.core.constants import TRACE_KIND_LAYERS, TRACE_KIND_WINDOW_MANAGER, TRACE_KINDS
from flicker.core.errors import TraceParseError
from flicker.core.trace.base import load_document, sha256_of_bytes
from flicker.core.trace.layers import LayersTrace
from flicker.core.trace.windowmanager import WindowManagerTrace

logger = logging.getLogger(__name__)

AnyTrace = WindowManagerTrace | LayersTrace


def read_trace(path: Path, kind: str | None = None, *, dump: bool = False) -> AnyTrace:
    """Read a window manager or layers trace from ``path``.

    ``kind`` overrides the ``kind`` field of the document.  ``dump`` reads a
    single window manager snapshot instead of a full trace.
    """
    data = path.read_bytes()
    raw = load_document(data)
    resolved_kind = kind or raw.get("kind") or (TRACE_KIND_WINDOW_MANAGER if dump else None)
    if not isinstance(resolved_kind, str) or resolved_kind not in TRACE_KINDS:
        raise TraceParseError(f"Cannot infer trace kind of {path}: `kind` is {resolved_kind!r}")

    checksum = sha256_of_bytes(data)
    source = str(path)
    logger.debug("Reading %s trace from %s (sha256=%s)", resolved_kind, source, checksum)
    if resolved_kind == TRACE_KIND_LAYERS:
        if dump:
            raise TraceParseError("Layers traces cannot be read as a dump")
        return LayersTrace.parse_from(raw, source=source, source_checksum=checksum)
    if dump:
        return WindowManagerTrace.parse_from_dump(raw, source=source, source_checksum=checksum)
    return WindowManagerTrace.parse_from(raw, source=source, source_checksum=checksum)


def write_trace(path: Path, trace: AnyTrace) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(trace.to_dict(), indent=2, sort_keys=True), encoding="utf-8")


__all__ = [
    "AnyTrace",
    "read_trace",
    "write_trace",
]
