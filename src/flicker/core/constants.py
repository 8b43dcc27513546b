from __future__ import annotations

from pathlib import Path

TRACE_SCHEMA_VERSION = "1"
REPORT_SCHEMA_VERSION = "1"

TRACE_KIND_WINDOW_MANAGER = "windowmanager"
TRACE_KIND_LAYERS = "layers"
TRACE_KINDS = {
    TRACE_KIND_WINDOW_MANAGER,
    TRACE_KIND_LAYERS,
}

WINDOW_KIND_ABOVE_APP = "above_app"
WINDOW_KIND_APP = "app"
WINDOW_KIND_BELOW_APP = "below_app"
WINDOW_KIND_IME = "ime"
WINDOW_KINDS = {
    WINDOW_KIND_ABOVE_APP,
    WINDOW_KIND_APP,
    WINDOW_KIND_BELOW_APP,
    WINDOW_KIND_IME,
}

# Check spec positions: which entries of the trace a check is evaluated on.
CHECK_AT_ALL = "all"
CHECK_AT_START = "start"
CHECK_AT_END = "end"
CHECK_AT_RANGE = "range"
CHECK_AT_VALUES = (
    CHECK_AT_ALL,
    CHECK_AT_START,
    CHECK_AT_END,
    CHECK_AT_RANGE,
)

CHECK_SPEC_SUFFIX = ".flicker.yaml"
REPORTS_DIR = Path(".flicker") / "reports"

STATUS_PASS = "PASS"
STATUS_FAIL = "FAIL"
STATUS_ERROR = "ERROR"

EXIT_SUCCESS = 0
EXIT_REGRESSION = 1
EXIT_INTERNAL_ERROR = 2
