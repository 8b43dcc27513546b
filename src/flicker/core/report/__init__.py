from flicker.core.report.renderers import render_markdown, write_reports
from flicker.core.report.schema import CheckReport, CheckStatus, validate_report_dict

__all__ = [
    "CheckReport",
    "CheckStatus",
    "render_markdown",
    "validate_report_dict",
    "write_reports",
]
