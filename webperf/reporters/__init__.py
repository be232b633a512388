"""
Report renderers.

`render_report` dispatches on format name: terminal output is printed and
returns None, json and html return the rendered text.
"""
from typing import Optional

from rich.console import Console

from webperf.exceptions import ReportError
from webperf.schemas.audit_result import AuditReport, ThresholdConfig
from webperf.services.threshold_checker import check_thresholds

from webperf.reporters.html import render_html
from webperf.reporters.json_reporter import render_json
from webperf.reporters.terminal import render_terminal

FORMATS = ("terminal", "json", "html")


def render_report(
    report: AuditReport,
    fmt: str,
    threshold: Optional[ThresholdConfig] = None,
    console: Optional[Console] = None,
) -> Optional[str]:
    threshold_result = check_thresholds(report, threshold) if threshold is not None else None

    if fmt == "terminal":
        render_terminal(report, threshold_result, console=console)
        return None
    if fmt == "json":
        return render_json(report)
    if fmt == "html":
        return render_html(report, threshold_result)
    raise ReportError(f"Unknown report format: {fmt}. Must be one of: {', '.join(FORMATS)}")
