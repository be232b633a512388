"""
HTML reporter - renders a standalone dashboard page with Jinja2.
"""

import os
from datetime import datetime, timezone
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from webperf.schemas.audit_result import AuditReport, ThresholdResult
from webperf.services.formatter import calculate_pass_rate, group_by_severity, sort_issues
from webperf.services.threshold_checker import format_threshold_violations


class HtmlReporter:
    """Render audit reports to HTML."""

    def __init__(self):
        self.template_dir = os.path.join(os.path.dirname(__file__), "templates")
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(["html"]),
        )

    def render(self, report: AuditReport, threshold_result: Optional[ThresholdResult] = None) -> str:
        template = self.env.get_template("report.html")
        checks_run = len(report.passed) + report.summary.total
        return template.render(
            report=report,
            generated=datetime.fromtimestamp(report.timestamp / 1000, tz=timezone.utc).strftime(
                "%B %d, %Y %H:%M UTC"
            ),
            issues=sort_issues(report.issues),
            by_severity=group_by_severity(report.issues),
            pass_rate=calculate_pass_rate(report.summary.passed, checks_run),
            threshold_result=threshold_result,
            threshold_message=format_threshold_violations(threshold_result) if threshold_result else None,
        )


def render_html(report: AuditReport, threshold_result: Optional[ThresholdResult] = None) -> str:
    return HtmlReporter().render(report, threshold_result)
