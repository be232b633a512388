"""
Threshold Checker - Gate a report on per-severity issue ceilings.
"""
import json
from typing import Optional, Union

from pydantic import ValidationError

from webperf.exceptions import ThresholdError
from webperf.schemas.audit_result import (
    SEVERITIES,
    AuditReport,
    Summary,
    ThresholdConfig,
    ThresholdResult,
    ThresholdViolation,
)


def check_thresholds(
    report_or_summary: Union[AuditReport, Summary],
    threshold: Optional[ThresholdConfig] = None,
) -> ThresholdResult:
    """Compare severity counts to the configured ceilings.

    A ceiling is inclusive: a count equal to it passes. Without a threshold
    every report passes.
    """
    if threshold is None:
        return ThresholdResult(passed=True, violations=[])

    summary = report_or_summary.summary if isinstance(report_or_summary, AuditReport) else report_or_summary

    violations = []
    for severity in SEVERITIES:
        ceiling = getattr(threshold, severity)
        count = summary.by_severity.get(severity, 0)
        if ceiling is not None and count > ceiling:
            violations.append(ThresholdViolation(
                severity=severity,
                count=count,
                threshold=ceiling,
                exceeded=count - ceiling,
            ))

    return ThresholdResult(passed=not violations, violations=violations)


def format_threshold_violations(result: ThresholdResult) -> Optional[str]:
    """Human-readable violation list, or None when the check passed."""
    if result.passed:
        return None

    lines = ["Threshold violations:"]
    for v in result.violations:
        lines.append(
            f"  - {v.severity}: {v.count} issues (threshold: {v.threshold}, exceeded by {v.exceeded})"
        )
    return "\n".join(lines)


def parse_threshold(text: str) -> ThresholdConfig:
    """Parse a JSON threshold such as '{"critical": 0, "serious": 5}'."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ThresholdError(f"Invalid threshold JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise ThresholdError("Threshold must be a JSON object")

    unknown = sorted(set(data) - set(SEVERITIES))
    if unknown:
        raise ThresholdError(
            f"Unknown threshold key(s): {', '.join(unknown)}. Must be one of: {', '.join(SEVERITIES)}"
        )

    try:
        return ThresholdConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ThresholdError(f"Invalid threshold value for {field}: {first['msg']}") from e
