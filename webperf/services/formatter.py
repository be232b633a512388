"""
Result Formatter - Summary statistics and report assembly.

Everything here is pure: no I/O, no clock, no logging.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Sequence, Union

from webperf.schemas.audit_result import (
    CATEGORIES,
    SEVERITIES,
    AuditReport,
    AuditResult,
    Issue,
    PendingCheck,
    Summary,
)

SEVERITY_RANK = {severity: rank for rank, severity in enumerate(SEVERITIES)}


def generate_summary(issues: Sequence[Issue], passed_count: int = 0) -> Summary:
    """Count issues by severity and by known category.

    Issues whose category is not one of the known categories still count toward
    `total` and `by_severity` but are left out of `by_category`.
    """
    by_severity = {severity: 0 for severity in SEVERITIES}
    by_category = {category: 0 for category in CATEGORIES}

    for issue in issues:
        by_severity[issue.severity] += 1
        if issue.category in by_category:
            by_category[issue.category] += 1

    return Summary(
        total=len(issues),
        by_severity=by_severity,
        by_category=by_category,
        passed=passed_count,
    )


def format_results(
    url: str,
    start_time: int,
    end_time: int,
    issues: Sequence[Issue],
    passed: Sequence[PendingCheck],
    incomplete: Sequence[Issue] = (),
) -> AuditReport:
    """Assemble the canonical report. Times are epoch milliseconds."""
    if end_time < start_time:
        raise ValueError(f"end_time ({end_time}) is before start_time ({start_time})")

    return AuditReport(
        url=url,
        timestamp=start_time,
        duration=end_time - start_time,
        issues=list(issues),
        passed=list(passed),
        incomplete=list(incomplete),
        summary=generate_summary(issues, passed_count=len(passed)),
    )


def merge_audit_results(
    results: Iterable[Union[AuditResult, Mapping]],
) -> AuditResult:
    """Concatenate module results in order. No deduplication."""
    issues: list[Issue] = []
    passed: list[PendingCheck] = []
    for result in results:
        if isinstance(result, Mapping):
            issues.extend(result.get("issues", ()))
            passed.extend(result.get("passed", ()))
        else:
            issues.extend(result.issues)
            passed.extend(result.passed)
    return AuditResult(issues=issues, passed=passed)


def sort_issues(issues: Iterable[Issue]) -> list[Issue]:
    """Stable sort: severity (critical first), then category name."""
    return sorted(issues, key=lambda issue: (SEVERITY_RANK[issue.severity], issue.category))


def group_by_category(issues: Iterable[Issue]) -> dict[str, list[Issue]]:
    grouped: dict[str, list[Issue]] = {}
    for issue in issues:
        grouped.setdefault(issue.category, []).append(issue)
    return grouped


def group_by_severity(issues: Iterable[Issue]) -> dict[str, list[Issue]]:
    grouped: dict[str, list[Issue]] = {severity: [] for severity in SEVERITIES}
    for issue in issues:
        grouped[issue.severity].append(issue)
    return grouped


def filter_by_severity(issues: Iterable[Issue], severities: Iterable[str]) -> list[Issue]:
    wanted = set(severities)
    return [issue for issue in issues if issue.severity in wanted]


def filter_by_category(issues: Iterable[Issue], categories: Iterable[str]) -> list[Issue]:
    wanted = set(categories)
    return [issue for issue in issues if issue.category in wanted]


def get_top_issues(issues: Iterable[Issue], limit: int = 10) -> list[Issue]:
    """Worst `limit` issues."""
    return sort_issues(issues)[:limit]


def calculate_pass_rate(passed: int, total: int) -> int:
    """Percentage of passed checks, rounded half up. 100 when nothing ran."""
    if total == 0:
        return 100
    rate = Decimal(100 * passed) / Decimal(total)
    return int(rate.quantize(Decimal(1), rounding=ROUND_HALF_UP))
