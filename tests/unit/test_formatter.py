"""Tests for summary statistics, merging and the pure issue helpers."""

import pytest

from webperf.schemas.audit_result import CATEGORIES, SEVERITIES, AuditResult, PendingCheck
from webperf.services.formatter import (
    calculate_pass_rate,
    filter_by_category,
    filter_by_severity,
    format_results,
    generate_summary,
    get_top_issues,
    group_by_category,
    group_by_severity,
    merge_audit_results,
    sort_issues,
)


def test_summary_counts_are_consistent(make_issue):
    issues = [
        make_issue("critical", "images"),
        make_issue("critical", "forms"),
        make_issue("serious", "images"),
        make_issue("minor", "aria"),
    ]
    summary = generate_summary(issues)

    assert summary.total == 4
    assert sum(summary.by_severity.values()) == summary.total
    assert summary.by_severity == {"critical": 2, "serious": 1, "moderate": 0, "minor": 1}
    assert summary.by_category["images"] == 2
    assert summary.by_category["forms"] == 1
    assert summary.by_category["aria"] == 1


def test_summary_has_every_bucket_when_empty():
    summary = generate_summary([])
    assert summary.total == 0
    assert list(summary.by_severity) == list(SEVERITIES)
    assert list(summary.by_category) == list(CATEGORIES)
    assert all(count == 0 for count in summary.by_category.values())
    assert summary.passed == 0


def test_unknown_category_excluded_from_category_tally(make_issue):
    issues = [make_issue("serious", "bogus"), make_issue("minor", "images")]
    summary = generate_summary(issues)

    assert summary.total == 2
    assert summary.by_severity["serious"] == 1
    assert "bogus" not in summary.by_category
    assert sum(summary.by_category.values()) == 1


def test_summary_is_idempotent(make_issue):
    issues = [make_issue("moderate", "document"), make_issue("critical", "technical")]
    assert generate_summary(issues) == generate_summary(issues)


def test_merge_preserves_order_without_dedup(make_issue):
    a = [make_issue(rule_id="a1"), make_issue(rule_id="a2")]
    b = [make_issue(rule_id="b1")]
    dup = a[0]
    merged = merge_audit_results([
        AuditResult(issues=a, passed=[PendingCheck(id="p1", name="n", category="images")]),
        {"issues": b + [dup], "passed": [PendingCheck(id="p2", name="n", category="forms")]},
    ])

    assert [i.rule_id for i in merged.issues] == ["a1", "a2", "b1", "a1"]
    assert [p.id for p in merged.passed] == ["p1", "p2"]


def test_format_results_builds_report(make_issue):
    issues = [make_issue("critical", "images")]
    passed = [PendingCheck(id="p", name="n", category="images")]
    incomplete = [make_issue("serious", "technical", rule_id="audit-error")]

    report = format_results("https://example.com", 1000, 1750, issues, passed, incomplete)

    assert report.timestamp == 1000
    assert report.duration == 750
    assert report.summary.total == 1
    assert report.summary.passed == 1
    assert report.incomplete[0].rule_id == "audit-error"
    # Incomplete entries are not part of the summary
    assert report.summary.by_severity["serious"] == 0


def test_format_results_rejects_end_before_start():
    with pytest.raises(ValueError):
        format_results("https://example.com", 2000, 1000, [], [])


def test_sort_by_severity_then_category(make_issue):
    issues = [
        make_issue("minor", "aria"),
        make_issue("critical", "technical"),
        make_issue("critical", "forms"),
        make_issue("serious", "images"),
    ]
    ordered = sort_issues(issues)

    assert [(i.severity, i.category) for i in ordered] == [
        ("critical", "forms"),
        ("critical", "technical"),
        ("serious", "images"),
        ("minor", "aria"),
    ]


def test_sort_is_stable(make_issue):
    first = make_issue("serious", "images", rule_id="first")
    second = make_issue("serious", "images", rule_id="second")
    assert [i.rule_id for i in sort_issues([first, second])] == ["first", "second"]


def test_grouping_and_filtering(make_issue):
    issues = [make_issue("critical", "images"), make_issue("minor", "images"), make_issue("minor", "forms")]

    by_category = group_by_category(issues)
    assert set(by_category) == {"images", "forms"}
    assert len(by_category["images"]) == 2

    by_severity = group_by_severity(issues)
    assert list(by_severity) == list(SEVERITIES)
    assert by_severity["serious"] == []
    assert len(by_severity["minor"]) == 2

    assert len(filter_by_severity(issues, ["minor"])) == 2
    assert len(filter_by_category(issues, ["forms", "aria"])) == 1


def test_top_issues(make_issue):
    issues = [make_issue("minor"), make_issue("critical"), make_issue("moderate")]
    top = get_top_issues(issues, 2)
    assert [i.severity for i in top] == ["critical", "moderate"]


@pytest.mark.parametrize(
    "passed, total, expected",
    [(0, 0, 100), (5, 10, 50), (1, 8, 13), (5, 8, 63), (1, 3, 33), (10, 10, 100)],
)
def test_pass_rate_rounds_half_up(passed, total, expected):
    assert calculate_pass_rate(passed, total) == expected
