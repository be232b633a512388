"""Tests for threshold gating and threshold parsing."""

import pytest

from webperf.exceptions import ThresholdError
from webperf.schemas.audit_result import ThresholdConfig
from webperf.services.formatter import format_results, generate_summary
from webperf.services.threshold_checker import (
    check_thresholds,
    format_threshold_violations,
    parse_threshold,
)


@pytest.fixture
def report(make_issue):
    issues = [make_issue("critical")] * 2 + [make_issue("serious")] * 3 + [make_issue("minor")]
    return format_results("https://example.com", 0, 10, issues, [])


def test_no_threshold_always_passes(report):
    result = check_thresholds(report)
    assert result.passed
    assert result.violations == []


def test_violations_in_severity_order(report):
    result = check_thresholds(report, ThresholdConfig(minor=0, critical=0, serious=5))

    assert not result.passed
    assert [(v.severity, v.count, v.threshold, v.exceeded) for v in result.violations] == [
        ("critical", 2, 0, 2),
        ("minor", 1, 0, 1),
    ]


def test_ceiling_is_inclusive(report):
    assert check_thresholds(report, ThresholdConfig(critical=2, serious=3)).passed


def test_accepts_summary(make_issue):
    summary = generate_summary([make_issue("moderate")])
    assert not check_thresholds(summary, ThresholdConfig(moderate=0)).passed


def test_format_violations(report):
    result = check_thresholds(report, ThresholdConfig(critical=0))
    assert format_threshold_violations(result) == (
        "Threshold violations:\n"
        "  - critical: 2 issues (threshold: 0, exceeded by 2)"
    )


def test_format_passed_is_none(report):
    assert format_threshold_violations(check_thresholds(report)) is None


def test_parse_threshold():
    config = parse_threshold('{"critical": 0, "serious": 5}')
    assert config.critical == 0
    assert config.serious == 5
    assert config.moderate is None


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        '{"fatal": 1}',
        '{"critical": "1"}',
        '{"critical": 1.5}',
        '{"critical": -1}',
    ],
)
def test_parse_threshold_rejects_invalid(text):
    with pytest.raises(ThresholdError):
        parse_threshold(text)


def test_threshold_error_is_value_error():
    with pytest.raises(ValueError):
        parse_threshold("{")
