"""Tests for report rendering and persistence."""

import io
import json
from datetime import datetime, timezone

import pytest
from rich.console import Console

from webperf.exceptions import ReportError
from webperf.reporters import render_report
from webperf.reporters.html import render_html
from webperf.schemas.audit_result import ThresholdConfig
from webperf.services.file_writer import generate_filename, save_report


def capture() -> Console:
    return Console(file=io.StringIO(), width=120, no_color=True)


def test_json_uses_camel_case(sample_report):
    data = json.loads(render_report(sample_report, "json"))
    assert data["url"] == "https://example.com/"
    assert data["duration"] == 1500
    assert data["summary"]["bySeverity"]["critical"] == 1
    assert data["summary"]["byCategory"]["images"] == 1
    assert data["summary"]["passed"] == 1
    assert data["issues"][0]["ruleId"] == "image-alt"
    assert "helpUrl" in data["issues"][0]
    assert "learnMoreUrl" in data["issues"][0]["fix"]
    assert data["incomplete"] == []


def test_html_report(sample_report):
    html = render_report(sample_report, "html")
    assert html.startswith("<!DOCTYPE html>")
    assert "https://example.com/" in html
    assert "[CRITICAL]" in html
    assert "Page Title" in html


def test_html_escapes_page_content(sample_report):
    issue = sample_report.issues[0].model_copy(update={"message": "<script>alert(1)</script>"})
    report = sample_report.model_copy(update={"issues": [issue]})
    html = render_html(report)
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_html_shows_threshold_violations(sample_report):
    html = render_report(sample_report, "html", threshold=ThresholdConfig(critical=0))
    assert "Threshold violations:" in html


def test_terminal_report(sample_report):
    console = capture()
    assert render_report(sample_report, "terminal", console=console) is None
    out = console.file.getvalue()
    assert "https://example.com/" in out
    assert "[CRITICAL]" in out
    assert "Page Title" in out


def test_terminal_threshold_result(sample_report):
    console = capture()
    render_report(sample_report, "terminal", threshold=ThresholdConfig(critical=5), console=console)
    assert "All thresholds passed." in console.file.getvalue()

    console = capture()
    render_report(sample_report, "terminal", threshold=ThresholdConfig(critical=0), console=console)
    assert "critical: 1 issues (threshold: 0, exceeded by 1)" in console.file.getvalue()


def test_unknown_format(sample_report):
    with pytest.raises(ReportError, match="Unknown report format: pdf"):
        render_report(sample_report, "pdf")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/a/b", "example-com-a-b_2024-01-02T03-04-05-678Z.json"),
        ("https://example.com/", "example-com_2024-01-02T03-04-05-678Z.json"),
        ("https://example.com", "example-com_2024-01-02T03-04-05-678Z.json"),
    ],
)
def test_generate_filename(url, expected):
    now = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert generate_filename(url, "json", now=now) == expected


def test_save_report(sample_report, tmp_path):
    target = tmp_path / "nested" / "reports"
    path = save_report(sample_report, "{}", str(target), "json")
    assert path.parent == target
    assert path.name.startswith("example-com_")
    assert path.suffix == ".json"
    assert path.read_text(encoding="utf-8") == "{}"


def test_save_report_unwritable(sample_report, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(ReportError, match="Could not write report"):
        save_report(sample_report, "{}", str(blocker / "sub"), "html")
