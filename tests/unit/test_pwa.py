"""Tests for the PWA rule module."""

from conftest import audit_page, html_page, passed_ids, rule_ids
from webperf.services.audits.pwa import PwaAudit


def test_good_page(good_page):
    result = audit_page(PwaAudit(), good_page)
    assert result.issues == []
    assert passed_ids(result) == [
        "pwa-manifest",
        "pwa-service-worker",
        "pwa-https",
        "pwa-viewport",
        "pwa-apple-icon",
        "pwa-theme-color",
    ]


def test_bare_http_page():
    result = audit_page(PwaAudit(), html_page(url="http://example.com/"))
    assert rule_ids(result) == [
        "manifest-missing",
        "service-worker-missing",
        "pwa-requires-https",
        "viewport-missing",
        "apple-touch-icon-missing",
        "theme-color-missing",
    ]
    severities = [i.severity for i in result.issues]
    assert severities == ["serious", "serious", "critical", "serious", "minor", "minor"]


def test_viewport_without_device_width():
    page = html_page(head='<meta name="viewport" content="width=1024">')
    ids = rule_ids(audit_page(PwaAudit(), page))
    assert "viewport-invalid" in ids
    assert "viewport-missing" not in ids
