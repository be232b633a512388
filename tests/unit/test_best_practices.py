"""Tests for the best-practices rule module."""

import pytest

from conftest import audit_page, html_page, passed_ids, rule_ids
from webperf.services.audits.best_practices import BestPracticesAudit, compare_versions
from webperf.services.page_loader import parse_html


def test_good_page(good_page):
    result = audit_page(BestPracticesAudit(), good_page)
    assert result.issues == []
    assert len(passed_ids(result)) == 11


def test_document_basics():
    page = parse_html("<html><head></head><body></body></html>", "https://example.com/")
    ids = rule_ids(audit_page(BestPracticesAudit(), page))
    assert "doctype-missing" in ids
    assert "charset-missing" in ids
    assert "html-lang-missing" in ids


@pytest.mark.parametrize("doctype", ["<!DOCTYPE>", "<!DOCTYPE >", "<!DOCTYPE svg>"])
def test_doctype_without_html_name(doctype):
    page = parse_html(f'{doctype}<html lang="en"><head><meta charset="utf-8"></head><body></body></html>',
                      "https://example.com/")
    result = audit_page(BestPracticesAudit(), page)
    assert "doctype-missing" in rule_ids(result)
    assert "bp-charset" in passed_ids(result)


def test_non_utf8_charset():
    page = html_page(head='<meta charset="iso-8859-1">')
    result = audit_page(BestPracticesAudit(), page)
    issue = next(i for i in result.issues if i.rule_id == "charset-not-utf8")
    assert issue.severity == "moderate"


def test_markup_hygiene():
    body = (
        "<center>x</center><font>y</font>"
        '<div id="dup"></div><p id="dup"></p>'
        '<img alt="no src">'
        "<a>no href</a>"
        '<a href="/x"></a>'
    )
    ids = rule_ids(audit_page(BestPracticesAudit(), html_page(body, head='<meta charset="utf-8">')))
    assert "deprecated-center" in ids
    assert "deprecated-font" in ids
    assert ids.count("duplicate-id") == 1
    assert "image-no-src" in ids
    assert "link-no-href" in ids
    assert "link-no-text" in ids


def test_meta_refresh():
    ids = rule_ids(audit_page(BestPracticesAudit(), html_page(head='<meta http-equiv="refresh" content="5">')))
    assert "meta-refresh" in ids


@pytest.mark.parametrize(
    "src, vulnerable",
    [
        ("https://code.jquery.com/jquery-3.4.1.min.js", True),
        ("https://code.jquery.com/jquery-3.5.0.min.js", False),
        ("https://cdn.example.com/lodash@4.17.20/lodash.min.js", True),
        ("https://cdn.example.com/lodash@4.17.21/lodash.min.js", False),
        ("https://cdn.example.com/angular-1.8.2.js", True),
        ("https://cdn.example.com/bootstrap-3.3.7.js", True),
        ("https://cdn.example.com/bootstrap-5.3.0.js", False),
    ],
)
def test_vulnerable_libraries(src, vulnerable):
    body = f'<script src="{src}" defer></script>'
    ids = rule_ids(audit_page(BestPracticesAudit(), html_page(body)))
    assert ("vulnerable-library" in ids) is vulnerable


def test_password_paste_and_permissions():
    body = (
        '<input type="password" onpaste="return false;">'
        "<script>navigator.geolocation.getCurrentPosition(cb);</script>"
        "<script>Notification.requestPermission();</script>"
    )
    result = audit_page(BestPracticesAudit(), html_page(body))
    ids = rule_ids(result)
    assert "password-paste-blocked" in ids
    assert "intrusive-geolocation" in ids
    assert "intrusive-notification" in ids
    assert "bp-permissions" not in passed_ids(result)


def test_compare_versions():
    assert compare_versions("3.4.1", "3.5.0") == -1
    assert compare_versions("3.5", "3.5.0") == 0
    assert compare_versions("4.17.21.", "4.17.21") == 0
    assert compare_versions("10.0", "9.9.9") == 1
