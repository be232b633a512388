"""Tests for the accessibility rule module."""

from conftest import audit_page, html_page, passed_ids, rule_ids
from webperf.services.audits.accessibility import (
    AccessibilityAudit,
    check_heading_order,
    check_image_alt,
    check_label,
)
from webperf.services.audits.base import HTML_EXCERPT_LIMIT
from webperf.services.page_loader import parse_html


def test_good_page_has_no_violations(good_page):
    result = audit_page(AccessibilityAudit(), good_page)
    assert result.issues == []
    assert "pass-image-alt" in passed_ids(result)
    assert "pass-label" in passed_ids(result)


def test_image_without_alt():
    page = html_page('<img src="a.webp"><img src="b.webp" alt=""><img src="c.webp" role="presentation">')
    result = audit_page(AccessibilityAudit(), page)

    alt_issues = [i for i in result.issues if i.rule_id == "image-alt"]
    assert len(alt_issues) == 1
    issue = alt_issues[0]
    assert issue.severity == "critical"
    assert issue.category == "images"
    assert issue.wcag.id == "1.1.1"
    assert issue.help_url == "https://dequeuniversity.com/rules/axe/4.8/image-alt"
    assert 'src="a.webp"' in issue.element.html
    assert issue.id.startswith("a11y-")


def test_rules_that_do_not_apply_are_not_reported():
    page = html_page("<p>Hello</p>", head="<title>Title</title>")
    result = audit_page(AccessibilityAudit(), page)
    assert "pass-image-alt" not in passed_ids(result)
    assert "pass-video-caption" not in passed_ids(result)
    assert "pass-document-title" in passed_ids(result)


def test_form_and_button_names():
    page = html_page(
        '<input type="text" id="q">'
        '<label>Name <input type="text"></label>'
        "<button></button>"
        '<button aria-label="Close"></button>'
        '<select id="s"></select>'
    )
    ids = rule_ids(audit_page(AccessibilityAudit(), page))
    assert ids.count("label") == 1
    assert ids.count("button-name") == 1
    assert ids.count("select-name") == 1


def test_document_level_rules():
    page = parse_html(
        '<html><head><meta name="viewport" content="width=device-width, user-scalable=no"></head>'
        "<body></body></html>",
        "https://example.com/",
    )
    ids = rule_ids(audit_page(AccessibilityAudit(), page))
    assert "html-has-lang" in ids
    assert "document-title" in ids
    assert "meta-viewport" in ids


def test_structure_rules():
    page = html_page(
        "<h1>A</h1><h3>C</h3>"
        "<ul><div>not an item</div></ul>"
        "<li>orphan</li>"
        '<div role="bogus">x</div>'
        '<span tabindex="3">x</span>'
        '<iframe src="/embed"></iframe>'
        "<marquee>old</marquee>"
    )
    ids = rule_ids(audit_page(AccessibilityAudit(), page))
    for rule in ("heading-order", "list", "listitem", "aria-roles", "tabindex", "frame-title", "marquee"):
        assert rule in ids


def test_duplicate_id_reports_each_repeat():
    page = html_page('<div id="x"></div><div id="x"></div><div id="x"></div>')
    ids = rule_ids(audit_page(AccessibilityAudit(), page))
    assert ids.count("duplicate-id") == 2


def test_html_excerpt_is_capped():
    page = html_page(f'<img src="{"x" * 500}.webp">')
    result = audit_page(AccessibilityAudit(), page)
    issue = next(i for i in result.issues if i.rule_id == "image-alt")
    assert len(issue.element.html) == HTML_EXCERPT_LIMIT


def test_page_is_not_mutated(good_page):
    before = str(good_page.document)
    audit_page(AccessibilityAudit(), good_page)
    assert str(good_page.document) == before


def test_rule_functions_return_none_when_not_applicable():
    doc = html_page("<p>text</p>").document
    assert check_image_alt(doc) is None
    assert check_label(doc) is None
    assert check_heading_order(doc) is None
