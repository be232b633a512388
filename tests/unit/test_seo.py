"""Tests for the SEO rule module."""

from conftest import audit_page, html_page, passed_ids, rule_ids
from webperf.services.audits.seo import SeoAudit, collect_signals


def test_good_page(good_page):
    result = audit_page(SeoAudit(), good_page)
    assert result.issues == []
    assert passed_ids(result) == [
        "seo-title",
        "seo-meta-desc",
        "seo-h1",
        "seo-viewport",
        "seo-https",
        "seo-canonical",
        "seo-og",
        "seo-schema",
        "seo-indexable",
    ]


def test_bare_page_over_http():
    result = audit_page(SeoAudit(), html_page("<p>hi</p>", url="http://example.com/"))
    ids = rule_ids(result)
    for rule in (
        "seo-title-missing",
        "seo-meta-desc-missing",
        "seo-h1-missing",
        "seo-viewport-missing",
        "seo-https",
        "seo-canonical-missing",
        "seo-og-title",
        "seo-og-image",
        "seo-schema-missing",
    ):
        assert rule in ids

    title = next(i for i in result.issues if i.rule_id == "seo-title-missing")
    assert title.severity == "critical"
    assert title.wcag.id == "2.4.2"
    https = next(i for i in result.issues if i.rule_id == "seo-https")
    assert https.severity == "critical"
    assert https.category == "technical"


def test_lengths_and_multiple_h1():
    head = '<title>Short</title><meta name="description" content="Too short">'
    result = audit_page(SeoAudit(), html_page("<h1>A</h1><h1>B</h1>", head=head))
    ids = rule_ids(result)
    assert "seo-title-length" in ids
    assert "seo-meta-desc-length" in ids
    assert "seo-h1-multiple" in ids
    length = next(i for i in result.issues if i.rule_id == "seo-title-length")
    assert length.severity == "moderate"
    assert "5 characters" in length.message


def test_invalid_json_ld_and_noindex():
    head = (
        '<script type="application/ld+json">{"@type": </script>'
        '<meta name="robots" content="NOINDEX, follow">'
    )
    ids = rule_ids(audit_page(SeoAudit(), html_page(head=head)))
    assert "seo-schema-invalid" in ids
    assert "seo-schema-missing" not in ids
    assert "seo-noindex" in ids


def test_collect_signals():
    head = (
        '<title> Hello </title><meta property="og:title" content="OG">'
        '<link rel="canonical" href="https://example.com/x">'
    )
    signals = collect_signals(html_page(head=head).document)
    assert signals.title == "Hello"
    assert signals.og_tags == {"title": "OG"}
    assert signals.canonical["href"] == "https://example.com/x"
