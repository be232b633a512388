"""Tests for the performance rule module."""

from conftest import audit_page, html_page, passed_ids, rule_ids
from webperf.services.audits.performance import PerformanceAudit


def test_good_page_passes_every_group(good_page):
    result = audit_page(PerformanceAudit(), good_page)
    assert result.issues == []
    assert passed_ids(result) == [
        "perf-resources",
        "perf-images",
        "perf-javascript",
        "perf-cls",
        "perf-render-blocking",
        "perf-fonts",
    ]


def test_resource_counts():
    scripts = "".join(f'<script src="/s{i}.js" defer></script>' for i in range(21))
    sheets = "".join(f'<link rel="stylesheet" href="/c{i}.css" media="print">' for i in range(6))
    ids = rule_ids(audit_page(PerformanceAudit(), html_page(scripts, head=sheets)))
    assert "excessive-scripts" in ids
    assert "excessive-stylesheets" in ids


def test_resource_counts_at_limit_pass():
    scripts = "".join(f'<script src="/s{i}.js" defer></script>' for i in range(20))
    result = audit_page(PerformanceAudit(), html_page(scripts))
    assert "excessive-scripts" not in rule_ids(result)


def test_images():
    body = (
        '<img src="/a.webp" width="10" height="10">'
        '<img src="/b.webp" width="10" height="10">'
        '<img src="/c.webp" width="10" height="10">'
        '<img src="/d.webp" width="10" height="10">'
        '<img src="/e.jpg?v=2" width="10" height="10" loading="lazy">'
        '<img src="/f.webp">'
    )
    result = audit_page(PerformanceAudit(), html_page(body))
    ids = rule_ids(result)

    # Only images after the first three need lazy loading
    assert ids.count("image-no-lazy-loading") == 2
    assert ids.count("image-legacy-format") == 1
    assert ids.count("image-missing-dimensions") == 1
    assert "perf-images" not in passed_ids(result)


def test_blocking_and_inline_scripts():
    head = "<script>1</script>" * 4
    body = '<script src="/a.js"></script><script src="/b.js" async></script><script type="module" src="/m.js"></script>'
    ids = rule_ids(audit_page(PerformanceAudit(), html_page(body, head=head)))
    assert ids.count("script-blocking") == 1
    assert "excessive-inline-scripts" in ids


def test_render_blocking_css():
    head = "".join(f'<link rel="stylesheet" href="/c{i}.css">' for i in range(3))
    ids = rule_ids(audit_page(PerformanceAudit(), html_page(head=head)))
    assert "render-blocking-css" in ids


def test_fonts():
    head = (
        '<link rel="stylesheet" href="https://fonts.googleapis.com/css2?family=Inter">'
        '<link rel="stylesheet" href="/fonts/brand.css">'
    )
    result = audit_page(PerformanceAudit(), html_page(head=head))
    ids = rule_ids(result)
    assert "font-no-display" in ids
    assert "font-no-preload" in ids
    assert "google-fonts-no-preconnect" in ids


def test_preconnected_google_fonts_with_display():
    head = (
        '<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>'
        '<link rel="stylesheet" href="https://fonts.googleapis.com/css2?family=Inter&display=swap">'
    )
    ids = rule_ids(audit_page(PerformanceAudit(), html_page(head=head)))
    assert "google-fonts-no-preconnect" not in ids
    assert "font-no-display" not in ids


def test_iframe_dimensions():
    body = '<iframe src="/a" title="a"></iframe><iframe src="/b" title="b" width="1" height="1"></iframe>'
    ids = rule_ids(audit_page(PerformanceAudit(), html_page(body)))
    assert ids.count("iframe-missing-dimensions") == 1
