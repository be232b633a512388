"""Shared test fixtures."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from webperf.schemas.audit_result import AuditReport, AuditResult, Issue, PendingCheck, WcagReference
from webperf.services.audits import AuditContext, AuditRegistry, RuleModule
from webperf.services.formatter import format_results
from webperf.services.id_generator import IssueIdGenerator
from webperf.services.page_loader import Page, parse_html

DESCRIPTION = ("Well formed test page. " * 6).strip()

GOOD_HTML = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Example Domain - A page used for audit tests here</title>
  <meta name="description" content="{DESCRIPTION}">
  <link rel="canonical" href="https://example.com/">
  <meta property="og:title" content="Example">
  <meta property="og:image" content="https://example.com/og.webp">
  <meta name="theme-color" content="#1a73e8">
  <link rel="manifest" href="/manifest.json">
  <link rel="apple-touch-icon" href="/icon.webp">
  <link rel="stylesheet" href="/main.css">
  <script type="application/ld+json">{{"@context": "https://schema.org", "@type": "WebPage"}}</script>
</head>
<body>
  <h1>Example</h1>
  <h2>Section</h2>
  <img src="/hero.webp" alt="Hero" width="800" height="600">
  <a href="/about">About us</a>
  <a href="https://partner.example" target="_blank" rel="noopener noreferrer">Partner</a>
  <label for="email">Email</label>
  <input id="email" type="email">
  <script src="/app.js" defer></script>
  <script>if ('serviceWorker' in navigator) {{ navigator.serviceWorker.register('/sw.js'); }}</script>
</body>
</html>
"""

SECURE_HEADERS = {
    "Content-Security-Policy": "default-src 'self'",
    "Strict-Transport-Security": "max-age=31536000",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
}


def run(coro):
    return asyncio.run(coro)


def html_page(body: str = "", head: str = "", url: str = "https://example.com/", doctype: bool = True) -> Page:
    """Minimal page wrapping the given head and body markup."""
    markup = (
        ("<!DOCTYPE html>\n" if doctype else "")
        + f'<html lang="en"><head>{head}</head><body>{body}</body></html>'
    )
    return parse_html(markup, url)


def audit_page(module: RuleModule, page: Page) -> AuditResult:
    return run(module.audit(AuditContext(page=page, ids=IssueIdGenerator())))


def rule_ids(result: AuditResult) -> list[str]:
    return [issue.rule_id for issue in result.issues]


def passed_ids(result: AuditResult) -> list[str]:
    return [check.id for check in result.passed]


class FakeLoader:
    """Page loader returning canned markup and recording calls."""

    def __init__(self, html: str = GOOD_HTML, error: Exception | None = None):
        self.html = html
        self.error = error
        self.calls: list[dict] = []

    async def load(self, url, timeout=None, max_size=None, allow_js=False):
        self.calls.append({"url": url, "timeout": timeout, "max_size": max_size, "allow_js": allow_js})
        if self.error is not None:
            raise self.error
        return parse_html(self.html, url)


class StaticModule(RuleModule):
    """Rule module producing a fixed number of issues and passed checks."""

    def __init__(
        self,
        audit_type: str,
        issues: int = 1,
        passed: int = 1,
        category: str = "technical",
        severity: str = "minor",
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.audit_type = audit_type
        self.id_prefix = audit_type
        self.n_issues = issues
        self.n_passed = passed
        self.category = category
        self.severity = severity
        self.error = error
        self.delay = delay
        self.calls = 0
        self.cancelled = False

    async def audit(self, ctx):
        self.calls += 1
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        issues = [
            self.issue(
                ctx,
                rule_id=f"{self.audit_type}-rule",
                severity=self.severity,
                category=self.category,
                message=f"{self.audit_type} issue {i}",
                description="",
                help_url="",
                wcag=WcagReference(id="N/A"),
            )
            for i in range(self.n_issues)
        ]
        passes = [
            PendingCheck(id=f"{self.audit_type}-pass-{i}", name="check", category=self.category)
            for i in range(self.n_passed)
        ]
        return AuditResult(issues=issues, passed=passes)


AUDIT_TYPES = ["accessibility", "performance", "seo", "security", "best-practices", "pwa"]


@pytest.fixture
def good_page() -> Page:
    return parse_html(GOOD_HTML, "https://example.com/")


@pytest.fixture
def secure_transport() -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(200, headers=SECURE_HEADERS))


@pytest.fixture
def fake_modules() -> list[StaticModule]:
    return [StaticModule(t) for t in AUDIT_TYPES]


@pytest.fixture
def fake_registry(fake_modules) -> AuditRegistry:
    return AuditRegistry(fake_modules)


@pytest.fixture
def make_issue():
    ids = IssueIdGenerator()

    def _make(severity: str = "minor", category: str = "technical", rule_id: str = "rule") -> Issue:
        return Issue(
            id=ids.next_id("t"),
            rule_id=rule_id,
            severity=severity,
            category=category,
            message=f"{severity} {category}",
            wcag=WcagReference(id="N/A"),
        )

    return _make


@pytest.fixture
def sample_report(make_issue) -> AuditReport:
    issues = [
        make_issue("critical", "images", rule_id="image-alt"),
        make_issue("serious", "forms", rule_id="label"),
        make_issue("minor", "technical", rule_id="image-legacy-format"),
    ]
    passed = [PendingCheck(id="seo-title", name="Page Title", category="document")]
    return format_results("https://example.com/", 1_700_000_000_000, 1_700_000_001_500, issues, passed)
