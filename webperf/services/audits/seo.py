"""
SEO audit - meta tags, headings, canonical URL, social tags and structured data.
"""
import json
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from webperf.logger import logger
from webperf.schemas.audit_result import AuditInfo, AuditResult, WcagReference
from webperf.services.audits.base import AuditContext, RuleModule, element_ref, passed
from webperf.services.audits.constants import NOT_APPLICABLE

TITLE_RANGE = (30, 60)
DESCRIPTION_RANGE = (120, 160)

TITLE_HELP = "https://developers.google.com/search/docs/appearance/title-link"
SNIPPET_HELP = "https://developers.google.com/search/docs/appearance/snippet"
CANONICAL_HELP = "https://developers.google.com/search/docs/crawling-indexing/consolidate-duplicate-urls"
OG_HELP = "https://ogp.me/"
SCHEMA_HELP = "https://developers.google.com/search/docs/appearance/structured-data/intro-structured-data"

PAGE_TITLED = WcagReference(id="2.4.2", level="A", name="Page Titled", description="Web pages have titles")
INFO_RELATIONSHIPS = WcagReference(
    id="1.3.1", level="A", name="Info and Relationships", description="Headings convey structure"
)


@dataclass
class SeoSignals:
    """Metadata extracted from a page."""
    title_tag: Optional[Tag] = None
    title: str = ""
    description_tag: Optional[Tag] = None
    description: str = ""
    h1_tags: List[Tag] = field(default_factory=list)
    viewport: Optional[Tag] = None
    canonical: Optional[Tag] = None
    og_tags: dict[str, str] = field(default_factory=dict)
    robots_meta: str = ""
    json_ld_blocks: List[Tag] = field(default_factory=list)
    json_ld_errors: List[str] = field(default_factory=list)


def collect_signals(soup: BeautifulSoup) -> SeoSignals:
    """Extract SEO-relevant metadata from a parsed document."""
    data = SeoSignals()

    data.title_tag = soup.find("title")
    if data.title_tag:
        data.title = data.title_tag.get_text(strip=True)

    data.description_tag = soup.find("meta", attrs={"name": "description"})
    if data.description_tag:
        data.description = (data.description_tag.get("content") or "").strip()

    data.h1_tags = soup.find_all("h1")
    data.viewport = soup.find("meta", attrs={"name": "viewport"})

    for link in soup.find_all("link"):
        if "canonical" in [r.lower() for r in (link.get("rel") or [])]:
            data.canonical = link
            break

    for og in soup.find_all("meta", attrs={"property": True}):
        prop = og["property"]
        if prop.startswith("og:"):
            data.og_tags[prop[3:]] = og.get("content", "")

    robots = soup.find("meta", attrs={"name": "robots"})
    if robots:
        data.robots_meta = (robots.get("content") or "").lower()

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        data.json_ld_blocks.append(script)
        try:
            json.loads(script.string or "")
        except json.JSONDecodeError as e:
            logger.debug(f"Invalid JSON-LD block: {e}")
            data.json_ld_errors.append(str(e)[:100])

    return data


class SeoAudit(RuleModule):
    """Search-engine discoverability checks."""

    audit_type = "seo"
    id_prefix = "seo"
    info = AuditInfo(
        name="SEO",
        description=(
            "Validates SEO best practices including meta tags, headings, structured data, "
            "and crawlability"
        ),
        category="Discoverability",
    )

    async def audit(self, ctx: AuditContext) -> AuditResult:
        signals = collect_signals(ctx.page.document)
        issues = []
        passes = []

        def record(found, check_id, name, category, description):
            issues.extend(found)
            if not found:
                passes.append(passed(check_id, name, category, description))

        record(self._check_title(ctx, signals), "seo-title", "Page Title", "document",
               "Title is present and properly sized")
        record(self._check_description(ctx, signals), "seo-meta-desc", "Meta Description", "document",
               "Meta description is present and properly sized")
        record(self._check_h1(ctx, signals), "seo-h1", "H1 Heading", "structure",
               "Page has exactly one H1 heading")
        record(self._check_viewport(ctx, signals), "seo-viewport", "Viewport Meta Tag", "document",
               "Viewport meta tag is present")
        record(self._check_https(ctx), "seo-https", "HTTPS Protocol", "technical",
               "Page is served over HTTPS")
        record(self._check_canonical(ctx, signals), "seo-canonical", "Canonical URL", "document",
               "Canonical URL is present")
        record(self._check_open_graph(ctx, signals), "seo-og", "Open Graph Tags", "document",
               "Open Graph tags are present")
        record(self._check_structured_data(ctx, signals), "seo-schema", "Structured Data", "document",
               "Structured data is present")
        record(self._check_indexable(ctx, signals), "seo-indexable", "Indexability", "document",
               "Page does not block search engine indexing")

        return AuditResult(issues=issues, passed=passes)

    def _check_title(self, ctx: AuditContext, s: SeoSignals) -> list:
        if not s.title:
            return [self.issue(
                ctx,
                rule_id="seo-title-missing",
                severity="critical",
                category="document",
                message="Page is missing a title tag",
                description="Every page should have a unique, descriptive title tag for SEO and accessibility",
                help_url=TITLE_HELP,
                wcag=PAGE_TITLED,
                element=element_ref(s.title_tag, "No title tag found", selector="head"),
                fix_description="Add a descriptive title tag within the <head> section",
                fix_code="<title>Your Page Title Here (50-60 characters)</title>",
            )]
        length = len(s.title)
        low, high = TITLE_RANGE
        if length < low or length > high:
            return [self.issue(
                ctx,
                rule_id="seo-title-length",
                severity="moderate",
                category="document",
                message=f"Title length is {length} characters (recommended: {low}-{high})",
                description="Page titles in this range display fully in search results",
                help_url=TITLE_HELP,
                wcag=PAGE_TITLED,
                element=element_ref(s.title_tag, f"Title is {length} chars", selector="title"),
                fix_description=f"Adjust your title to be between {low}-{high} characters",
                fix_code=f"<title>{s.title[:high]}</title>",
            )]
        return []

    def _check_description(self, ctx: AuditContext, s: SeoSignals) -> list:
        if not s.description:
            return [self.issue(
                ctx,
                rule_id="seo-meta-desc-missing",
                severity="serious",
                category="document",
                message="Page is missing a meta description",
                description="Meta descriptions are used as the snippet in search results",
                help_url=SNIPPET_HELP,
                wcag=NOT_APPLICABLE,
                element=element_ref(s.description_tag, "No meta description found", selector="head"),
                fix_description="Add a meta description summarising the page",
                fix_code='<meta name="description" content="A concise summary of the page (120-160 characters)">',
            )]
        length = len(s.description)
        low, high = DESCRIPTION_RANGE
        if length < low or length > high:
            return [self.issue(
                ctx,
                rule_id="seo-meta-desc-length",
                severity="moderate",
                category="document",
                message=f"Meta description is {length} characters (recommended: {low}-{high})",
                description="Descriptions outside this range are truncated or padded by search engines",
                help_url=SNIPPET_HELP,
                wcag=NOT_APPLICABLE,
                element=element_ref(s.description_tag, f"Description is {length} chars",
                                    selector='meta[name="description"]'),
                fix_description=f"Adjust the description to {low}-{high} characters",
            )]
        return []

    def _check_h1(self, ctx: AuditContext, s: SeoSignals) -> list:
        if not s.h1_tags:
            return [self.issue(
                ctx,
                rule_id="seo-h1-missing",
                severity="serious",
                category="structure",
                message="Page is missing an H1 heading",
                description="The H1 tells search engines and users what the page is about",
                help_url="https://developers.google.com/search/docs/fundamentals/seo-starter-guide",
                wcag=INFO_RELATIONSHIPS,
                element=element_ref(None, "No h1 element found", selector="body"),
                fix_description="Add a single H1 describing the page topic",
                fix_code="<h1>Main Page Heading</h1>",
            )]
        if len(s.h1_tags) > 1:
            return [self.issue(
                ctx,
                rule_id="seo-h1-multiple",
                severity="moderate",
                category="structure",
                message=f"Page has {len(s.h1_tags)} H1 headings",
                description="A single H1 keeps the page topic unambiguous",
                help_url="https://developers.google.com/search/docs/fundamentals/seo-starter-guide",
                wcag=INFO_RELATIONSHIPS,
                element=element_ref(s.h1_tags[1], f"{len(s.h1_tags)} h1 elements", selector="h1"),
                fix_description="Keep one H1 and demote the others to H2",
            )]
        return []

    def _check_viewport(self, ctx: AuditContext, s: SeoSignals) -> list:
        if s.viewport is not None:
            return []
        return [self.issue(
            ctx,
            rule_id="seo-viewport-missing",
            severity="serious",
            category="document",
            message="Page is missing a viewport meta tag",
            description="Mobile-first indexing requires a responsive viewport",
            help_url="https://developers.google.com/search/docs/crawling-indexing/mobile/mobile-sites-mobile-first-indexing",
            wcag=WcagReference(id="1.4.10", level="AA", name="Reflow", description="Content reflows on small screens"),
            element=element_ref(None, "No viewport meta tag", selector="head"),
            fix_description="Add a responsive viewport meta tag",
            fix_code='<meta name="viewport" content="width=device-width, initial-scale=1">',
        )]

    def _check_https(self, ctx: AuditContext) -> list:
        if ctx.page.is_https:
            return []
        return [self.issue(
            ctx,
            rule_id="seo-https",
            severity="critical",
            category="technical",
            message="Page is not served over HTTPS",
            description="HTTPS is a ranking signal and browsers flag HTTP pages as not secure",
            help_url="https://developers.google.com/search/docs/appearance/page-experience",
            wcag=NOT_APPLICABLE,
            element=element_ref(None, f"URL: {ctx.page.url}", selector="html"),
            fix_description="Serve the page over HTTPS and redirect HTTP traffic",
        )]

    def _check_canonical(self, ctx: AuditContext, s: SeoSignals) -> list:
        if s.canonical is not None and s.canonical.get("href"):
            return []
        return [self.issue(
            ctx,
            rule_id="seo-canonical-missing",
            severity="moderate",
            category="document",
            message="Page is missing a canonical URL",
            description="Canonical links consolidate duplicate URLs under one indexed address",
            help_url=CANONICAL_HELP,
            wcag=NOT_APPLICABLE,
            element=element_ref(s.canonical, "No canonical link found", selector="head"),
            fix_description="Add a self-referencing canonical link",
            fix_code=f'<link rel="canonical" href="{ctx.page.url}">',
        )]

    def _check_open_graph(self, ctx: AuditContext, s: SeoSignals) -> list:
        issues = []
        if not s.og_tags.get("title"):
            issues.append(self.issue(
                ctx,
                rule_id="seo-og-title",
                severity="moderate",
                category="document",
                message="Missing og:title meta tag",
                description="og:title controls the headline shown when the page is shared",
                help_url=OG_HELP,
                wcag=NOT_APPLICABLE,
                element=element_ref(None, "No og:title", selector="head"),
                fix_description="Add Open Graph title and image tags",
                fix_code=(
                    '<meta property="og:title" content="Your Page Title">\n'
                    '<meta property="og:image" content="https://example.com/image.jpg">'
                ),
            ))
        if not s.og_tags.get("image"):
            issues.append(self.issue(
                ctx,
                rule_id="seo-og-image",
                severity="moderate",
                category="document",
                message="Missing og:image meta tag",
                description="og:image ensures preview image displays when shared",
                help_url=OG_HELP,
                wcag=NOT_APPLICABLE,
                element=element_ref(None, "No og:image", selector="head"),
                fix_description="Add an og:image tag",
                fix_code='<meta property="og:image" content="https://example.com/image.jpg">',
            ))
        return issues

    def _check_structured_data(self, ctx: AuditContext, s: SeoSignals) -> list:
        if not s.json_ld_blocks:
            return [self.issue(
                ctx,
                rule_id="seo-schema-missing",
                severity="moderate",
                category="document",
                message="No structured data found",
                description="Structured data enables rich results in search",
                help_url=SCHEMA_HELP,
                wcag=NOT_APPLICABLE,
                element=element_ref(None, "No JSON-LD script found", selector="head"),
                fix_description="Add Schema.org structured data using JSON-LD format",
                fix_code=(
                    '<script type="application/ld+json">\n{\n  "@context": "https://schema.org",\n'
                    '  "@type": "WebPage",\n  "name": "Your Page Name"\n}\n</script>'
                ),
            )]
        if s.json_ld_errors:
            return [self.issue(
                ctx,
                rule_id="seo-schema-invalid",
                severity="moderate",
                category="document",
                message=f"{len(s.json_ld_errors)} JSON-LD block(s) could not be parsed",
                description="Search engines ignore structured data that is not valid JSON",
                help_url=SCHEMA_HELP,
                wcag=NOT_APPLICABLE,
                element=element_ref(None, s.json_ld_errors[0], selector='script[type="application/ld+json"]'),
                fix_description="Validate the JSON-LD with the Rich Results Test",
                learn_more_url="https://search.google.com/test/rich-results",
            )]
        return []

    def _check_indexable(self, ctx: AuditContext, s: SeoSignals) -> list:
        if "noindex" not in s.robots_meta:
            return []
        return [self.issue(
            ctx,
            rule_id="seo-noindex",
            severity="serious",
            category="document",
            message="Page blocks indexing with a robots noindex directive",
            description="Pages marked noindex are dropped from search results",
            help_url="https://developers.google.com/search/docs/crawling-indexing/block-indexing",
            wcag=NOT_APPLICABLE,
            element=element_ref(None, f"robots: {s.robots_meta}", selector='meta[name="robots"]'),
            fix_description="Remove noindex if the page should appear in search",
        )]
