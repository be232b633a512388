"""
Best Practices audit - HTML standards and modern web development hygiene.
"""
import re
from collections import defaultdict
from typing import Optional

from bs4 import BeautifulSoup, Doctype

from webperf.schemas.audit_result import AuditInfo, AuditResult, WcagReference
from webperf.services.audits.base import AuditContext, RuleModule, element_ref, passed, text_of
from webperf.services.audits.collector import DomCollector, PageElements

HTML_PRACTICE = "HTML Best Practice"

# (pattern, name, first safe version or None when every match is vulnerable)
VULNERABLE_LIBRARIES = [
    (re.compile(r"jquery[-.@]([0-9.]+)", re.I), "jQuery", "3.5.0"),
    (re.compile(r"lodash[-.@]([0-9.]+)", re.I), "Lodash", "4.17.21"),
    (re.compile(r"angular[-.@]1\.([0-9.]+)", re.I), "Angular 1.x", None),
    (re.compile(r"bootstrap[-.@]([0-9.]+)", re.I), "Bootstrap", "3.4.0"),
]

PERMISSION_CALLS = [
    ("navigator.geolocation", "intrusive-geolocation", "geolocation",
     "Geolocation API called in script",
     "// Request on user action\nbutton.addEventListener('click', () => {\n"
     "  navigator.geolocation.getCurrentPosition(...);\n});"),
    ("Notification.requestPermission", "intrusive-notification", "notification permission",
     "Notification permission requested in script",
     "// Request on user action\nbutton.addEventListener('click', async () => {\n"
     "  const permission = await Notification.requestPermission();\n});"),
]


def _practice(description: str, level: str = "A", name: str = HTML_PRACTICE) -> WcagReference:
    return WcagReference(id="N/A", level=level, name=name, description=description)


def parse_version(version: str) -> tuple:
    """'3.4.1.' -> (3, 4, 1)"""
    return tuple(int(part) for part in version.split(".") if part.isdigit())


def compare_versions(v1: str, v2: str) -> int:
    a, b = parse_version(v1), parse_version(v2)
    width = max(len(a), len(b))
    a += (0,) * (width - len(a))
    b += (0,) * (width - len(b))
    return (a > b) - (a < b)


def find_doctype(document: BeautifulSoup) -> Optional[str]:
    for node in document.contents:
        if isinstance(node, Doctype):
            return str(node)
    return None


class BestPracticesAudit(RuleModule):
    """Doctype, encoding, deprecated markup, ids, links, libraries, permissions."""

    audit_type = "best-practices"
    id_prefix = "bp"
    info = AuditInfo(
        name="Best Practices",
        description=(
            "Validates HTML standards, deprecated elements, unique IDs, and modern web "
            "development practices"
        ),
        category="Quality",
    )

    def __init__(self):
        self.collector = DomCollector()

    async def audit(self, ctx: AuditContext) -> AuditResult:
        elements = self.collector.collect(ctx.page.document)
        issues = []
        passes = []

        checks = [
            (self._check_doctype, "bp-doctype", "Valid DOCTYPE", "document",
             "Page has valid HTML5 DOCTYPE"),
            (self._check_charset, "bp-charset", "Character Encoding", "document",
             "Page declares UTF-8 encoding"),
            (self._check_html_lang, "bp-html-lang", "Language Attribute", "document",
             "HTML element has lang attribute"),
            (self._check_deprecated, "bp-deprecated", "No Deprecated Elements", "structure",
             "No deprecated HTML elements found"),
            (self._check_duplicate_ids, "bp-duplicate-ids", "Unique IDs", "technical",
             "All element IDs are unique"),
            (self._check_images, "bp-images", "Valid Images", "images",
             "All images have valid src attributes"),
            (self._check_links, "bp-links", "Valid Links", "interactive",
             "All links are valid and accessible"),
            (self._check_meta_refresh, "bp-meta-refresh", "No Meta Refresh", "document",
             "Page does not use meta refresh"),
            (self._check_vulnerable_libraries, "bp-vulnerable-libs", "No Vulnerable Libraries", "technical",
             "No known vulnerable JavaScript libraries detected"),
            (self._check_password_paste, "bp-password-paste", "Password Paste Allowed", "forms",
             "Password fields allow pasting"),
            (self._check_permissions, "bp-permissions", "No Intrusive Permissions", "technical",
             "No intrusive permission requests on load"),
        ]

        for check, check_id, name, category, description in checks:
            found = check(ctx, elements)
            issues.extend(found)
            if not found:
                passes.append(passed(check_id, name, category, description))

        return AuditResult(issues=issues, passed=passes)

    def _check_doctype(self, ctx: AuditContext, elements: PageElements) -> list:
        doctype = find_doctype(ctx.page.document)
        if doctype and doctype.lower().split()[:1] == ["html"]:
            return []
        return [self.issue(
            ctx,
            rule_id="doctype-missing",
            severity="serious",
            category="document",
            message="Page missing HTML5 DOCTYPE declaration",
            description=(
                "A valid DOCTYPE keeps browsers in standards mode. Without it pages may render "
                "in quirks mode."
            ),
            help_url="https://developer.mozilla.org/en-US/docs/Glossary/Doctype",
            wcag=_practice("Pages should have a valid DOCTYPE"),
            element=element_ref(None, "Missing or invalid DOCTYPE declaration", selector="html"),
            fix_description="Add HTML5 DOCTYPE at the beginning of the document",
            fix_code='<!DOCTYPE html>\n<html lang="en">\n<head>\n  ...',
        )]

    def _check_charset(self, ctx: AuditContext, elements: PageElements) -> list:
        help_url = "https://developer.mozilla.org/en-US/docs/Web/HTML/Element/meta#attr-charset"
        if elements.meta_charset is None and elements.meta_http_equiv_content_type is None:
            return [self.issue(
                ctx,
                rule_id="charset-missing",
                severity="serious",
                category="document",
                message="Page missing character encoding declaration",
                description="Without a declared encoding browsers may guess wrong and garble text",
                help_url=help_url,
                wcag=_practice("Pages should declare character encoding"),
                element=element_ref(None, "No charset meta tag found", selector="head"),
                fix_description="Add charset meta tag in the head section",
                fix_code='<head>\n  <meta charset="UTF-8">\n  ...',
            )]

        charset = (elements.meta_charset.get("charset") or "") if elements.meta_charset else ""
        if charset and charset.lower() != "utf-8":
            return [self.issue(
                ctx,
                rule_id="charset-not-utf8",
                severity="moderate",
                category="document",
                message=f"Character encoding is {charset}, not UTF-8",
                description="UTF-8 is the standard encoding for the web and covers every character",
                help_url=help_url,
                wcag=_practice("Pages should use UTF-8"),
                element=element_ref(elements.meta_charset, f"Charset is {charset}", selector="meta[charset]"),
                fix_description="Change the charset to UTF-8",
                fix_code='<meta charset="UTF-8">',
            )]
        return []

    def _check_html_lang(self, ctx: AuditContext, elements: PageElements) -> list:
        html = ctx.page.document.find("html")
        if html is not None and (html.get("lang") or "").strip():
            return []
        return [self.issue(
            ctx,
            rule_id="html-lang-missing",
            severity="serious",
            category="document",
            message="HTML element missing lang attribute",
            description="The lang attribute lets screen readers and translation tools pick the right language",
            help_url="https://developer.mozilla.org/en-US/docs/Web/HTML/Global_attributes/lang",
            wcag=WcagReference(id="3.1.1", level="A", name="Language of Page",
                               description="The default language of the page is set"),
            element=element_ref(html, "No lang attribute on <html>", selector="html"),
            fix_description="Add a lang attribute to the html element",
            fix_code='<html lang="en">',
        )]

    def _check_deprecated(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for tag, found in elements.deprecated.items():
            if not found:
                continue
            issues.append(self.issue(
                ctx,
                rule_id=f"deprecated-{tag}",
                severity="moderate",
                category="structure",
                message=f"Deprecated <{tag}> element used",
                description=f"The <{tag}> element is obsolete and may be removed from browsers",
                help_url=f"https://developer.mozilla.org/en-US/docs/Web/HTML/Element/{tag}",
                wcag=_practice("Use standard HTML elements"),
                element=element_ref(found[0], f"{len(found)} <{tag}> element(s)"),
                fix_description=f"Replace <{tag}> with semantic HTML and CSS",
            ))
        return issues

    def _check_duplicate_ids(self, ctx: AuditContext, elements: PageElements) -> list:
        by_id = defaultdict(list)
        for element in elements.elements_with_id:
            by_id[element["id"]].append(element)

        issues = []
        for element_id, found in by_id.items():
            if len(found) < 2:
                continue
            issues.append(self.issue(
                ctx,
                rule_id="duplicate-id",
                severity="serious",
                category="technical",
                message=f'Duplicate ID "{element_id}" found {len(found)} times',
                description="IDs must be unique; duplicates break label association, anchors and scripts",
                help_url="https://developer.mozilla.org/en-US/docs/Web/HTML/Global_attributes/id",
                wcag=WcagReference(id="4.1.1", level="A", name="Parsing", description="Element ids are unique"),
                element=element_ref(found[1], f"ID '{element_id}' used {len(found)} times"),
                fix_description="Give each element a unique id",
            ))
        return issues

    def _check_images(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for img in elements.images:
            if (img.get("src") or "").strip() or img.get("srcset"):
                continue
            issues.append(self.issue(
                ctx,
                rule_id="image-no-src",
                severity="serious",
                category="images",
                message="Image has empty or missing src attribute",
                description="Images without a source trigger wasted requests and render as broken",
                help_url="https://developer.mozilla.org/en-US/docs/Web/HTML/Element/img#attr-src",
                wcag=_practice("Images must have a valid source"),
                element=element_ref(img, "Image src attribute is empty or missing"),
                fix_description="Set a valid src or remove the image",
                fix_code='<img src="/images/photo.webp" alt="Description">',
            ))
        return issues

    def _check_links(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for link in elements.links:
            if not (link.get("href") or "").strip():
                issues.append(self.issue(
                    ctx,
                    rule_id="link-no-href",
                    severity="moderate",
                    category="interactive",
                    message="Link has empty or missing href attribute",
                    description="Links without a destination confuse users and accessibility tools",
                    help_url="https://developer.mozilla.org/en-US/docs/Web/HTML/Element/a#attr-href",
                    wcag=_practice("Links must have valid href"),
                    element=element_ref(link, "Link href attribute is empty or missing"),
                    fix_description="Add a valid href or use a button instead",
                    fix_code=(
                        '<!-- Use a link -->\n<a href="/page">Link text</a>\n\n'
                        '<!-- Or use a button for actions -->\n<button type="button">Click me</button>'
                    ),
                ))

            has_name = (
                text_of(link)
                or link.get("aria-label")
                or link.get("title")
                or link.find("img", alt=True) is not None
            )
            if not has_name:
                issues.append(self.issue(
                    ctx,
                    rule_id="link-no-text",
                    severity="serious",
                    category="interactive",
                    message="Link has no accessible name",
                    description="Links need text, an aria-label, or an image with alt text",
                    help_url="https://www.w3.org/WAI/WCAG21/Understanding/link-purpose-in-context",
                    wcag=WcagReference(id="2.4.4", level="A", name="Link Purpose (In Context)",
                                       description="Link purpose can be determined"),
                    element=element_ref(link, "Link has no text content"),
                    fix_description="Add descriptive link text or an aria-label",
                    fix_code='<a href="/page">Descriptive link text</a>',
                ))
        return issues

    def _check_meta_refresh(self, ctx: AuditContext, elements: PageElements) -> list:
        if elements.meta_refresh is None:
            return []
        return [self.issue(
            ctx,
            rule_id="meta-refresh",
            severity="serious",
            category="document",
            message="Page uses meta refresh for redirection",
            description="Timed refreshes disorient users and are discouraged in favour of server redirects",
            help_url="https://www.w3.org/TR/WCAG20-TECHS/F41.html",
            wcag=WcagReference(id="2.2.1", level="A", name="Timing Adjustable",
                               description="Users control time limits"),
            element=element_ref(elements.meta_refresh, "Meta refresh tag found"),
            fix_description="Use a server-side 301 redirect instead",
            fix_code="HTTP/1.1 301 Moved Permanently\nLocation: https://example.com/new-page",
        )]

    def _check_vulnerable_libraries(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for script in elements.scripts_with_src:
            src = script.get("src") or ""
            for pattern, name, safe_version in VULNERABLE_LIBRARIES:
                match = pattern.search(src)
                if not match:
                    continue
                version = match.group(1).strip(".")
                if safe_version is not None and compare_versions(version, safe_version) >= 0:
                    continue
                issues.append(self.issue(
                    ctx,
                    rule_id="vulnerable-library",
                    severity="critical",
                    category="technical",
                    message=f"Vulnerable {name} version detected",
                    description=(
                        f"The page uses {name} {version or 'unknown version'}, which has known "
                        "security vulnerabilities. Update to the latest version."
                    ),
                    help_url="https://snyk.io/vuln/",
                    wcag=_practice("Use secure dependencies", name="Security Best Practice"),
                    element=element_ref(script, f"{name} {version} has known vulnerabilities"),
                    fix_description=f"Update {name} to the latest secure version",
                    fix_code=(
                        "// Update to latest version\n// Check https://snyk.io/vuln/ for details\n"
                        f"// npm update {name.split()[0].lower()}"
                    ),
                ))
        return issues

    def _check_password_paste(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for field in elements.password_fields:
            onpaste = field.get("onpaste") or ""
            if "return false" not in onpaste:
                continue
            issues.append(self.issue(
                ctx,
                rule_id="password-paste-blocked",
                severity="serious",
                category="forms",
                message="Password field blocks pasting",
                description="Blocking paste discourages password managers and weakens security",
                help_url="https://www.ncsc.gov.uk/blog-post/let-them-paste-passwords",
                wcag=_practice("Allow password pasting", level="AAA", name="Security Best Practice"),
                element=element_ref(field, "Password field prevents pasting"),
                fix_description="Remove onpaste restriction",
                fix_code='<!-- Allow pasting -->\n<input type="password" name="password">',
            ))
        return issues

    def _check_permissions(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for script in elements.inline_scripts:
            content = script.string or script.get_text()
            for call, rule_id, label, summary, fix_code in PERMISSION_CALLS:
                if call not in content:
                    continue
                issues.append(self.issue(
                    ctx,
                    rule_id=rule_id,
                    severity="moderate",
                    category="technical",
                    message=f"Page may request {label} on load",
                    description=(
                        f"Requesting {label} immediately on page load is intrusive. Ask only in "
                        "response to a user action."
                    ),
                    help_url="https://web.dev/permission-ux/",
                    wcag=_practice("Request permissions contextually", level="AAA", name="UX Best Practice"),
                    element=element_ref(script, summary),
                    fix_description=f"Request {label} only when the user initiates an action",
                    fix_code=fix_code,
                ))
        return issues
