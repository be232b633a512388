"""
Security audit - transport security, response headers and unsafe markup.
"""
from typing import Optional

import httpx

from webperf.config import settings
from webperf.logger import logger
from webperf.schemas.audit_result import AuditInfo, AuditResult, WcagReference
from webperf.services.audits.base import AuditContext, RuleModule, element_ref, passed

SECURITY_WCAG = WcagReference(id="4.1.1", level="A", name="Parsing", description="Security is maintained")
LINK_WCAG = WcagReference(id="4.1.2", level="A", name="Name, Role, Value", description="Links are safe")

HTTPS_HELP = "https://developers.google.com/web/fundamentals/security/encrypt-in-transit"
HEADERS_HELP = "https://owasp.org/www-project-secure-headers/"
HTTPS_REDIRECT = (
    "RewriteEngine On\n"
    "RewriteCond %{HTTPS} off\n"
    "RewriteRule ^(.*)$ https://%{HTTP_HOST}%{REQUEST_URI} [L,R=301]"
)

# (header, severity, example value)
SECURITY_HEADERS = [
    ("Content-Security-Policy", "serious",
     "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'"),
    ("Strict-Transport-Security", "serious", "max-age=31536000; includeSubDomains"),
    ("X-Frame-Options", "serious", "DENY"),
    ("X-Content-Type-Options", "moderate", "nosniff"),
]

MIXED_CONTENT_SOURCES = [("script", "src"), ("link", "href"), ("img", "src"), ("iframe", "src")]


class SecurityAudit(RuleModule):
    """HTTPS, mixed content, security headers, password fields and tabnabbing."""

    audit_type = "security"
    id_prefix = "sec"
    info = AuditInfo(
        name="Security",
        description="Checks security headers, HTTPS usage, mixed content, and password field security",
        category="Safety",
    )

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    async def audit(self, ctx: AuditContext) -> AuditResult:
        issues = []
        passes = []

        found = self._check_https(ctx)
        issues.extend(found)
        if not found:
            passes.append(passed("sec-https", "HTTPS Enabled", "technical", "Page is served over HTTPS"))

        found = self._check_mixed_content(ctx)
        issues.extend(found)
        if not found:
            passes.append(passed("sec-mixed", "No Mixed Content", "technical", "No HTTP resources on HTTPS page"))

        headers = await self._response_headers(ctx)
        if headers is not None:
            found = self._check_headers(ctx, headers)
            issues.extend(found)
            if not found:
                passes.append(passed("sec-headers", "Security Headers", "technical",
                                     "All recommended security headers are set"))

        found = self._check_password_fields(ctx)
        issues.extend(found)
        if not found:
            passes.append(passed("sec-password", "Password Fields Secure", "technical",
                                 "Password fields are on HTTPS"))

        found = self._check_external_links(ctx)
        issues.extend(found)
        if not found:
            passes.append(passed("sec-ext-links", "External Links Secure", "technical",
                                 "External links have security attributes"))

        return AuditResult(issues=issues, passed=passes)

    async def _response_headers(self, ctx: AuditContext) -> Optional[httpx.Headers]:
        """Headers from the page fetch, or from a HEAD request when the page has none."""
        if ctx.page.headers:
            return httpx.Headers(ctx.page.headers)
        return await self._fetch_headers(ctx.page.final_url)

    async def _fetch_headers(self, url: str) -> Optional[httpx.Headers]:
        """HEAD the page; None when the request fails."""
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=settings.HTTP_TIMEOUT,
                transport=self._transport,
            ) as client:
                response = await client.head(url, headers={"User-Agent": settings.USER_AGENT})
            return response.headers
        except httpx.HTTPError as e:
            logger.warning(f"Security header check skipped for {url}: {e}")
            return None

    def _check_https(self, ctx: AuditContext) -> list:
        if ctx.page.is_https:
            return []
        return [self.issue(
            ctx,
            rule_id="sec-https",
            severity="critical",
            category="technical",
            message="Page is not served over HTTPS",
            description="HTTPS encrypts data between browser and server",
            help_url=HTTPS_HELP,
            wcag=SECURITY_WCAG,
            element=element_ref(None, f"URL: {ctx.page.url}", selector="body"),
            fix_description="Enable HTTPS on your web server",
            fix_code=HTTPS_REDIRECT,
        )]

    def _check_mixed_content(self, ctx: AuditContext) -> list:
        if not ctx.page.is_https:
            return []
        document = ctx.page.document
        mixed = []
        for tag_name, attr in MIXED_CONTENT_SOURCES:
            for tag in document.find_all(tag_name):
                if (tag.get(attr) or "").startswith("http://"):
                    mixed.append(tag)
        if not mixed:
            return []
        return [self.issue(
            ctx,
            rule_id="sec-mixed",
            severity="serious",
            category="technical",
            message=f"Found {len(mixed)} HTTP resource(s) on HTTPS page",
            description="Mixed content weakens HTTPS security",
            help_url="https://developer.mozilla.org/en-US/docs/Web/Security/Mixed_content",
            wcag=SECURITY_WCAG,
            element=element_ref(mixed[0], f"{len(mixed)} mixed content resources"),
            fix_description="Update all resource URLs to use HTTPS",
            fix_code=(
                "<!-- Change from -->\n<script src=\"http://example.com/script.js\"></script>\n"
                "<!-- To -->\n<script src=\"https://example.com/script.js\"></script>"
            ),
        )]

    def _check_headers(self, ctx: AuditContext, headers: httpx.Headers) -> list:
        issues = []
        for name, severity, example in SECURITY_HEADERS:
            if headers.get(name):
                continue
            issues.append(self.issue(
                ctx,
                rule_id=f"sec-header-{name.lower()}",
                severity=severity,
                category="technical",
                message=f"Missing {name} header",
                description=f"The {name} header helps protect against security vulnerabilities",
                help_url=HEADERS_HELP,
                wcag=WcagReference(id="4.1.1", level="A", name="Parsing", description="Security headers are set"),
                element=element_ref(None, f"{name} not found", selector="body"),
                fix_description=f"Add the {name} header to your server configuration",
                fix_code=f"{name}: {example}",
            ))
        return issues

    def _check_password_fields(self, ctx: AuditContext) -> list:
        if ctx.page.is_https:
            return []
        fields = ctx.page.document.find_all("input", attrs={"type": "password"})
        if not fields:
            return []
        return [self.issue(
            ctx,
            rule_id="sec-password-http",
            severity="critical",
            category="technical",
            message="Password fields on non-HTTPS page",
            description="Password fields should never be on HTTP pages",
            help_url="https://owasp.org/www-project-web-security-testing-guide/",
            wcag=SECURITY_WCAG,
            element=element_ref(fields[0], "Password field over HTTP", selector='input[type="password"]'),
            fix_description="Enable HTTPS for all pages with password fields",
            fix_code=HTTPS_REDIRECT,
        )]

    def _check_external_links(self, ctx: AuditContext) -> list:
        unsafe = []
        for link in ctx.page.document.find_all("a", attrs={"target": "_blank"}):
            rel = [r.lower() for r in (link.get("rel") or [])]
            if "noopener" not in rel or "noreferrer" not in rel:
                unsafe.append(link)
        if not unsafe:
            return []
        return [self.issue(
            ctx,
            rule_id="sec-ext-links",
            severity="moderate",
            category="technical",
            message=f'{len(unsafe)} external link(s) missing rel="noopener noreferrer"',
            description='Links with target="_blank" should prevent reverse tabnabbing',
            help_url="https://owasp.org/www-community/attacks/Reverse_Tabnabbing",
            wcag=LINK_WCAG,
            element=element_ref(unsafe[0], f"{len(unsafe)} unsafe external links", selector='a[target="_blank"]'),
            fix_description='Add rel="noopener noreferrer" to all target="_blank" links',
            fix_code='<a href="https://example.com" target="_blank" rel="noopener noreferrer">Link</a>',
        )]
