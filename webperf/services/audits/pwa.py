"""
PWA audit - installability signals visible in the page markup.
"""
from webperf.schemas.audit_result import AuditInfo, AuditResult, WcagReference
from webperf.services.audits.base import AuditContext, RuleModule, element_ref, passed
from webperf.services.audits.collector import DomCollector, PageElements


def _requirement(description: str) -> WcagReference:
    return WcagReference(id="N/A", level="AAA", name="PWA Requirement", description=description)


class PwaAudit(RuleModule):
    """Manifest, service worker, HTTPS, viewport, icons and theme color."""

    audit_type = "pwa"
    id_prefix = "pwa"
    info = AuditInfo(
        name="Progressive Web App",
        description=(
            "Checks PWA requirements including manifest, service worker, HTTPS, and mobile optimization"
        ),
        category="Installability",
    )

    def __init__(self):
        self.collector = DomCollector()

    async def audit(self, ctx: AuditContext) -> AuditResult:
        elements = self.collector.collect(ctx.page.document)
        issues = []
        passes = []

        checks = [
            (self._check_manifest, "pwa-manifest", "Web App Manifest", "document",
             "Web app manifest is linked"),
            (self._check_service_worker, "pwa-service-worker", "Service Worker", "technical",
             "Service worker is registered"),
            (self._check_https, "pwa-https", "HTTPS", "technical",
             "Page is served over HTTPS"),
            (self._check_viewport, "pwa-viewport", "Viewport Meta Tag", "document",
             "Viewport meta tag is properly configured"),
            (self._check_apple_touch_icon, "pwa-apple-icon", "Apple Touch Icon", "document",
             "Apple touch icon is specified"),
            (self._check_theme_color, "pwa-theme-color", "Theme Color", "document",
             "Theme color is specified"),
        ]

        for check, check_id, name, category, description in checks:
            found = check(ctx, elements)
            issues.extend(found)
            if not found:
                passes.append(passed(check_id, name, category, description))

        return AuditResult(issues=issues, passed=passes)

    def _link_with_rel(self, ctx: AuditContext, rel: str):
        for link in ctx.page.document.find_all("link"):
            if rel in [r.lower() for r in (link.get("rel") or [])]:
                return link
        return None

    def _check_manifest(self, ctx: AuditContext, elements: PageElements) -> list:
        if self._link_with_rel(ctx, "manifest") is not None:
            return []
        return [self.issue(
            ctx,
            rule_id="manifest-missing",
            severity="serious",
            category="document",
            message="Web app manifest not found",
            description=(
                "A web app manifest defines how the app appears to users and enables installation"
            ),
            help_url="https://web.dev/add-manifest/",
            wcag=_requirement("Web app manifest must be present"),
            element=element_ref(None, "No manifest link found", selector="head"),
            fix_description="Add a manifest link in the head section",
            fix_code='<head>\n  <link rel="manifest" href="/manifest.json">\n</head>',
        )]

    def _check_service_worker(self, ctx: AuditContext, elements: PageElements) -> list:
        for script in elements.inline_scripts:
            if "navigator.serviceWorker.register" in script.get_text():
                return []
        return [self.issue(
            ctx,
            rule_id="service-worker-missing",
            severity="serious",
            category="technical",
            message="Service worker not registered",
            description="A service worker enables offline support and is required for installation",
            help_url="https://web.dev/service-workers-cache-storage/",
            wcag=_requirement("Service worker must be registered"),
            element=element_ref(None, "No service worker registration found", selector="body"),
            fix_description="Register a service worker",
            fix_code=(
                "<script>\n  if ('serviceWorker' in navigator) {\n"
                "    navigator.serviceWorker.register('/sw.js');\n  }\n</script>"
            ),
        )]

    def _check_https(self, ctx: AuditContext, elements: PageElements) -> list:
        if ctx.page.is_https:
            return []
        return [self.issue(
            ctx,
            rule_id="pwa-requires-https",
            severity="critical",
            category="technical",
            message="PWA requires HTTPS",
            description="Service workers and installation only work on secure origins",
            help_url="https://web.dev/why-https-matters/",
            wcag=_requirement("PWA must be served over HTTPS"),
            element=element_ref(None, f"URL: {ctx.page.url}", selector="html"),
            fix_description="Serve the app over HTTPS",
        )]

    def _check_viewport(self, ctx: AuditContext, elements: PageElements) -> list:
        viewport = elements.meta_viewport
        if viewport is None:
            return [self.issue(
                ctx,
                rule_id="viewport-missing",
                severity="serious",
                category="document",
                message="Viewport meta tag missing",
                description="Without a viewport the page renders at desktop width on phones",
                help_url="https://web.dev/responsive-web-design-basics/#viewport",
                wcag=_requirement("Viewport must be configured"),
                element=element_ref(None, "No viewport meta tag found", selector="head"),
                fix_description="Add a viewport meta tag",
                fix_code='<meta name="viewport" content="width=device-width, initial-scale=1">',
            )]

        content = viewport.get("content") or ""
        if "width=device-width" not in content.replace(" ", ""):
            return [self.issue(
                ctx,
                rule_id="viewport-invalid",
                severity="moderate",
                category="document",
                message="Viewport meta tag missing width=device-width",
                description="The viewport should match the device width",
                help_url="https://web.dev/responsive-web-design-basics/#viewport",
                wcag=_requirement("Viewport must match device width"),
                element=element_ref(viewport, f"Viewport content: {content}"),
                fix_description="Set width=device-width in the viewport content",
                fix_code='<meta name="viewport" content="width=device-width, initial-scale=1">',
            )]
        return []

    def _check_apple_touch_icon(self, ctx: AuditContext, elements: PageElements) -> list:
        if self._link_with_rel(ctx, "apple-touch-icon") is not None:
            return []
        return [self.issue(
            ctx,
            rule_id="apple-touch-icon-missing",
            severity="minor",
            category="document",
            message="Apple touch icon not specified",
            description="iOS uses the apple-touch-icon when the page is added to the home screen",
            help_url="https://web.dev/apple-touch-icon/",
            wcag=_requirement("Home screen icon should be provided"),
            element=element_ref(None, "No apple-touch-icon link found", selector="head"),
            fix_description="Add an apple-touch-icon link",
            fix_code='<link rel="apple-touch-icon" href="/icons/apple-touch-icon.png">',
        )]

    def _check_theme_color(self, ctx: AuditContext, elements: PageElements) -> list:
        if ctx.page.document.find("meta", attrs={"name": "theme-color"}) is not None:
            return []
        return [self.issue(
            ctx,
            rule_id="theme-color-missing",
            severity="minor",
            category="document",
            message="Theme color not specified",
            description="theme-color tints the browser UI to match the app",
            help_url="https://web.dev/themed-omnibox/",
            wcag=_requirement("Theme color should be provided"),
            element=element_ref(None, "No theme-color meta tag found", selector="head"),
            fix_description="Add theme-color meta tag",
            fix_code='<head>\n  <meta name="theme-color" content="#1a73e8">\n</head>',
        )]
