"""
Performance audit - static checks for resource loading patterns.

This inspects markup only; it does not measure paint timing or network cost.
"""
import re

from webperf.schemas.audit_result import AuditInfo, AuditResult, WcagReference
from webperf.services.audits.base import AuditContext, RuleModule, element_ref, passed
from webperf.services.audits.collector import DomCollector, PageElements

MAX_EXTERNAL_SCRIPTS = 20
MAX_STYLESHEETS = 5
MAX_HEAD_INLINE_SCRIPTS = 3
MAX_BLOCKING_STYLESHEETS = 2
# Images after this index are assumed to be below the fold
EAGER_IMAGE_COUNT = 3

LEGACY_IMAGE_FORMAT = re.compile(r"\.(jpe?g|png)$", re.I)

PERF_WCAG = WcagReference(
    id="N/A", level="AAA", name="Performance Best Practice", description="Optimize page loading"
)


class PerformanceAudit(RuleModule):
    """Resource efficiency, images, JavaScript, layout stability, render blocking, fonts."""

    audit_type = "performance"
    id_prefix = "perf"
    info = AuditInfo(
        name="Performance",
        description=(
            "Analyzes page performance including resource optimization, image loading, "
            "JavaScript efficiency, and layout stability"
        ),
        category="Speed",
    )

    def __init__(self):
        self.collector = DomCollector()

    async def audit(self, ctx: AuditContext) -> AuditResult:
        elements = self.collector.collect(ctx.page.document)
        issues = []
        passes = []

        groups = [
            (self._check_resources, "perf-resources", "Resource Efficiency", "technical",
             "Resource count and sizes are reasonable"),
            (self._check_images, "perf-images", "Image Optimization", "images",
             "Images are optimally configured"),
            (self._check_javascript, "perf-javascript", "JavaScript Efficiency", "technical",
             "JavaScript is efficiently loaded"),
            (self._check_layout_shift, "perf-cls", "Layout Stability", "technical",
             "No elements likely to cause layout shifts"),
            (self._check_render_blocking, "perf-render-blocking", "Render-Blocking Resources", "technical",
             "No render-blocking resources detected"),
            (self._check_fonts, "perf-fonts", "Font Loading", "technical",
             "Fonts are efficiently loaded"),
        ]

        for check, check_id, name, category, description in groups:
            found = check(ctx, elements)
            issues.extend(found)
            if not found:
                passes.append(passed(check_id, name, category, description))

        return AuditResult(issues=issues, passed=passes)

    def _check_resources(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        scripts = elements.scripts_with_src
        if len(scripts) > MAX_EXTERNAL_SCRIPTS:
            issues.append(self.issue(
                ctx,
                rule_id="excessive-scripts",
                severity="moderate",
                category="technical",
                message=f"Page loads {len(scripts)} external scripts",
                description="Too many JavaScript files increase load time and parsing overhead",
                help_url="https://web.dev/reduce-javascript-payloads-with-code-splitting/",
                wcag=PERF_WCAG,
                element=element_ref(None, f"{len(scripts)} scripts (recommended: <= {MAX_EXTERNAL_SCRIPTS})",
                                    selector="script[src]"),
                fix_description="Bundle scripts and split code so only what the page needs is loaded",
                fix_code="// Use dynamic import for non-critical code\nconst module = await import('./feature.js');",
            ))

        stylesheets = elements.stylesheets
        if len(stylesheets) > MAX_STYLESHEETS:
            issues.append(self.issue(
                ctx,
                rule_id="excessive-stylesheets",
                severity="moderate",
                category="technical",
                message=f"Page loads {len(stylesheets)} stylesheets",
                description="Many separate stylesheets add round trips before first render",
                help_url="https://web.dev/extract-critical-css/",
                wcag=PERF_WCAG,
                element=element_ref(None, f"{len(stylesheets)} stylesheets (recommended: <= {MAX_STYLESHEETS})",
                                    selector='link[rel="stylesheet"]'),
                fix_description="Combine stylesheets and inline critical CSS",
                fix_code='<style>/* critical CSS */</style>\n<link rel="stylesheet" href="main.css">',
            ))
        return issues

    def _check_images(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for index, img in enumerate(elements.images):
            src = img.get("src") or ""

            if not img.get("width") or not img.get("height"):
                issues.append(self.issue(
                    ctx,
                    rule_id="image-missing-dimensions",
                    severity="moderate",
                    category="images",
                    message="Image is missing explicit width and height",
                    description="Images without dimensions cause layout shifts when they load",
                    help_url="https://web.dev/optimize-cls/#images-without-dimensions",
                    wcag=PERF_WCAG,
                    element=element_ref(img, "Image has no width/height attributes"),
                    fix_description="Add width and height attributes to the image",
                    fix_code=f'<img src="{src}" width="800" height="600" alt="...">',
                ))

            if not img.get("loading") and index >= EAGER_IMAGE_COUNT:
                issues.append(self.issue(
                    ctx,
                    rule_id="image-no-lazy-loading",
                    severity="minor",
                    category="images",
                    message="Below-fold image is not lazy loaded",
                    description="Deferring offscreen images reduces initial page weight",
                    help_url="https://web.dev/lazy-loading-images/",
                    wcag=PERF_WCAG,
                    element=element_ref(img, "Image has no loading attribute"),
                    fix_description="Add loading='lazy' attribute to below-fold images",
                    fix_code=f'<img src="{src}" loading="lazy" alt="...">',
                ))

            if src and LEGACY_IMAGE_FORMAT.search(src.split("?")[0]):
                issues.append(self.issue(
                    ctx,
                    rule_id="image-legacy-format",
                    severity="minor",
                    category="images",
                    message="Image uses a legacy format",
                    description="WebP and AVIF images are typically much smaller than JPEG or PNG",
                    help_url="https://web.dev/serve-images-webp/",
                    wcag=PERF_WCAG,
                    element=element_ref(img, f"Image format: {src.rsplit('.', 1)[-1]}"),
                    fix_description="Serve WebP or AVIF with a fallback",
                    fix_code=(
                        "<picture>\n"
                        '  <source srcset="image.webp" type="image/webp">\n'
                        f'  <img src="{src}" alt="...">\n'
                        "</picture>"
                    ),
                ))
        return issues

    def _check_javascript(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for script in elements.scripts_with_src:
            if script.has_attr("async") or script.has_attr("defer") or script.get("type") == "module":
                continue
            issues.append(self.issue(
                ctx,
                rule_id="script-blocking",
                severity="serious",
                category="technical",
                message="Script blocks parsing",
                description="Scripts without async or defer block HTML parsing until they download and run",
                help_url="https://web.dev/render-blocking-resources/",
                wcag=PERF_WCAG,
                element=element_ref(script, "Script has neither async nor defer"),
                fix_description="Add async or defer to the script tag",
                fix_code=f'<script src="{script.get("src")}" defer></script>',
            ))

        head_inline = [s for s in elements.head_scripts if not s.get("src")]
        if len(head_inline) > MAX_HEAD_INLINE_SCRIPTS:
            issues.append(self.issue(
                ctx,
                rule_id="excessive-inline-scripts",
                severity="moderate",
                category="technical",
                message=f"{len(head_inline)} inline scripts in <head>",
                description="Inline scripts in the head delay first render",
                help_url="https://web.dev/render-blocking-resources/",
                wcag=PERF_WCAG,
                element=element_ref(None, f"{len(head_inline)} inline head scripts", selector="head script:not([src])"),
                fix_description="Move non-critical inline scripts to the end of the body or external deferred files",
            ))
        return issues

    def _check_layout_shift(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        for iframe in elements.iframes:
            if iframe.get("width") and iframe.get("height"):
                continue
            issues.append(self.issue(
                ctx,
                rule_id="iframe-missing-dimensions",
                severity="moderate",
                category="technical",
                message="Iframe is missing explicit dimensions",
                description="Embeds without reserved space shift content when they load",
                help_url="https://web.dev/optimize-cls/",
                wcag=PERF_WCAG,
                element=element_ref(iframe, "Iframe has no width/height attributes"),
                fix_description="Add width and height attributes or use aspect-ratio CSS",
                fix_code='<iframe src="..." width="560" height="315"></iframe>',
            ))

        font_sheets = elements.font_links + elements.google_fonts_links
        if font_sheets and not any("display=" in (link.get("href") or "") for link in font_sheets):
            issues.append(self.issue(
                ctx,
                rule_id="font-no-display",
                severity="minor",
                category="technical",
                message="Web fonts may cause invisible text during load",
                description="Without font-display text stays invisible until the font downloads",
                help_url="https://web.dev/font-display/",
                wcag=PERF_WCAG,
                element=element_ref(font_sheets[0], "Font stylesheet without font-display"),
                fix_description="Use font-display: swap",
                fix_code="@font-face {\n  font-family: 'Main';\n  font-display: swap;\n}",
            ))
        return issues

    def _check_render_blocking(self, ctx: AuditContext, elements: PageElements) -> list:
        blocking = [
            link for link in elements.head_stylesheets
            if not link.has_attr("disabled") and (link.get("media") or "all") in ("all", "screen")
        ]
        if len(blocking) <= MAX_BLOCKING_STYLESHEETS:
            return []
        return [self.issue(
            ctx,
            rule_id="render-blocking-css",
            severity="serious",
            category="technical",
            message=f"{len(blocking)} render-blocking stylesheets",
            description="Stylesheets in the head block rendering until they are downloaded",
            help_url="https://web.dev/defer-non-critical-css/",
            wcag=PERF_WCAG,
            element=element_ref(blocking[0], f"{len(blocking)} blocking stylesheets",
                                selector='head link[rel="stylesheet"]'),
            fix_description="Inline critical CSS and load the rest asynchronously",
            fix_code=(
                '<link rel="preload" href="styles.css" as="style" '
                "onload=\"this.onload=null;this.rel='stylesheet'\">"
            ),
        )]

    def _check_fonts(self, ctx: AuditContext, elements: PageElements) -> list:
        issues = []
        if elements.font_links and not elements.font_preloads:
            issues.append(self.issue(
                ctx,
                rule_id="font-no-preload",
                severity="minor",
                category="technical",
                message="Web fonts not preloaded",
                description="Preloading critical fonts ensures they're discovered early in the page load",
                help_url="https://web.dev/codelab-preload-web-fonts/",
                wcag=PERF_WCAG,
                element=element_ref(elements.font_links[0], "Fonts are not preloaded", selector='link[href*="font"]'),
                fix_description="Add preload links for critical fonts",
                fix_code='<link rel="preload" href="/fonts/main.woff2" as="font" type="font/woff2" crossorigin>',
            ))

        if elements.google_fonts_links and elements.google_fonts_preconnect is None:
            issues.append(self.issue(
                ctx,
                rule_id="google-fonts-no-preconnect",
                severity="minor",
                category="technical",
                message="Google Fonts loaded without preconnect",
                description="Preconnecting to the font origin saves a connection setup on the critical path",
                help_url="https://web.dev/uses-rel-preconnect/",
                wcag=PERF_WCAG,
                element=element_ref(elements.google_fonts_links[0], "No preconnect to fonts.gstatic.com"),
                fix_description="Preconnect to the Google Fonts origins",
                fix_code=(
                    '<link rel="preconnect" href="https://fonts.googleapis.com">\n'
                    '<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>'
                ),
            ))
        return issues
