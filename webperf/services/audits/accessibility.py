"""
Accessibility audit - WCAG 2.1 rule checks over the static DOM.

Each rule returns the offending elements, or None when nothing on the page is
subject to it. Rules with no violations are reported as passed checks.
"""

import re
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

from webperf.logger import logger
from webperf.schemas.audit_result import AuditInfo, AuditResult, WcagReference
from webperf.services.audits.base import AuditContext, RuleModule, element_ref, passed, text_of
from webperf.services.audits.constants import (
    DEQUE_RULE_URL,
    RULE_TO_CATEGORY,
    VALID_ARIA_ROLES,
    WCAG_MAPPINGS,
)

Violation = tuple[Optional[Tag], str]
Rule = Callable[[BeautifulSoup], Optional[list[Violation]]]

LANG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]{2,8})*$")


def _has_accessible_name(tag: Tag) -> bool:
    if text_of(tag):
        return True
    if (tag.get("aria-label") or "").strip() or tag.get("aria-labelledby"):
        return True
    if (tag.get("title") or "").strip():
        return True
    return any((img.get("alt") or "").strip() for img in tag.find_all("img"))


def _is_hidden(tag: Tag) -> bool:
    return tag.get("aria-hidden") == "true" or tag.has_attr("hidden")


def check_image_alt(doc: BeautifulSoup) -> Optional[list[Violation]]:
    images = doc.find_all("img")
    if not images:
        return None
    return [
        (img, "Element does not have an alt attribute")
        for img in images
        if not img.has_attr("alt")
        and img.get("role") not in ("presentation", "none")
        and not _is_hidden(img)
    ]


def check_input_image_alt(doc: BeautifulSoup) -> Optional[list[Violation]]:
    inputs = doc.find_all("input", attrs={"type": re.compile("^image$", re.I)})
    if not inputs:
        return None
    return [
        (tag, "Image button has no alt text")
        for tag in inputs
        if not (tag.get("alt") or "").strip() and not (tag.get("aria-label") or "").strip()
    ]


def check_button_name(doc: BeautifulSoup) -> Optional[list[Violation]]:
    buttons = doc.find_all("button") + doc.find_all(attrs={"role": "button"})
    if not buttons:
        return None
    return [
        (btn, "Element does not have inner text that is visible to screen readers")
        for btn in buttons
        if not _has_accessible_name(btn) and not _is_hidden(btn)
    ]


def check_link_name(doc: BeautifulSoup) -> Optional[list[Violation]]:
    links = doc.find_all("a", href=True)
    if not links:
        return None
    return [
        (link, "Element does not have text that is visible to screen readers")
        for link in links
        if not _has_accessible_name(link) and not _is_hidden(link)
    ]


def check_label(doc: BeautifulSoup) -> Optional[list[Violation]]:
    skip_types = {"hidden", "submit", "button", "reset", "image"}
    fields = [
        tag for tag in doc.find_all(["input", "textarea"])
        if (tag.get("type") or "text").lower() not in skip_types
    ]
    if not fields:
        return None
    label_targets = {label.get("for") for label in doc.find_all("label") if label.get("for")}
    violations = []
    for tag in fields:
        if tag.get("id") and tag["id"] in label_targets:
            continue
        if tag.find_parent("label") is not None:
            continue
        if (tag.get("aria-label") or "").strip() or tag.get("aria-labelledby") or (tag.get("title") or "").strip():
            continue
        violations.append((tag, "Form element does not have an implicit or explicit label"))
    return violations


def check_select_name(doc: BeautifulSoup) -> Optional[list[Violation]]:
    selects = doc.find_all("select")
    if not selects:
        return None
    label_targets = {label.get("for") for label in doc.find_all("label") if label.get("for")}
    return [
        (tag, "Select element does not have an accessible name")
        for tag in selects
        if not (tag.get("id") and tag["id"] in label_targets)
        and tag.find_parent("label") is None
        and not (tag.get("aria-label") or "").strip()
        and not tag.get("aria-labelledby")
    ]


def check_html_has_lang(doc: BeautifulSoup) -> Optional[list[Violation]]:
    html = doc.find("html")
    if html is None:
        return [(None, "Document has no <html> element")]
    if not (html.get("lang") or "").strip():
        return [(html, "The <html> element does not have a lang attribute")]
    return []


def check_valid_lang(doc: BeautifulSoup) -> Optional[list[Violation]]:
    tagged = doc.find_all(attrs={"lang": True})
    if not tagged:
        return None
    return [
        (tag, f'Value of lang attribute "{tag["lang"]}" is not a valid language code')
        for tag in tagged
        if tag["lang"].strip() and not LANG_PATTERN.match(tag["lang"].strip())
    ]


def check_document_title(doc: BeautifulSoup) -> Optional[list[Violation]]:
    title = doc.find("title")
    if title is None or not title.get_text(strip=True):
        return [(title, "Document does not have a non-empty <title> element")]
    return []


def check_heading_order(doc: BeautifulSoup) -> Optional[list[Violation]]:
    headings = doc.find_all(re.compile(r"^h[1-6]$"))
    if not headings:
        return None
    violations = []
    previous = 0
    for heading in headings:
        level = int(heading.name[1])
        if previous and level > previous + 1:
            violations.append((heading, f"Heading level jumps from h{previous} to h{level}"))
        previous = level
    return violations


def check_aria_roles(doc: BeautifulSoup) -> Optional[list[Violation]]:
    with_role = doc.find_all(attrs={"role": True})
    if not with_role:
        return None
    violations = []
    for tag in with_role:
        roles = tag["role"].split()
        if roles and not any(role in VALID_ARIA_ROLES for role in roles):
            violations.append((tag, f'Role "{tag["role"]}" is not a valid ARIA role'))
    return violations


def check_meta_viewport(doc: BeautifulSoup) -> Optional[list[Violation]]:
    viewport = doc.find("meta", attrs={"name": "viewport"})
    if viewport is None:
        return None
    content = (viewport.get("content") or "").lower().replace(" ", "")
    if "user-scalable=no" in content or "user-scalable=0" in content:
        return [(viewport, "user-scalable=no on <meta> tag disables zooming")]
    match = re.search(r"maximum-scale=([0-9.]+)", content)
    if match:
        try:
            if float(match.group(1)) < 2:
                return [(viewport, "maximum-scale on <meta> tag disables zooming")]
        except ValueError:
            pass
    return []


def check_tabindex(doc: BeautifulSoup) -> Optional[list[Violation]]:
    tagged = doc.find_all(attrs={"tabindex": True})
    if not tagged:
        return None
    violations = []
    for tag in tagged:
        try:
            if int(tag["tabindex"]) > 0:
                violations.append((tag, "Element has a tabindex greater than 0"))
        except ValueError:
            continue
    return violations


def check_duplicate_id(doc: BeautifulSoup) -> Optional[list[Violation]]:
    tagged = doc.find_all(id=True)
    if not tagged:
        return None
    seen: dict[str, Tag] = {}
    violations = []
    for tag in tagged:
        value = tag["id"]
        if value in seen:
            violations.append((tag, f'Document has multiple elements with id="{value}"'))
        else:
            seen[value] = tag
    return violations


def check_frame_title(doc: BeautifulSoup) -> Optional[list[Violation]]:
    frames = doc.find_all(["iframe", "frame"])
    if not frames:
        return None
    return [
        (frame, "Frame does not have a title attribute")
        for frame in frames
        if not (frame.get("title") or "").strip() and not (frame.get("aria-label") or "").strip()
    ]


def check_list(doc: BeautifulSoup) -> Optional[list[Violation]]:
    lists = doc.find_all(["ul", "ol"])
    if not lists:
        return None
    allowed = {"li", "script", "template"}
    return [
        (lst, "List element has direct children that are not <li>")
        for lst in lists
        if any(child.name not in allowed for child in lst.find_all(True, recursive=False))
    ]


def check_listitem(doc: BeautifulSoup) -> Optional[list[Violation]]:
    items = doc.find_all("li")
    if not items:
        return None
    return [
        (item, "List item is not contained in a <ul>, <ol> or <menu>")
        for item in items
        if item.parent is None or item.parent.name not in ("ul", "ol", "menu")
    ]


def check_marquee(doc: BeautifulSoup) -> Optional[list[Violation]]:
    return [(tag, "<marquee> element is used") for tag in doc.find_all("marquee")]


def check_blink(doc: BeautifulSoup) -> Optional[list[Violation]]:
    return [(tag, "<blink> element is used") for tag in doc.find_all("blink")]


def check_video_caption(doc: BeautifulSoup) -> Optional[list[Violation]]:
    videos = doc.find_all("video")
    if not videos:
        return None
    return [
        (video, "Video element has no captions track")
        for video in videos
        if not video.find("track", attrs={"kind": re.compile("^(captions|subtitles)$", re.I)})
    ]


def check_object_alt(doc: BeautifulSoup) -> Optional[list[Violation]]:
    objects = doc.find_all("object")
    if not objects:
        return None
    return [
        (obj, "Object element does not have a text alternative")
        for obj in objects
        if not _has_accessible_name(obj)
    ]


def check_svg_img_alt(doc: BeautifulSoup) -> Optional[list[Violation]]:
    svgs = doc.find_all("svg", attrs={"role": "img"})
    if not svgs:
        return None
    return [
        (svg, "SVG with role=img has no accessible name")
        for svg in svgs
        if not (svg.get("aria-label") or "").strip()
        and not svg.get("aria-labelledby")
        and not (svg.find("title") and svg.find("title").get_text(strip=True))
    ]


RULES: dict[str, tuple[Rule, str, str, str]] = {
    # rule id: (check, severity, help, fix guidance)
    "image-alt": (check_image_alt, "critical", "Images must have alternate text",
                  "Add descriptive alt text that conveys the image content"),
    "input-image-alt": (check_input_image_alt, "critical", "Image buttons must have alternate text",
                        "Add alt text to image input buttons"),
    "button-name": (check_button_name, "critical", "Buttons must have discernible text",
                    "Add text content or aria-label to the button"),
    "link-name": (check_link_name, "serious", "Links must have discernible text",
                  "Add descriptive text content to the link"),
    "label": (check_label, "critical", "Form elements must have labels",
              "Associate a label with the input using for/id or wrapping"),
    "select-name": (check_select_name, "critical", "Select element must have an accessible name",
                    "Add an accessible name to the select element"),
    "html-has-lang": (check_html_has_lang, "serious", "<html> element must have a lang attribute",
                      "Add a lang attribute to the html element"),
    "valid-lang": (check_valid_lang, "serious", "lang attribute must have a valid value",
                   "Use a valid BCP 47 language code"),
    "document-title": (check_document_title, "serious", "Documents must have <title> element",
                       "Add a descriptive title to the page"),
    "heading-order": (check_heading_order, "moderate", "Heading levels should only increase by one",
                      "Ensure headings follow a logical order without skipping levels"),
    "aria-roles": (check_aria_roles, "critical", "ARIA roles used must conform to valid values",
                   "Use a valid ARIA role value"),
    "meta-viewport": (check_meta_viewport, "critical", "Zooming and scaling must not be disabled",
                      "Allow users to zoom by setting viewport meta tag correctly"),
    "tabindex": (check_tabindex, "serious", "Elements should not have tabindex greater than zero",
                 'Use tabindex="0" or "-1" instead of positive values'),
    "duplicate-id": (check_duplicate_id, "minor", "id attribute value must be unique",
                     "Ensure all id attributes are unique on the page"),
    "frame-title": (check_frame_title, "serious", "Frames must have an accessible name",
                    "Add a title attribute to the iframe"),
    "list": (check_list, "serious", "<ul> and <ol> must only directly contain <li> elements",
             "Ensure lists only contain li elements"),
    "listitem": (check_listitem, "serious", "<li> elements must be contained in a <ul> or <ol>",
                 "Ensure list items are inside ul or ol elements"),
    "marquee": (check_marquee, "serious", "<marquee> elements are deprecated and must not be used",
                "Replace <marquee> with CSS animations"),
    "blink": (check_blink, "serious", "<blink> elements are deprecated and must not be used",
              "Remove <blink> element - it is deprecated and causes accessibility issues"),
    "video-caption": (check_video_caption, "critical", "<video> elements must have captions",
                      "Add captions to video content"),
    "object-alt": (check_object_alt, "serious", "<object> elements must have alternate text",
                   "Provide alternative text for object elements"),
    "svg-img-alt": (check_svg_img_alt, "serious", "<svg> elements with an img role must have an alternative text",
                    'Add accessible name to SVG with role="img"'),
}

CODE_FIXES: dict[str, str] = {
    "image-alt": '<img src="image.jpg" alt="[Describe what the image shows]">',
    "button-name": '<button aria-label="[purpose]">Button text</button>',
    "link-name": '<a href="#target">Link text</a>',
    "label": '<label for="input-id">Label text</label>\n<input id="input-id" type="text">',
    "document-title": "<title>Page Title - Site Name</title>",
    "html-has-lang": '<html lang="en">',
    "heading-order": (
        "<!-- Follow order: h1 -> h2 -> h3 -->\n"
        "<h1>Main heading</h1>\n<h2>Subheading</h2>\n<h3>Sub-subheading</h3>"
    ),
    "video-caption": (
        "<video controls>\n"
        '  <source src="video.mp4" type="video/mp4">\n'
        '  <track kind="captions" src="captions.vtt" srclang="en">\n'
        "</video>"
    ),
    "meta-viewport": '<meta name="viewport" content="width=device-width, initial-scale=1">',
}


def code_fix(rule_id: str, html: str) -> str:
    if rule_id in CODE_FIXES:
        return CODE_FIXES[rule_id]
    return f"<!-- Fix the {rule_id} issue in the element: -->\n{html or '<element>'}"


class AccessibilityAudit(RuleModule):
    """WCAG checks covering images, forms, ARIA, structure and document metadata."""

    audit_type = "accessibility"
    id_prefix = "a11y"
    info = AuditInfo(
        name="Accessibility",
        description=(
            "Checks WCAG 2.1 compliance covering images, interactive elements, forms, "
            "ARIA, and document structure"
        ),
        category="Compliance",
    )

    async def audit(self, ctx: AuditContext) -> AuditResult:
        doc = ctx.page.document
        issues = []
        passes = []

        for rule_id, (check, severity, help_text, fix_text) in RULES.items():
            violations = check(doc)
            category = RULE_TO_CATEGORY.get(rule_id, "technical")
            help_url = DEQUE_RULE_URL.format(rule=rule_id)

            if violations is None:
                continue
            if not violations:
                passes.append(passed(f"pass-{rule_id}", help_text, category, WCAG_MAPPINGS[rule_id].description))
                continue

            wcag = WCAG_MAPPINGS.get(rule_id) or WcagReference(
                id="Unknown", level="A", name=rule_id, description=help_text
            )
            for tag, summary in violations:
                element = element_ref(tag, summary)
                issues.append(self.issue(
                    ctx,
                    rule_id=rule_id,
                    severity=severity,
                    category=category,
                    message=help_text,
                    description=wcag.description,
                    help_url=help_url,
                    wcag=wcag,
                    element=element,
                    fix_description=fix_text,
                    fix_code=code_fix(rule_id, element.html),
                ))

        logger.debug(
            f"Accessibility audit: {len(issues)} violation(s), {len(passes)} passed rule(s)"
        )
        return AuditResult(issues=issues, passed=passes)
