"""
WCAG cross-references and category mapping for accessibility rules.
"""

from webperf.schemas.audit_result import WcagReference


def _wcag(id: str, level: str, name: str, description: str) -> WcagReference:
    return WcagReference(id=id, level=level, name=name, description=description)


WCAG_MAPPINGS: dict[str, WcagReference] = {
    "image-alt": _wcag("1.1.1", "A", "Non-text Content", "All non-text content has a text alternative"),
    "input-image-alt": _wcag("1.1.1", "A", "Non-text Content", "Image buttons have a text alternative"),
    "object-alt": _wcag("1.1.1", "A", "Non-text Content", "Embedded objects have a text alternative"),
    "svg-img-alt": _wcag("1.1.1", "A", "Non-text Content", "SVG images have an accessible name"),
    "video-caption": _wcag("1.2.2", "A", "Captions (Prerecorded)", "Captions are provided for video"),
    "heading-order": _wcag("1.3.1", "A", "Info and Relationships", "Headings convey the page structure"),
    "list": _wcag("1.3.1", "A", "Info and Relationships", "Lists are marked up correctly"),
    "listitem": _wcag("1.3.1", "A", "Info and Relationships", "List items are inside lists"),
    "label": _wcag("1.3.1", "A", "Info and Relationships", "Form inputs have labels"),
    "meta-viewport": _wcag("1.4.4", "AA", "Resize Text", "Text can be resized up to 200 percent"),
    "tabindex": _wcag("2.4.3", "A", "Focus Order", "Focus order preserves meaning"),
    "document-title": _wcag("2.4.2", "A", "Page Titled", "Pages have descriptive titles"),
    "link-name": _wcag("2.4.4", "A", "Link Purpose (In Context)", "Link purpose can be determined"),
    "frame-title": _wcag("4.1.2", "A", "Name, Role, Value", "Frames have an accessible name"),
    "html-has-lang": _wcag("3.1.1", "A", "Language of Page", "The default language of the page is set"),
    "valid-lang": _wcag("3.1.2", "AA", "Language of Parts", "Language codes are valid"),
    "duplicate-id": _wcag("4.1.1", "A", "Parsing", "Element ids are unique"),
    "aria-roles": _wcag("4.1.2", "A", "Name, Role, Value", "ARIA roles are valid"),
    "button-name": _wcag("4.1.2", "A", "Name, Role, Value", "Buttons have an accessible name"),
    "select-name": _wcag("4.1.2", "A", "Name, Role, Value", "Select elements have an accessible name"),
    "marquee": _wcag("2.2.2", "A", "Pause, Stop, Hide", "Moving content can be paused"),
    "blink": _wcag("2.2.2", "A", "Pause, Stop, Hide", "Blinking content can be stopped"),
}

RULE_TO_CATEGORY: dict[str, str] = {
    "image-alt": "images",
    "input-image-alt": "forms",
    "object-alt": "images",
    "svg-img-alt": "images",
    "video-caption": "images",
    "button-name": "interactive",
    "link-name": "interactive",
    "label": "forms",
    "select-name": "forms",
    "html-has-lang": "document",
    "valid-lang": "document",
    "document-title": "document",
    "meta-viewport": "document",
    "frame-title": "document",
    "heading-order": "structure",
    "list": "structure",
    "listitem": "structure",
    "aria-roles": "aria",
    "tabindex": "technical",
    "duplicate-id": "technical",
    "marquee": "technical",
    "blink": "technical",
}

# Reference used by non-accessibility checks that have no WCAG criterion
NOT_APPLICABLE = _wcag("N/A", "A", "Best Practice", "Not a WCAG requirement")

DEQUE_RULE_URL = "https://dequeuniversity.com/rules/axe/4.8/{rule}"

# ARIA 1.2 role names
VALID_ARIA_ROLES = frozenset({
    "alert", "alertdialog", "application", "article", "banner", "blockquote",
    "button", "caption", "cell", "checkbox", "code", "columnheader", "combobox",
    "complementary", "contentinfo", "definition", "deletion", "dialog",
    "directory", "document", "emphasis", "feed", "figure", "form", "generic",
    "grid", "gridcell", "group", "heading", "img", "insertion", "link", "list",
    "listbox", "listitem", "log", "main", "marquee", "math", "menu", "menubar",
    "menuitem", "menuitemcheckbox", "menuitemradio", "meter", "navigation",
    "none", "note", "option", "paragraph", "presentation", "progressbar",
    "radio", "radiogroup", "region", "row", "rowgroup", "rowheader",
    "scrollbar", "search", "searchbox", "separator", "slider", "spinbutton",
    "status", "strong", "subscript", "superscript", "switch", "tab", "table",
    "tablist", "tabpanel", "term", "textbox", "time", "timer", "toolbar",
    "tooltip", "tree", "treegrid", "treeitem",
})
