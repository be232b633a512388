"""
DOM Collector - Gather the elements rule modules query, in one traversal.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup, Tag


@dataclass
class PageElements:
    """Elements extracted from a parsed document."""
    # Scripts
    scripts: List[Tag] = field(default_factory=list)
    scripts_with_src: List[Tag] = field(default_factory=list)
    inline_scripts: List[Tag] = field(default_factory=list)
    head_scripts: List[Tag] = field(default_factory=list)

    # Styles
    stylesheets: List[Tag] = field(default_factory=list)
    head_stylesheets: List[Tag] = field(default_factory=list)
    font_links: List[Tag] = field(default_factory=list)
    font_preloads: List[Tag] = field(default_factory=list)
    google_fonts_links: List[Tag] = field(default_factory=list)
    google_fonts_preconnect: Optional[Tag] = None

    # Content
    images: List[Tag] = field(default_factory=list)
    links: List[Tag] = field(default_factory=list)
    iframes: List[Tag] = field(default_factory=list)
    password_fields: List[Tag] = field(default_factory=list)

    # Meta tags
    meta_charset: Optional[Tag] = None
    meta_http_equiv_content_type: Optional[Tag] = None
    meta_refresh: Optional[Tag] = None
    meta_viewport: Optional[Tag] = None

    # Deprecated elements
    deprecated: dict[str, List[Tag]] = field(default_factory=dict)

    # Elements carrying an id attribute
    elements_with_id: List[Tag] = field(default_factory=list)


DEPRECATED_TAGS = ("marquee", "blink", "font", "center")


class DomCollector:
    """Collects element groups from a document."""

    def collect(self, document: BeautifulSoup) -> PageElements:
        data = PageElements(deprecated={tag: [] for tag in DEPRECATED_TAGS})
        head = document.find("head")

        for element in document.find_all(True):
            name = element.name

            if element.get("id"):
                data.elements_with_id.append(element)

            if name == "script":
                data.scripts.append(element)
                if element.get("src"):
                    data.scripts_with_src.append(element)
                else:
                    data.inline_scripts.append(element)
                if head is not None and _is_inside(element, head):
                    data.head_scripts.append(element)

            elif name == "link":
                rel = [r.lower() for r in (element.get("rel") or [])]
                href = element.get("href", "")
                if "stylesheet" in rel:
                    data.stylesheets.append(element)
                    if head is not None and _is_inside(element, head):
                        data.head_stylesheets.append(element)
                    if "fonts.googleapis.com" in href:
                        data.google_fonts_links.append(element)
                    elif _looks_like_font(href):
                        data.font_links.append(element)
                if "preload" in rel and element.get("as") == "font":
                    data.font_preloads.append(element)
                if "preconnect" in rel and ("fonts.gstatic.com" in href or "fonts.googleapis.com" in href):
                    data.google_fonts_preconnect = element

            elif name == "img":
                data.images.append(element)

            elif name == "a":
                data.links.append(element)

            elif name == "iframe":
                data.iframes.append(element)

            elif name == "input":
                if (element.get("type") or "").lower() == "password":
                    data.password_fields.append(element)

            elif name == "meta":
                if element.get("charset") is not None:
                    data.meta_charset = element
                http_equiv = (element.get("http-equiv") or "").lower()
                if http_equiv == "content-type":
                    data.meta_http_equiv_content_type = element
                elif http_equiv == "refresh":
                    data.meta_refresh = element
                if (element.get("name") or "").lower() == "viewport":
                    data.meta_viewport = element

            elif name in data.deprecated:
                data.deprecated[name].append(element)

        return data


def _is_inside(element: Tag, ancestor: Tag) -> bool:
    return any(parent is ancestor for parent in element.parents)


def _looks_like_font(href: str) -> bool:
    lower = href.lower()
    return "font" in lower or lower.endswith((".woff", ".woff2", ".ttf", ".otf"))
