"""
Rule module contract and shared helpers.

A rule module inspects a loaded page and returns an AuditResult. Modules must
report recoverable conditions as issues; anything they raise is treated by the
orchestrator as a failure of that module alone.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional

from bs4 import Tag

from webperf.schemas.audit_result import (
    AuditInfo,
    AuditResult,
    ElementRef,
    FixGuidance,
    Issue,
    PendingCheck,
    WcagReference,
)
from webperf.services.id_generator import IssueIdGenerator
from webperf.services.page_loader import Page

# Cap for element markup excerpts
HTML_EXCERPT_LIMIT = 200


@dataclass(frozen=True)
class AuditContext:
    """What a rule module receives: the shared page and the run's id generator."""
    page: Page
    ids: IssueIdGenerator


class RuleModule:
    """Base class for rule modules.

    Subclasses set `audit_type`, `id_prefix` and `info`, and implement `audit`.
    """

    audit_type: ClassVar[str] = ""
    id_prefix: ClassVar[str] = ""
    info: ClassVar[AuditInfo]

    async def audit(self, ctx: AuditContext) -> AuditResult:
        raise NotImplementedError

    def issue(
        self,
        ctx: AuditContext,
        rule_id: str,
        severity: str,
        category: str,
        message: str,
        description: str,
        help_url: str,
        wcag: WcagReference,
        element: Optional[ElementRef] = None,
        fix_description: str = "",
        fix_code: str = "",
        learn_more_url: str = "",
    ) -> Issue:
        """Build an Issue with an id from the run's generator."""
        return Issue(
            id=ctx.ids.next_id(self.id_prefix),
            rule_id=rule_id,
            severity=severity,
            category=category,
            message=message,
            description=description,
            help_url=help_url,
            wcag=wcag,
            element=element or ElementRef(),
            fix=FixGuidance(
                description=fix_description,
                code=fix_code,
                learn_more_url=learn_more_url or help_url,
            ),
        )


def passed(check_id: str, name: str, category: str, description: str = "") -> PendingCheck:
    return PendingCheck(id=check_id, name=name, category=category, description=description)


def excerpt(tag: Optional[Tag]) -> str:
    """Outer markup of a tag, capped."""
    if tag is None:
        return ""
    return str(tag)[:HTML_EXCERPT_LIMIT]


def build_selector(tag: Tag) -> str:
    """CSS-like path from the root to a tag (`html > body > div#main > img`)."""
    path = []
    current = tag
    while current is not None and isinstance(current, Tag) and current.name != "[document]":
        selector = current.name
        if current.get("id"):
            selector += f"#{current['id']}"
        else:
            classes = current.get("class") or []
            if classes:
                selector += "." + ".".join(classes[:2])
        path.insert(0, selector)
        current = current.parent
    return " > ".join(path)


def element_ref(tag: Optional[Tag], failure_summary: str, selector: Optional[str] = None) -> ElementRef:
    """ElementRef for a tag, or a page-level reference when there is none."""
    if tag is None:
        return ElementRef(selector=selector or "html", html="", failure_summary=failure_summary)
    return ElementRef(
        selector=selector or build_selector(tag),
        html=excerpt(tag),
        failure_summary=failure_summary,
    )


def text_of(tag: Tag) -> str:
    return tag.get_text(" ", strip=True)
