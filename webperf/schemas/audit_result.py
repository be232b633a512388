"""
Pydantic schemas for audit results.

Attribute names are snake_case; JSON output uses camelCase aliases so reports
keep the shape consumers of the JSON format expect.
"""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


Severity = Literal["critical", "serious", "moderate", "minor"]
WcagLevel = Literal["A", "AA", "AAA"]

# Precedence order, worst first
SEVERITIES: tuple[str, ...] = ("critical", "serious", "moderate", "minor")

CATEGORIES: tuple[str, ...] = (
    "images",
    "interactive",
    "forms",
    "color",
    "document",
    "structure",
    "aria",
    "technical",
)


class ReportModel(BaseModel):
    """Base for all report value objects: immutable, camelCase on the wire."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class WcagReference(ReportModel):
    """Guideline cross-reference."""
    id: str
    level: WcagLevel = "A"
    name: str = ""
    description: str = ""


class ElementRef(ReportModel):
    """Offending DOM location."""
    selector: str = ""
    html: str = ""
    failure_summary: str = ""


class FixGuidance(ReportModel):
    """Remediation guidance."""
    description: str = ""
    code: str = ""
    learn_more_url: str = ""


class Issue(ReportModel):
    """One detected problem instance."""
    id: str
    rule_id: str
    severity: Severity
    # Not restricted to CATEGORIES: modules may introduce their own
    category: str
    message: str
    description: str = ""
    help_url: str = ""
    wcag: WcagReference
    element: ElementRef = Field(default_factory=ElementRef)
    fix: FixGuidance = Field(default_factory=FixGuidance)


class PendingCheck(ReportModel):
    """A check that ran and found no problem."""
    id: str
    name: str
    category: str
    description: str = ""


class Summary(ReportModel):
    """Counts derived from an issue list."""
    total: int
    by_severity: dict[str, int]
    by_category: dict[str, int]
    passed: int = 0


class AuditReport(ReportModel):
    """Canonical aggregate produced by one orchestration run."""
    url: str
    # Epoch milliseconds of the orchestration start
    timestamp: int
    # Milliseconds from start to formatting
    duration: int
    issues: list[Issue] = Field(default_factory=list)
    passed: list[PendingCheck] = Field(default_factory=list)
    incomplete: list[Issue] = Field(default_factory=list)
    summary: Summary

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://example.com",
                "timestamp": 1704110400000,
                "duration": 1840,
                "issues": [],
                "passed": [],
                "incomplete": [],
                "summary": {
                    "total": 0,
                    "bySeverity": {"critical": 0, "serious": 0, "moderate": 0, "minor": 0},
                    "byCategory": {c: 0 for c in CATEGORIES},
                    "passed": 0
                }
            }
        }
    )


class AuditResult(ReportModel):
    """Output of a single rule module."""
    issues: list[Issue] = Field(default_factory=list)
    passed: list[PendingCheck] = Field(default_factory=list)


class AuditInfo(ReportModel):
    """Static metadata describing an audit type."""
    name: str
    description: str
    category: str


class ThresholdConfig(ReportModel):
    """Inclusive per-severity ceilings; a missing key means no limit."""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        strict=True,
    )

    critical: Optional[int] = Field(default=None, ge=0)
    serious: Optional[int] = Field(default=None, ge=0)
    moderate: Optional[int] = Field(default=None, ge=0)
    minor: Optional[int] = Field(default=None, ge=0)


class ThresholdViolation(ReportModel):
    """A severity whose count exceeded its ceiling."""
    severity: Severity
    count: int
    threshold: int
    exceeded: int


class ThresholdResult(ReportModel):
    """Pass/fail outcome of a threshold check."""
    passed: bool
    violations: list[ThresholdViolation] = Field(default_factory=list)
