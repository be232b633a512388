"""
Pydantic schemas for audit requests.
"""

from typing import Optional
from pydantic import BaseModel, Field, HttpUrl

from webperf.schemas.audit_result import ThresholdConfig


class AuditRequest(BaseModel):
    """Request to start an audit."""
    url: HttpUrl = Field(..., description="URL to audit")
    skip_audits: list[str] = Field(default_factory=list, description="Audit types to skip")
    allow_js: bool = Field(False, description="Forwarded to the page loader")
    threshold: Optional[ThresholdConfig] = Field(None, description="Per-severity ceilings")

    model_config = {
        "json_schema_extra": {
            "example": {
                "url": "https://example.com",
                "skip_audits": ["pwa"],
                "allow_js": False,
                "threshold": {"critical": 0, "serious": 5}
            }
        }
    }


class AuditResponse(BaseModel):
    """Response for a started audit job."""
    job_id: str
    status: str
    url: str
