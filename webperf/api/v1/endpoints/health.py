"""
Health and capability endpoints.
"""

from fastapi import APIRouter

from webperf import __version__
from webperf.services.orchestrator import get_audit_info, get_available_audits

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "ok", "version": __version__}


@router.get("/audits")
async def list_audits():
    """Available audit types with their metadata, in dispatch order."""
    return [
        {"type": audit_type, **get_audit_info(audit_type).model_dump()}
        for audit_type in get_available_audits()
    ]
