"""
Audit API endpoints.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import HTMLResponse

from webperf.exceptions import UnknownAuditError, WebPerfError
from webperf.logger import logger
from webperf.reporters import render_report
from webperf.schemas.audit_request import AuditRequest, AuditResponse
from webperf.schemas.audit_result import AuditReport, ThresholdConfig
from webperf.services.orchestrator import AuditOptions, AuditOrchestrator
from webperf.services.threshold_checker import check_thresholds

router = APIRouter(tags=["Audit"])


@dataclass
class AuditJob:
    job_id: str
    url: str
    status: str = "pending"
    threshold: Optional[ThresholdConfig] = None
    report: Optional[AuditReport] = None
    error: Optional[str] = None


# In-memory job storage
_audits: Dict[str, AuditJob] = {}


def get_orchestrator() -> AuditOrchestrator:
    return AuditOrchestrator()


@router.post("", response_model=AuditResponse)
async def start_audit(
    request: AuditRequest,
    background_tasks: BackgroundTasks,
    orchestrator: AuditOrchestrator = Depends(get_orchestrator),
):
    """Start a new audit job."""
    try:
        orchestrator.registry.validate(request.skip_audits)
    except UnknownAuditError as e:
        raise HTTPException(status_code=422, detail=str(e))

    job_id = str(uuid.uuid4())
    url = str(request.url)
    _audits[job_id] = AuditJob(job_id=job_id, url=url, threshold=request.threshold)

    options = AuditOptions(skip_audits=request.skip_audits, allow_js=request.allow_js)
    background_tasks.add_task(_run_audit, orchestrator, job_id, url, options)

    logger.info(f"Started audit {job_id} for {url}")
    return AuditResponse(job_id=job_id, status="pending", url=url)


async def _run_audit(orchestrator: AuditOrchestrator, job_id: str, url: str, options: AuditOptions):
    """Background task to run the audit."""
    job = _audits[job_id]
    job.status = "running"
    try:
        job.report = await orchestrator.run_audits(url, options)
        job.status = "completed"
        logger.info(f"Completed audit {job_id}")
    except WebPerfError as e:
        logger.error(f"Audit {job_id} failed: {e}")
        job.status = "failed"
        job.error = str(e)
    except Exception as e:
        logger.exception(f"Audit {job_id} failed unexpectedly: {e}")
        job.status = "failed"
        job.error = str(e) or e.__class__.__name__


def _get_job(job_id: str) -> AuditJob:
    if job_id not in _audits:
        raise HTTPException(status_code=404, detail="Audit not found")
    return _audits[job_id]


@router.get("/{job_id}")
async def get_audit(job_id: str):
    """Get audit status and results."""
    job = _get_job(job_id)

    response: Dict[str, Any] = {
        "job_id": job_id,
        "status": job.status,
        "url": job.url,
    }

    if job.status == "completed" and job.report is not None:
        response["report"] = job.report.model_dump(by_alias=True)
        response["threshold"] = check_thresholds(job.report, job.threshold).model_dump()

    if job.status == "failed":
        response["error"] = job.error

    return response


@router.get("/{job_id}/html", response_class=HTMLResponse)
async def get_audit_html(job_id: str):
    """Get audit report as an HTML dashboard."""
    job = _get_job(job_id)
    if job.status != "completed" or job.report is None:
        raise HTTPException(status_code=400, detail="Audit not completed yet")

    return HTMLResponse(content=render_report(job.report, "html", job.threshold))
