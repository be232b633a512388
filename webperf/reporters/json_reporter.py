"""JSON reporter."""

from webperf.schemas.audit_result import AuditReport


def render_json(report: AuditReport) -> str:
    """Pretty-printed JSON with camelCase keys."""
    return report.model_dump_json(by_alias=True, indent=2)
