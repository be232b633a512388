"""
Errors that abort an audit run.

Rule module failures are not represented here: the orchestrator contains them
and reports them as incomplete issues instead.
"""


class WebPerfError(Exception):
    """Base class for all webperf errors."""


class PageLoadError(WebPerfError):
    """The page could not be fetched (network error, non-2xx, timeout, oversize)."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to load page {url}: {reason}")


class AuditTimeoutError(WebPerfError):
    """The batch of rule modules did not settle before the audit deadline."""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Audit timed out after {timeout_ms}ms")


class UnknownAuditError(WebPerfError, ValueError):
    """An audit type name is not registered."""

    def __init__(self, audit_type: str, available: list[str]):
        self.audit_type = audit_type
        self.available = available
        super().__init__(
            f'Unknown audit type "{audit_type}". Must be one of: {", ".join(available)}'
        )


class ThresholdError(WebPerfError, ValueError):
    """Threshold configuration could not be parsed."""


class ReportError(WebPerfError):
    """A report could not be rendered or written."""
