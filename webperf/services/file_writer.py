"""
Report persistence.
"""
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from webperf.exceptions import ReportError
from webperf.logger import logger
from webperf.schemas.audit_result import AuditReport

UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")

EXTENSIONS = {"html": "html", "json": "json"}


def generate_filename(url: str, ext: str, now: Optional[datetime] = None) -> str:
    """`<host>-<path>_<timestamp>.<ext>` with unsafe characters replaced by '-'."""
    parsed = urlparse(url)
    hostname = UNSAFE_CHARS.sub("-", parsed.hostname or "")
    pathname = UNSAFE_CHARS.sub("-", parsed.path or "")

    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"

    filename = hostname
    if pathname and pathname != "-":
        filename += pathname
    return f"{filename}_{stamp}.{ext}"


def save_report(report: AuditReport, content: str, output_dir: str, fmt: str) -> Path:
    """Write rendered report content and return the file path."""
    ext = EXTENSIONS.get(fmt, "json")
    path = Path(output_dir) / generate_filename(report.url, ext)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Could not write report to {path}: {e}") from e

    logger.info(f"Report saved: {path}")
    return path
