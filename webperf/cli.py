"""CLI entry point: webperf --url <url>."""

from __future__ import annotations

import asyncio
import logging
import sys
from urllib.parse import urlparse

import click
from rich.console import Console
from rich.markup import escape

from webperf import __version__
from webperf.config import settings
from webperf.exceptions import ReportError, ThresholdError, WebPerfError
from webperf.logger import set_level
from webperf.reporters import render_report
from webperf.schemas.audit_result import AuditReport, ThresholdConfig
from webperf.services.file_writer import save_report
from webperf.services.orchestrator import AuditOptions, get_available_audits, run_audits
from webperf.services.threshold_checker import (
    check_thresholds,
    format_threshold_violations,
    parse_threshold,
)

FORMATS = ("terminal", "json", "html", "all")

EPILOG = """\b
Examples:
  webperf --url https://example.com
  webperf --url https://example.com --format all --output-dir ./reports
  webperf --url https://example.com --threshold '{"critical":0,"serious":10}'
  webperf --url https://example.com --skip-audits accessibility,pwa

\b
Threshold:
  Maximum allowed issues per severity; the command exits 1 when exceeded.
  Format: {"critical":0,"serious":5,"moderate":10,"minor":20}
"""


class InputError(Exception):
    """Invalid command-line input."""


def validate_url(url: str) -> str:
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InputError(f'Invalid URL "{url}": {e}') from e
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputError(f'Invalid URL "{url}"')
    return url


def validate_format(fmt: str) -> list[str]:
    """Format name -> list of formats to produce."""
    if fmt not in FORMATS:
        raise InputError(f'Invalid format "{fmt}". Must be one of: {", ".join(FORMATS)}')
    return ["terminal", "json", "html"] if fmt == "all" else [fmt]


def parse_skip_audits(value: str | None) -> list[str]:
    if not value:
        return []
    names = [name.strip() for name in value.split(",") if name.strip()]
    available = get_available_audits()
    for name in names:
        if name not in available:
            raise InputError(f'Invalid audit name "{name}". Must be one of: {", ".join(available)}')
    return names


@click.command(epilog=EPILOG)
@click.version_option(version=__version__, prog_name="webperf")
@click.option("--url", "-u", required=True, help="URL to audit.")
@click.option(
    "--format", "-f", "fmt",
    default="terminal",
    show_default=True,
    help="Output format: terminal, json, html or all.",
)
@click.option(
    "--output-dir", "-o",
    default=settings.OUTPUT_DIR,
    show_default=True,
    help="Directory for JSON and HTML reports.",
)
@click.option("--threshold", "-t", default=None, help="Per-severity ceilings as JSON.")
@click.option("--skip-audits", "-s", default=None, help="Comma-separated audits to skip.")
@click.option("--allow-js", is_flag=True, help="Request script execution during page load.")
@click.option(
    "--audit-timeout",
    type=int,
    default=settings.AUDIT_TIMEOUT_MS,
    show_default=True,
    help="Deadline for all audits, in milliseconds.",
)
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(
    url: str,
    fmt: str,
    output_dir: str,
    threshold: str | None,
    skip_audits: str | None,
    allow_js: bool,
    audit_timeout: int,
    no_color: bool,
    verbose: bool,
) -> None:
    """Audit a web page for accessibility, performance, SEO, security,
    best practices and PWA readiness."""
    console = Console(no_color=no_color, highlight=False)
    err = Console(stderr=True, no_color=no_color, highlight=False)

    set_level(logging.DEBUG if verbose else logging.WARNING)

    try:
        validate_url(url)
        formats = validate_format(fmt)
        threshold_config = parse_threshold(threshold) if threshold else None
        skip = parse_skip_audits(skip_audits)
    except (InputError, ThresholdError) as e:
        err.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    err.print("[bold blue]Starting webperf audit[/bold blue]")
    err.print(f"[dim]URL: {escape(url)}[/dim]")
    err.print(f"[dim]Format: {fmt}[/dim]")
    err.print(f"[dim]Allow JS: {'Yes' if allow_js else 'No'}[/dim]")
    if skip:
        err.print(f"[dim]Skipping: {', '.join(skip)}[/dim]")
    if threshold_config is not None:
        err.print(f"[dim]Threshold: {threshold_config.model_dump_json(exclude_none=True)}[/dim]")

    options = AuditOptions(skip_audits=skip, audit_timeout=audit_timeout, allow_js=allow_js)
    try:
        report = asyncio.run(run_audits(url, options))
    except WebPerfError as e:
        err.print(f"[red]Failed to run audits:[/red] {escape(str(e))}")
        sys.exit(1)
    err.print("[green]Audits completed[/green]\n")

    try:
        _generate_reports(report, formats, output_dir, threshold_config, console, err)
    except ReportError as e:
        err.print(f"[red]Failed to generate reports:[/red] {escape(str(e))}")
        sys.exit(1)

    _print_summary(report, err)

    result = check_thresholds(report, threshold_config)
    if not result.passed:
        err.print(f"\n[red]{format_threshold_violations(result)}[/red]")
        err.print("[red]Build failed due to threshold violations[/red]")
        sys.exit(1)

    if threshold_config is not None:
        err.print("\n[green]All threshold checks passed[/green]")
    err.print("[green]Audit completed successfully[/green]")


def _generate_reports(
    report: AuditReport,
    formats: list[str],
    output_dir: str,
    threshold: ThresholdConfig | None,
    console: Console,
    err: Console,
) -> None:
    for fmt in formats:
        if fmt == "terminal":
            render_report(report, "terminal", threshold, console=console)
            continue
        content = render_report(report, fmt, threshold)
        path = save_report(report, content, output_dir, fmt)
        err.print(f"[green]{fmt.upper()} report saved:[/green] {path}")


def _print_summary(report: AuditReport, err: Console) -> None:
    summary = report.summary
    err.print("\n[bold]Summary:[/bold]")
    err.print(f"  Total issues: [yellow]{summary.total}[/yellow]")
    err.print(f"  Critical: [red]{summary.by_severity['critical']}[/red]")
    err.print(f"  Serious: [yellow]{summary.by_severity['serious']}[/yellow]")
    err.print(f"  Moderate: [blue]{summary.by_severity['moderate']}[/blue]")
    err.print(f"  Minor: [dim]{summary.by_severity['minor']}[/dim]")
    err.print(f"  Passed checks: [green]{summary.passed}[/green]")
    if report.incomplete:
        err.print(f"  Incomplete audits: [yellow]{len(report.incomplete)}[/yellow]")
    err.print(f"  Duration: [dim]{report.duration / 1000:.2f}s[/dim]")
