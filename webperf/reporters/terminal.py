"""Terminal reporter - renders a report with Rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from webperf.schemas.audit_result import AuditReport, ThresholdResult
from webperf.services.formatter import calculate_pass_rate, get_top_issues
from webperf.services.threshold_checker import format_threshold_violations

SEVERITY_COLORS = {
    "critical": "red",
    "serious": "yellow",
    "moderate": "magenta",
    "minor": "cyan",
}

TOP_ISSUE_COUNT = 10
PASSED_SHOWN = 10


def render_terminal(
    report: AuditReport,
    threshold_result: ThresholdResult | None = None,
    console: Console | None = None,
) -> None:
    """Print the report to `console` (stdout by default)."""
    console = console or Console()
    summary = report.summary

    checks_run = len(report.passed) + summary.total
    header = (
        f"[bold]URL:[/bold] [cyan]{escape(report.url)}[/cyan]\n"
        f"[bold]Duration:[/bold] {report.duration}ms   "
        f"[bold]Total Issues:[/bold] {summary.total}   "
        f"[bold]Passed:[/bold] {summary.passed} "
        f"({calculate_pass_rate(summary.passed, checks_run)}%)"
    )
    console.print(Panel(header, title="webperf Audit Report", border_style="blue"))

    console.print(_counts_table(summary.by_severity, summary.by_category))

    if report.issues:
        console.print("\n[bold]Top Issues[/bold]")
        for issue in get_top_issues(report.issues, TOP_ISSUE_COUNT):
            color = SEVERITY_COLORS.get(issue.severity, "white")
            console.print(
                f"[{color}]\\[{issue.severity.upper()}][/{color}] "
                f"{escape(issue.message)} [dim]({escape(issue.category)})[/dim]"
            )
            if issue.description:
                console.print(f"    [dim]{escape(issue.description)}[/dim]")
            if issue.wcag and issue.wcag.id != "N/A":
                console.print(
                    f"    [cyan]WCAG:[/cyan] {issue.wcag.id} (Level {issue.wcag.level}) - "
                    f"{escape(issue.wcag.name)}"
                )
            if issue.fix.description:
                console.print(f"    [green]Fix:[/green] {escape(issue.fix.description)}")
        if len(report.issues) > TOP_ISSUE_COUNT:
            console.print(f"[dim]... and {len(report.issues) - TOP_ISSUE_COUNT} more[/dim]")
    else:
        console.print("\n[green]No issues found![/green]")

    if report.incomplete:
        console.print("\n[bold yellow]Incomplete Audits[/bold yellow]")
        for issue in report.incomplete:
            console.print(f"  [yellow]{escape(issue.message)}[/yellow]: {escape(issue.element.failure_summary)}")

    if report.passed:
        console.print("\n[bold]Passed Checks[/bold]")
        for check in report.passed[:PASSED_SHOWN]:
            console.print(f"  [green]{escape(check.name)}[/green] [dim]({escape(check.category)})[/dim]")
        if len(report.passed) > PASSED_SHOWN:
            console.print(f"  [dim]... and {len(report.passed) - PASSED_SHOWN} more[/dim]")

    if threshold_result is not None:
        message = format_threshold_violations(threshold_result)
        if message:
            console.print(f"\n[red]{escape(message)}[/red]")
        else:
            console.print("\n[green]All thresholds passed.[/green]")
    elif summary.total == 0:
        console.print("\n[green]All checks passed![/green]")


def _counts_table(by_severity: dict[str, int], by_category: dict[str, int]) -> Table:
    table = Table(title="Summary", show_header=True, header_style="bold")
    table.add_column("Severity", width=10)
    table.add_column("Count", justify="right")
    table.add_column("Category", width=12)
    table.add_column("Count", justify="right")

    severities = list(by_severity.items())
    categories = list(by_category.items())
    for i in range(max(len(severities), len(categories))):
        sev_cell, sev_count = "", ""
        if i < len(severities):
            name, count = severities[i]
            color = SEVERITY_COLORS.get(name, "white")
            sev_cell, sev_count = f"[{color}]{name}[/{color}]", str(count)
        cat_cell, cat_count = "", ""
        if i < len(categories):
            cat_cell, cat_count = categories[i][0], str(categories[i][1])
        table.add_row(sev_cell, sev_count, cat_cell, cat_count)
    return table
