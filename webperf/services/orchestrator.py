"""
Audit Orchestrator - Runs rule modules against a loaded page.

Flow:
1. Validate the requested audit types
2. Load the page once
3. Run every selected rule module concurrently on the shared page
4. Contain per-module failures as incomplete issues
5. Bound the whole batch by the audit deadline
6. Merge in dispatch order and format the report
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from webperf.config import settings
from webperf.exceptions import AuditTimeoutError
from webperf.logger import logger
from webperf.schemas.audit_result import (
    AuditInfo,
    AuditReport,
    ElementRef,
    FixGuidance,
    Issue,
    PendingCheck,
    WcagReference,
)
from webperf.services.audits import AuditContext, AuditRegistry, RuleModule, default_registry
from webperf.services.formatter import format_results, merge_audit_results
from webperf.services.id_generator import IssueIdGenerator
from webperf.services.page_loader import PageLoader

AUDIT_ERROR_WCAG = WcagReference(
    id="N/A", level="A", name="Audit Error", description="Audit could not complete"
)


@dataclass
class AuditOptions:
    """Options for one audit run."""
    skip_audits: Sequence[str] = ()
    # Page load timeout in milliseconds
    timeout: Optional[int] = None
    max_size: Optional[int] = None
    # Deadline for the whole batch of rule modules, in milliseconds
    audit_timeout: int = field(default_factory=lambda: settings.AUDIT_TIMEOUT_MS)
    allow_js: bool = False


@dataclass
class ModuleOutcome:
    """Tagged result of one module invocation."""
    audit_type: str
    issues: list[Issue] = field(default_factory=list)
    passed: list[PendingCheck] = field(default_factory=list)
    error: Optional[str] = None


def _wall_ms() -> int:
    return int(time.time() * 1000)


def _elapsed_ms(started: float) -> int:
    """Milliseconds since a `time.monotonic()` reading."""
    return int((time.monotonic() - started) * 1000)


def audit_error_issue(audit_type: str, error: str) -> Issue:
    """Incomplete entry for a module that failed."""
    return Issue(
        id=f"audit-error-{audit_type}",
        rule_id="audit-error",
        severity="serious",
        category="technical",
        message=f"{audit_type} audit failed",
        description=f"The {audit_type} audit could not complete: {error}",
        help_url="",
        wcag=AUDIT_ERROR_WCAG,
        element=ElementRef(selector="", html="", failure_summary=error or "Unknown error"),
        fix=FixGuidance(description="Check the error message for details", code="", learn_more_url=""),
    )


class AuditOrchestrator:
    """Coordinates page loading and rule module execution."""

    def __init__(
        self,
        registry: Optional[AuditRegistry] = None,
        loader: Optional[PageLoader] = None,
        id_factory: Callable[[], IssueIdGenerator] = IssueIdGenerator,
    ):
        self.registry = registry or default_registry()
        self.loader = loader or PageLoader()
        self.id_factory = id_factory

    def get_available_audits(self) -> list[str]:
        return self.registry.types()

    def get_audit_info(self, audit_type: str) -> AuditInfo:
        return self.registry.info(audit_type)

    async def run_audits(self, url: str, options: Optional[AuditOptions] = None) -> AuditReport:
        """
        Run every registered audit not listed in `options.skip_audits`.

        Raises:
            UnknownAuditError: a skip name is not registered
            PageLoadError: the page could not be loaded
            AuditTimeoutError: the modules did not finish before the deadline
        """
        options = options or AuditOptions()
        # Wall clock for the timestamp, monotonic clock for the duration
        start_time = _wall_ms()
        started = time.monotonic()

        skip = list(options.skip_audits)
        self.registry.validate(skip)

        page = await self.loader.load(
            url,
            timeout=options.timeout,
            max_size=options.max_size,
            allow_js=options.allow_js,
        )

        selected = [t for t in self.registry.types() if t not in skip]
        logger.info(f"Running {len(selected)} audit(s) on {url}: {', '.join(selected) or 'none'}")

        ctx = AuditContext(page=page, ids=self.id_factory())
        outcomes = await self._run_batch(ctx, selected, options.audit_timeout)

        merged = merge_audit_results(
            {"issues": o.issues, "passed": o.passed} for o in outcomes
        )
        incomplete = [audit_error_issue(o.audit_type, o.error) for o in outcomes if o.error is not None]

        end_time = start_time + _elapsed_ms(started)
        report = format_results(url, start_time, end_time, merged.issues, merged.passed, incomplete)
        logger.info(
            f"Audit complete for {url}: {report.summary.total} issue(s), "
            f"{len(report.passed)} passed, {len(incomplete)} incomplete in {report.duration}ms"
        )
        return report

    async def run_specific_audits(
        self,
        url: str,
        audits: Sequence[str],
        options: Optional[AuditOptions] = None,
    ) -> AuditReport:
        """Run only `audits`; equivalent to skipping every other registered type."""
        self.registry.validate(audits)
        options = options or AuditOptions()
        skip = [t for t in self.registry.types() if t not in audits]
        return await self.run_audits(
            url,
            AuditOptions(
                skip_audits=skip,
                timeout=options.timeout,
                max_size=options.max_size,
                audit_timeout=options.audit_timeout,
                allow_js=options.allow_js,
            ),
        )

    async def _run_batch(
        self,
        ctx: AuditContext,
        audit_types: list[str],
        audit_timeout: int,
    ) -> list[ModuleOutcome]:
        tasks = [
            asyncio.create_task(self._run_single(ctx, self.registry.get(t)), name=f"audit-{t}")
            for t in audit_types
        ]
        try:
            return await asyncio.wait_for(asyncio.gather(*tasks), timeout=audit_timeout / 1000)
        except asyncio.TimeoutError:
            for task in tasks:
                task.cancel()
            logger.error(f"Audit timed out after {audit_timeout}ms")
            raise AuditTimeoutError(audit_timeout) from None

    async def _run_single(self, ctx: AuditContext, module: RuleModule) -> ModuleOutcome:
        """Run one module; a raised Exception becomes an error outcome."""
        started = time.perf_counter()
        try:
            result = await module.audit(ctx)
        except Exception as e:
            duration = (time.perf_counter() - started) * 1000
            message = str(e) or e.__class__.__name__
            logger.warning(f"{module.audit_type} audit failed after {duration:.0f}ms: {message}")
            return ModuleOutcome(audit_type=module.audit_type, error=message)

        duration = (time.perf_counter() - started) * 1000
        logger.debug(
            f"{module.audit_type} audit finished in {duration:.0f}ms: "
            f"{len(result.issues)} issue(s), {len(result.passed)} passed"
        )
        return ModuleOutcome(
            audit_type=module.audit_type,
            issues=list(result.issues),
            passed=list(result.passed),
        )


async def run_audits(url: str, options: Optional[AuditOptions] = None) -> AuditReport:
    """Run the built-in audits with a default orchestrator."""
    return await AuditOrchestrator().run_audits(url, options)


async def run_specific_audits(
    url: str,
    audits: Sequence[str],
    options: Optional[AuditOptions] = None,
) -> AuditReport:
    return await AuditOrchestrator().run_specific_audits(url, audits, options)


def get_available_audits() -> list[str]:
    return default_registry().types()


def get_audit_info(audit_type: str) -> AuditInfo:
    return default_registry().info(audit_type)
