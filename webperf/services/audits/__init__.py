"""
Rule module registry.

Modules are registered under their `audit_type`; registration order is the
dispatch and merge order.
"""
from typing import Iterable, Optional

from webperf.exceptions import UnknownAuditError
from webperf.schemas.audit_result import AuditInfo
from webperf.services.audits.accessibility import AccessibilityAudit
from webperf.services.audits.base import AuditContext, RuleModule
from webperf.services.audits.best_practices import BestPracticesAudit
from webperf.services.audits.performance import PerformanceAudit
from webperf.services.audits.pwa import PwaAudit
from webperf.services.audits.security import SecurityAudit
from webperf.services.audits.seo import SeoAudit

__all__ = [
    "AuditContext",
    "AuditRegistry",
    "RuleModule",
    "default_registry",
]


class AuditRegistry:
    """Ordered mapping of audit type -> rule module."""

    def __init__(self, modules: Optional[Iterable[RuleModule]] = None):
        self._modules: dict[str, RuleModule] = {}
        for module in modules or ():
            self.register(module)

    def register(self, module: RuleModule) -> None:
        if not module.audit_type:
            raise ValueError(f"{type(module).__name__} has no audit_type")
        self._modules[module.audit_type] = module

    def get(self, audit_type: str) -> RuleModule:
        try:
            return self._modules[audit_type]
        except KeyError:
            raise UnknownAuditError(audit_type, self.types()) from None

    def types(self) -> list[str]:
        return list(self._modules)

    def info(self, audit_type: str) -> AuditInfo:
        return self.get(audit_type).info

    def validate(self, audit_types: Iterable[str]) -> None:
        """Raise UnknownAuditError for the first unregistered name."""
        for audit_type in audit_types:
            if audit_type not in self._modules:
                raise UnknownAuditError(audit_type, self.types())

    def __contains__(self, audit_type: str) -> bool:
        return audit_type in self._modules

    def __len__(self) -> int:
        return len(self._modules)


def default_registry() -> AuditRegistry:
    """The six built-in modules in dispatch order."""
    return AuditRegistry([
        AccessibilityAudit(),
        PerformanceAudit(),
        SeoAudit(),
        SecurityAudit(),
        BestPracticesAudit(),
        PwaAudit(),
    ])
