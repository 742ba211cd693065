"""
Exceptions raised by the reporting layer.
"""

from typing import Optional


class InsightsError(Exception):
    """Base class for reporting errors."""


class TenantNotFoundError(InsightsError):
    """The requested tenant does not exist."""

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Tenant not found: {tenant_id}")


class SiteNotFoundError(InsightsError):
    """
    A specific site was requested but could not be resolved to any
    warehouse identifier. Never treated as "no filter".
    """

    def __init__(self, tenant_id: str, site_id: str, reason: Optional[str] = None):
        self.tenant_id = tenant_id
        self.site_id = site_id
        self.reason = reason or "site not found or misconfigured"
        super().__init__(f"Site '{site_id}' for tenant '{tenant_id}': {self.reason}")


class ReportNotFoundError(InsightsError):
    """Unknown report name."""

    def __init__(self, report_name: str):
        self.report_name = report_name
        super().__init__(f"Unknown report: {report_name}")
