"""
Shared scaffolding for report query pipelines.

Every report runs the same sequence: resolve the site selection, build
the site filter, run the warehouse query, unwrap date values, convert
monetary fields to the tenant's base currency, then merge rows that
came from several grouped sites. Reports differ only in their
ReportDefinition (field roles) and in how they summarize the rows.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging
import re

from ..core.config import AppConfig, SITE_FIELD
from ..core.exceptions import SiteNotFoundError, TenantNotFoundError
from ..core.utils import normalize_date_value
from .aggregation import aggregate_grouped_rows
from .currency import (
    ConversionIssues,
    CurrencyContext,
    MonetaryField,
    convert_monetary_fields,
    load_currency_context,
)
from .filters import SiteFilter, build_site_filter
from .site_resolver import IdScheme, resolve_site

logger = logging.getLogger(__name__)

ISO_DAY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


@dataclass(frozen=True)
class ReportDefinition:
    """Declarative field roles for one report."""

    name: str
    monetary_fields: Tuple[MonetaryField, ...] = ()
    group_by: Tuple[str, ...] = ('date',)
    sum_fields: Tuple[str, ...] = ()
    max_fields: Tuple[str, ...] = ()
    date_fields: Tuple[str, ...] = ('date', 'order_date')
    site_field: str = SITE_FIELD
    # Applied to each unwrapped row before currency conversion
    prepare_row: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None


@dataclass
class QueryOptions:
    """One report request."""

    tenant_id: str
    dataset_id: str
    site_id: Optional[str]
    start_date: str
    end_date: str

    @property
    def fallback_month(self) -> Optional[str]:
        if self.start_date and ISO_DAY_PATTERN.match(self.start_date):
            return self.start_date[:7]
        return None

    def date_params(self) -> Dict[str, Any]:
        return {'start_date': self.start_date, 'end_date': self.end_date}


@dataclass
class QueryResult:
    rows: List[Dict[str, Any]]
    issues: ConversionIssues = field(default_factory=ConversionIssues)

    @property
    def data_quality(self) -> Dict[str, Any]:
        return self.issues.to_dict()


class ReportPipeline:
    """
    Runs report queries for a tenant metadata store and warehouse.

    Holds no per-request state: currency contexts and site resolutions
    are rebuilt for each call, so one pipeline may serve concurrent
    requests.
    """

    def __init__(self, store, warehouse, config: Optional[AppConfig] = None):
        self.store = store
        self.warehouse = warehouse
        self.config = config or AppConfig.load()

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def table(self, dataset_id: str, table_name: str) -> str:
        return self.warehouse.table(dataset_id, table_name)

    def dataset_for(self, tenant_id: str) -> str:
        """Warehouse dataset configured for a tenant."""
        item = self.store.get_tenant(tenant_id)
        if not item:
            raise TenantNotFoundError(tenant_id)
        dataset_id = item.get('dataset_id')
        if not dataset_id:
            raise ValueError(f"Tenant {tenant_id} has no warehouse dataset configured")
        return dataset_id

    def currency_context(self, tenant_id: str) -> Optional[CurrencyContext]:
        return load_currency_context(
            self.store, tenant_id, self.config.default_base_currency
        )

    def site_filter(
        self,
        tenant_id: str,
        site_id: Optional[str],
        column: str = SITE_FIELD,
        param_name: str = SITE_FIELD,
        id_scheme: IdScheme = IdScheme.WAREHOUSE,
    ) -> SiteFilter:
        """
        Resolve a site selection and build its filter.

        Raises:
            SiteNotFoundError: a specific site was requested but resolved
                to nothing. Falling back to an unfiltered query here would
                return every site's data.
        """
        resolution = resolve_site(
            self.store,
            tenant_id,
            site_id,
            id_scheme=id_scheme,
            combine_all=self.config.combine_all_sentinel,
        )

        if resolution.is_no_filter:
            return build_site_filter(None, column=column, param_name=param_name)

        if resolution.is_not_found:
            raise SiteNotFoundError(tenant_id, site_id, resolution.reason)

        if not resolution.ids:
            raise SiteNotFoundError(tenant_id, site_id, "grouping site has no resolvable members")

        return build_site_filter(resolution.ids, column=column, param_name=param_name)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def process(
        self,
        rows: List[Dict[str, Any]],
        options: QueryOptions,
        definition: ReportDefinition,
    ) -> QueryResult:
        """Unwrap dates, convert currency and merge grouped-site rows."""
        issues = ConversionIssues()
        if not rows:
            return QueryResult([], issues)

        context = None
        if definition.monetary_fields:
            context = self.currency_context(options.tenant_id)
            if context is None:
                logger.warning(
                    f"[{definition.name}] No currency context for tenant "
                    f"{options.tenant_id}, monetary values left unconverted"
                )
                issues.record_context_missing()
        fallback_month = options.fallback_month

        normalized = []
        for row in rows:
            row = dict(row)
            for name in definition.date_fields:
                if name in row:
                    row[name] = normalize_date_value(row[name])
            if definition.prepare_row:
                row = definition.prepare_row(row)
            normalized.append(row)

        converted = [
            convert_monetary_fields(
                row,
                context,
                list(definition.monetary_fields),
                fallback_month=fallback_month,
                issues=issues,
            )
            for row in normalized
        ]

        aggregated = aggregate_grouped_rows(
            converted,
            definition.group_by,
            definition.sum_fields,
            definition.max_fields,
            site_field=definition.site_field,
        )

        if not issues.complete:
            logger.warning(
                f"[{definition.name}] Some values left unconverted: {issues.to_dict()}"
            )

        return QueryResult(aggregated, issues)

    def execute(
        self,
        query: str,
        params: Dict[str, Any],
        options: QueryOptions,
        definition: ReportDefinition,
    ) -> QueryResult:
        """Run a query and process its rows."""
        rows = self.warehouse.run(query, params)
        logger.info(f"[{definition.name}] {len(rows)} rows for tenant {options.tenant_id}")
        return self.process(rows, options, definition)
