"""
Data access and the cross-site normalization layer.
Provides the tenant metadata store, the warehouse executor, site
resolution, currency conversion and grouped-site aggregation.
"""

from .models import Site, Tenant
from .tenant_store import TenantMetadataStore
from .warehouse import BigQueryExecutor
from .currency import (
    CurrencyContext,
    ConversionIssues,
    MonetaryField,
    build_currency_context,
    load_currency_context,
    resolve_month_key,
    convert_to_base_currency,
    convert_monetary_fields,
)
from .site_resolver import (
    IdScheme,
    ResolutionKind,
    SiteResolution,
    resolve_site,
)
from .filters import SiteFilter, build_site_filter
from .aggregation import aggregate_grouped_rows
from .pipeline import (
    QueryOptions,
    QueryResult,
    ReportDefinition,
    ReportPipeline,
)

__all__ = [
    # Records
    'Site',
    'Tenant',
    # External collaborators
    'TenantMetadataStore',
    'BigQueryExecutor',
    # Currency
    'CurrencyContext',
    'ConversionIssues',
    'MonetaryField',
    'build_currency_context',
    'load_currency_context',
    'resolve_month_key',
    'convert_to_base_currency',
    'convert_monetary_fields',
    # Site resolution
    'IdScheme',
    'ResolutionKind',
    'SiteResolution',
    'resolve_site',
    # Filters
    'SiteFilter',
    'build_site_filter',
    # Aggregation
    'aggregate_grouped_rows',
    # Pipeline
    'QueryOptions',
    'QueryResult',
    'ReportDefinition',
    'ReportPipeline',
]
