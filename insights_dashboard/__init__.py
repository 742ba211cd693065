"""
eCommerce Insights Dashboard - reporting layer

Single import point for the cross-site analytics normalization layer
and the report pipelines built on it.

Usage:
    from insights_dashboard import (
        AppConfig,
        TenantMetadataStore,
        BigQueryExecutor,
        ReportPipeline,
        QueryOptions,
        get_sales_overview,
    )

    config = AppConfig.load()
    pipeline = ReportPipeline(TenantMetadataStore(config), BigQueryExecutor(config), config)
    options = QueryOptions(
        tenant_id="acme",
        dataset_id="acme",
        site_id="all_combined",
        start_date="2024-05-01",
        end_date="2024-05-31",
    )
    report = get_sales_overview(pipeline, options)
"""

# =============================================================================
# Core Configuration & Utilities
# =============================================================================
from .core.config import (
    COMBINE_ALL_SITES,
    DEFAULT_BASE_CURRENCY,
    SITE_FIELD,
    AppConfig,
)
from .core.exceptions import (
    InsightsError,
    TenantNotFoundError,
    SiteNotFoundError,
    ReportNotFoundError,
)
from .core.utils import (
    make_json_serializable,
    safe_json_dumps,
)

# =============================================================================
# Data & Normalization
# =============================================================================
from .data import (
    Site,
    Tenant,
    TenantMetadataStore,
    BigQueryExecutor,
    CurrencyContext,
    ConversionIssues,
    MonetaryField,
    load_currency_context,
    convert_to_base_currency,
    convert_monetary_fields,
    IdScheme,
    ResolutionKind,
    SiteResolution,
    resolve_site,
    SiteFilter,
    build_site_filter,
    aggregate_grouped_rows,
    QueryOptions,
    QueryResult,
    ReportDefinition,
    ReportPipeline,
)

# =============================================================================
# Reports & Services
# =============================================================================
from .reports import (
    REPORTS,
    get_report,
    get_sales_overview,
    get_top_products,
    get_customer_metrics,
    get_hourly_sales,
    get_category_breakdown,
    get_seo_performance,
    get_website_behavior,
    get_collections_performance,
    get_sample_orders_summary,
    get_sample_orders_daily,
    get_sample_orders_hourly,
    get_sample_orders_by_collection,
    get_top_sample_products,
)
from .services import build_report_bundle

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "1.0.0"

__all__ = [
    '__version__',

    # Configuration
    'COMBINE_ALL_SITES',
    'DEFAULT_BASE_CURRENCY',
    'SITE_FIELD',
    'AppConfig',

    # Errors
    'InsightsError',
    'TenantNotFoundError',
    'SiteNotFoundError',
    'ReportNotFoundError',

    # Serialization utilities
    'make_json_serializable',
    'safe_json_dumps',

    # Data & normalization
    'Site',
    'Tenant',
    'TenantMetadataStore',
    'BigQueryExecutor',
    'CurrencyContext',
    'ConversionIssues',
    'MonetaryField',
    'load_currency_context',
    'convert_to_base_currency',
    'convert_monetary_fields',
    'IdScheme',
    'ResolutionKind',
    'SiteResolution',
    'resolve_site',
    'SiteFilter',
    'build_site_filter',
    'aggregate_grouped_rows',
    'QueryOptions',
    'QueryResult',
    'ReportDefinition',
    'ReportPipeline',

    # Reports
    'REPORTS',
    'get_report',
    'get_sales_overview',
    'get_top_products',
    'get_customer_metrics',
    'get_hourly_sales',
    'get_category_breakdown',
    'get_seo_performance',
    'get_website_behavior',
    'get_collections_performance',
    'get_sample_orders_summary',
    'get_sample_orders_daily',
    'get_sample_orders_hourly',
    'get_sample_orders_by_collection',
    'get_top_sample_products',
    'build_report_bundle',
]
