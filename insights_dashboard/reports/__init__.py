"""
Report pipelines. Each report resolves the site selection, queries the
warehouse and returns rows normalized to the tenant's base currency.
"""

from typing import Any, Callable, Dict, Mapping, Optional
import inspect

from ..core.exceptions import ReportNotFoundError
from .sales_overview import SALES_OVERVIEW, get_sales_overview
from .top_products import TOP_PRODUCTS, get_top_products
from .customer_metrics import CUSTOMER_METRICS, get_customer_metrics
from .hourly_sales import HOURLY_SALES, get_hourly_sales
from .category_breakdown import CATEGORY_BREAKDOWN, get_category_breakdown
from .collections_performance import COLLECTIONS_PERFORMANCE, get_collections_performance
from .seo_performance import SEO_PERFORMANCE, get_seo_performance
from .website_behavior import WEBSITE_BEHAVIOR, get_website_behavior
from .sample_orders import (
    SAMPLE_ORDERS_SUMMARY,
    SAMPLE_ORDERS_DAILY,
    SAMPLE_ORDERS_HOURLY,
    SAMPLE_ORDERS_BY_COLLECTION,
    get_sample_orders_summary,
    get_sample_orders_daily,
    get_sample_orders_hourly,
    get_sample_orders_by_collection,
)
from .top_sample_products import TOP_SAMPLE_PRODUCTS, get_top_sample_products

REPORTS: Dict[str, Callable] = {
    'sales_overview': get_sales_overview,
    'top_products': get_top_products,
    'customer_metrics': get_customer_metrics,
    'hourly_sales': get_hourly_sales,
    'category_breakdown': get_category_breakdown,
    'collections_performance': get_collections_performance,
    'seo_performance': get_seo_performance,
    'website_behavior': get_website_behavior,
    'sample_orders_summary': get_sample_orders_summary,
    'sample_orders_daily': get_sample_orders_daily,
    'sample_orders_hourly': get_sample_orders_hourly,
    'sample_orders_by_collection': get_sample_orders_by_collection,
    'top_sample_products': get_top_sample_products,
}


def get_report(name: str) -> Callable:
    """Look up a report function by name."""
    try:
        return REPORTS[name]
    except KeyError:
        raise ReportNotFoundError(name) from None


def report_options(name: str, options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Check extra keyword arguments for a report.

    Every report takes ``(pipeline, options)`` positionally; anything
    after that is an accepted option.

    Raises:
        ValueError: options is not a mapping, or names an unknown option
    """
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise ValueError(f"Options for {name} must be an object, got {type(options).__name__}")

    accepted = list(inspect.signature(get_report(name)).parameters)[2:]
    unknown = sorted(set(options) - set(accepted))
    if unknown:
        raise ValueError(
            f"Unknown options for {name}: {', '.join(unknown)} "
            f"(accepted: {', '.join(accepted) or 'none'})"
        )
    return dict(options)


__all__ = [
    'REPORTS',
    'get_report',
    'report_options',
    # Definitions
    'SALES_OVERVIEW',
    'TOP_PRODUCTS',
    'CUSTOMER_METRICS',
    'HOURLY_SALES',
    'CATEGORY_BREAKDOWN',
    'COLLECTIONS_PERFORMANCE',
    'SEO_PERFORMANCE',
    'WEBSITE_BEHAVIOR',
    'SAMPLE_ORDERS_SUMMARY',
    'SAMPLE_ORDERS_DAILY',
    'SAMPLE_ORDERS_HOURLY',
    'SAMPLE_ORDERS_BY_COLLECTION',
    'TOP_SAMPLE_PRODUCTS',
    # Reports
    'get_sales_overview',
    'get_top_products',
    'get_customer_metrics',
    'get_hourly_sales',
    'get_category_breakdown',
    'get_collections_performance',
    'get_seo_performance',
    'get_website_behavior',
    'get_sample_orders_summary',
    'get_sample_orders_daily',
    'get_sample_orders_hourly',
    'get_sample_orders_by_collection',
    'get_top_sample_products',
]
