"""
Daily sales overview with a period summary.
"""

from typing import Dict

from ..core.utils import safe_divide, to_number
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline

MONETARY_COLUMNS = (
    'total_revenue',
    'subtotal',
    'total_tax',
    'total_shipping',
    'total_discounts',
    'revenue_complete',
    'revenue_pending',
)

COUNT_COLUMNS = (
    'total_orders',
    'unique_customers',
    'total_items',
    'orders_complete',
    'orders_pending',
    'orders_processing',
    'orders_canceled',
    'orders_sample',
    'orders_not_sample',
)

SALES_OVERVIEW = ReportDefinition(
    name='sales_overview',
    monetary_fields=tuple(MonetaryField(column) for column in MONETARY_COLUMNS),
    group_by=('date',),
    sum_fields=COUNT_COLUMNS + MONETARY_COLUMNS,
)

AGGREGATED_QUERY = """
    SELECT
        date,
        website_id,
        total_orders,
        unique_customers,
        total_revenue,
        subtotal,
        total_tax,
        total_shipping,
        total_discounts,
        total_items,
        orders_complete,
        orders_pending,
        orders_processing,
        orders_canceled,
        revenue_complete,
        revenue_pending,
        orders_sample,
        orders_not_sample
    FROM {table}
    WHERE date BETWEEN @start_date AND @end_date
        {site_filter}
    ORDER BY date DESC
"""

# Raw orders, used when sample orders must be excluded
ORDERS_QUERY = """
    SELECT
        o.order_date AS date,
        o.website_id,
        COUNT(DISTINCT o.entity_id) AS total_orders,
        COUNT(DISTINCT o.customer_id) AS unique_customers,
        SUM(CAST(o.grand_total AS FLOAT64)) AS total_revenue,
        SUM(CAST(o.subtotal AS FLOAT64)) AS subtotal,
        SUM(CAST(o.tax_amount AS FLOAT64)) AS total_tax,
        SUM(CAST(o.shipping_amount AS FLOAT64)) AS total_shipping,
        SUM(CAST(o.discount_amount AS FLOAT64)) AS total_discounts,
        SUM(CAST(o.total_qty_ordered AS FLOAT64)) AS total_items,
        COUNTIF(o.status = 'complete') AS orders_complete,
        COUNTIF(o.status = 'pending') AS orders_pending,
        COUNTIF(o.status = 'processing') AS orders_processing,
        COUNTIF(o.status = 'canceled') AS orders_canceled,
        SUM(IF(o.status = 'complete', CAST(o.grand_total AS FLOAT64), 0)) AS revenue_complete,
        SUM(IF(o.status = 'pending', CAST(o.grand_total AS FLOAT64), 0)) AS revenue_pending,
        0 AS orders_sample,
        COUNT(DISTINCT o.entity_id) AS orders_not_sample
    FROM {table} o
    WHERE o.order_date BETWEEN @start_date AND @end_date
        AND COALESCE(CAST(o.ext_is_samples AS INT64), 0) = 0
        {site_filter}
    GROUP BY date, o.website_id
    ORDER BY date DESC
"""


def summarize_sales(daily) -> Dict:
    """Totals across the period plus average order value and items per order."""
    summary = {column: 0 for column in COUNT_COLUMNS + MONETARY_COLUMNS}
    for row in daily:
        for column in summary:
            summary[column] += to_number(row.get(column))

    summary['aov'] = safe_divide(summary['total_revenue'], summary['total_orders'])
    summary['items_per_order'] = safe_divide(summary['total_items'], summary['total_orders'])
    return summary


def get_sales_overview(
    pipeline: ReportPipeline,
    options: QueryOptions,
    exclude_sample_orders: bool = False,
) -> Dict:
    """
    Fetch daily sales rows and their summary in the tenant's base currency.

    Args:
        pipeline: Report pipeline
        options: Request options
        exclude_sample_orders: Query raw orders, dropping sample orders

    Returns:
        Dictionary with ``daily``, ``summary`` and ``data_quality``
    """
    if exclude_sample_orders:
        site_filter = pipeline.site_filter(
            options.tenant_id, options.site_id, column='o.website_id'
        )
        query = ORDERS_QUERY.format(
            table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_orders_flattened'),
            site_filter=site_filter.clause,
        )
    else:
        site_filter = pipeline.site_filter(options.tenant_id, options.site_id)
        query = AGGREGATED_QUERY.format(
            table=pipeline.table(options.dataset_id, 'mv_agg_sales_overview_daily'),
            site_filter=site_filter.clause,
        )

    params = {**options.date_params(), **site_filter.params}
    result = pipeline.execute(query, params, options, SALES_OVERVIEW)

    daily = sorted(result.rows, key=lambda row: str(row.get('date') or ''), reverse=True)

    return {
        'daily': daily,
        'summary': summarize_sales(daily),
        'data_quality': result.data_quality,
    }
