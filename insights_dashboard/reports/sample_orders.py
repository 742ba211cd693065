"""
Sample orders: period totals, daily and hourly series, and quantities
by collection.

Sample orders are flagged with ``ext_is_samples`` on the flattened
orders table; they are excluded from the main sales reports.
"""

from typing import Dict, List

from ..core.utils import make_json_serializable, safe_divide, to_number
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline
from .hourly_sales import bucket_by_hour, peak_hours

SAMPLE_ORDERS_SUMMARY = ReportDefinition(
    name='sample_orders_summary',
    monetary_fields=(
        MonetaryField('total_sample_revenue', site_field='store_id', date_field='order_date'),
    ),
    group_by=('order_date',),
    sum_fields=('total_sample_orders', 'total_sample_qty', 'total_sample_revenue'),
    site_field='store_id',
)

SAMPLE_ORDERS_DAILY = ReportDefinition(
    name='sample_orders_daily',
    monetary_fields=(MonetaryField('total_revenue'),),
    group_by=('date',),
    sum_fields=('total_orders', 'total_revenue', 'total_items'),
)

SAMPLE_ORDERS_HOURLY = ReportDefinition(
    name='sample_orders_hourly',
    monetary_fields=(MonetaryField('total_revenue'),),
    group_by=('date', 'hour'),
    sum_fields=('total_orders', 'total_revenue'),
)

# Quantities only, nothing to convert
SAMPLE_ORDERS_BY_COLLECTION = ReportDefinition(
    name='sample_orders_by_collection',
    group_by=('collection',),
    sum_fields=('total_items', 'total_orders'),
)

SUMMARY_QUERY = """
    SELECT
        o.order_date,
        o.website_id AS store_id,
        COUNT(DISTINCT o.entity_id) AS total_sample_orders,
        SUM(CAST(o.total_qty_ordered AS FLOAT64)) AS total_sample_qty,
        SUM(CAST(o.grand_total AS FLOAT64)) AS total_sample_revenue
    FROM {table} o
    WHERE o.order_date BETWEEN @start_date AND @end_date
        AND COALESCE(CAST(o.ext_is_samples AS INT64), 0) = 1
        {site_filter}
    GROUP BY order_date, store_id
"""

DAILY_QUERY = """
    SELECT
        o.order_date AS date,
        o.website_id,
        COUNT(DISTINCT o.entity_id) AS total_orders,
        SUM(CAST(o.grand_total AS FLOAT64)) AS total_revenue,
        SUM(CAST(o.total_qty_ordered AS FLOAT64)) AS total_items
    FROM {table} o
    WHERE o.order_date BETWEEN @start_date AND @end_date
        AND COALESCE(CAST(o.ext_is_samples AS INT64), 0) = 1
        {site_filter}
    GROUP BY date, o.website_id
    ORDER BY date DESC
"""

HOURLY_QUERY = """
    SELECT
        o.order_date AS date,
        EXTRACT(HOUR FROM TIMESTAMP(o.order_created_at)) AS hour,
        o.website_id,
        COUNT(DISTINCT o.entity_id) AS total_orders,
        SUM(CAST(o.grand_total AS FLOAT64)) AS total_revenue
    FROM {table} o
    WHERE o.order_date BETWEEN @start_date AND @end_date
        AND COALESCE(CAST(o.ext_is_samples AS INT64), 0) = 1
        {site_filter}
    GROUP BY date, hour, o.website_id
    ORDER BY date DESC, hour DESC
"""

BY_COLLECTION_QUERY = """
    SELECT
        COALESCE(p.attr_sdb_collection_name, 'Unknown') AS collection,
        SUM(CAST(item.qty_ordered AS FLOAT64)) AS total_items,
        COUNT(DISTINCT item.order_entity_id) AS total_orders
    FROM {items_table} item
    INNER JOIN {orders_table} o
        ON item.order_entity_id = o.entity_id
    LEFT JOIN {products_table} p
        ON item.sku = p.sku
    WHERE item.order_date BETWEEN @start_date AND @end_date
        AND COALESCE(CAST(o.ext_is_samples AS INT64), 0) = 1
        {site_filter}
    GROUP BY collection
    ORDER BY total_items DESC
"""

ORDERS_TABLE = 'mv_adobe_commerce_orders_flattened'


def _run_orders_query(pipeline, options, query, definition):
    site_filter = pipeline.site_filter(options.tenant_id, options.site_id, column='o.website_id')
    query = query.format(
        table=pipeline.table(options.dataset_id, ORDERS_TABLE),
        site_filter=site_filter.clause,
    )
    params = {**options.date_params(), **site_filter.params}
    return pipeline.execute(query, params, options, definition)


def get_sample_orders_summary(pipeline: ReportPipeline, options: QueryOptions) -> Dict:
    """Sample order, quantity and revenue totals for the period."""
    result = _run_orders_query(pipeline, options, SUMMARY_QUERY, SAMPLE_ORDERS_SUMMARY)

    summary = {'total_sample_orders': 0, 'total_sample_qty': 0, 'total_sample_revenue': 0}
    for row in result.rows:
        for column in summary:
            summary[column] += to_number(row.get(column))

    return {**summary, 'data_quality': result.data_quality}


def get_sample_orders_daily(pipeline: ReportPipeline, options: QueryOptions) -> Dict:
    """Daily sample orders and a period summary."""
    result = _run_orders_query(pipeline, options, DAILY_QUERY, SAMPLE_ORDERS_DAILY)
    daily = sorted(result.rows, key=lambda row: str(row.get('date') or ''), reverse=True)

    summary = {
        column: sum(to_number(row.get(column)) for row in daily)
        for column in ('total_orders', 'total_revenue', 'total_items')
    }
    summary['items_per_order'] = safe_divide(summary['total_items'], summary['total_orders'])

    return {
        'daily': daily,
        'summary': summary,
        'data_quality': result.data_quality,
    }


def get_sample_orders_hourly(pipeline: ReportPipeline, options: QueryOptions) -> Dict:
    """Sample orders by hour of day, with the peak hours."""
    result = _run_orders_query(pipeline, options, HOURLY_QUERY, SAMPLE_ORDERS_HOURLY)
    hourly = bucket_by_hour(result.rows)

    return make_json_serializable({
        'hourly': hourly,
        'peaks': peak_hours(hourly),
        'data_quality': result.data_quality,
    })


def get_sample_orders_by_collection(pipeline: ReportPipeline, options: QueryOptions) -> Dict:
    """Sample items and orders per product collection."""
    site_filter = pipeline.site_filter(
        options.tenant_id, options.site_id, column='item.website_id'
    )
    query = BY_COLLECTION_QUERY.format(
        items_table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_sales_items'),
        orders_table=pipeline.table(options.dataset_id, ORDERS_TABLE),
        products_table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_products_flattened'),
        site_filter=site_filter.clause,
    )
    params = {**options.date_params(), **site_filter.params}

    result = pipeline.execute(query, params, options, SAMPLE_ORDERS_BY_COLLECTION)
    collections: List[Dict] = [
        {
            'collection': row.get('collection') or 'Unknown',
            'total_items': to_number(row.get('total_items')),
            'total_orders': to_number(row.get('total_orders')),
        }
        for row in result.rows
    ]
    collections.sort(key=lambda row: row['total_items'], reverse=True)

    return {
        'collections': collections,
        'data_quality': result.data_quality,
    }
