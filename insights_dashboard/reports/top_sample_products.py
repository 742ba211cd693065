"""
Most requested sample products.
"""

from typing import Dict

from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline
from .top_products import rank_products

SAMPLE_PRODUCT_COLUMNS = ('total_qty_ordered', 'total_revenue', 'order_count')

TOP_SAMPLE_PRODUCTS = ReportDefinition(
    name='top_sample_products',
    monetary_fields=(
        MonetaryField('total_revenue', site_field='store_id', date_field='order_date'),
        MonetaryField('avg_price', site_field='store_id', date_field='order_date'),
    ),
    group_by=('order_date', 'sku', 'product_id'),
    sum_fields=SAMPLE_PRODUCT_COLUMNS,
    site_field='store_id',
)

# An order belongs to one store and one day, so order counts stay additive
QUERY = """
    SELECT
        item.order_date,
        item.website_id AS store_id,
        item.sku,
        ANY_VALUE(item.product_name) AS product_name,
        item.product_id,
        SUM(CAST(item.qty_ordered AS FLOAT64)) AS total_qty_ordered,
        SUM(CAST(item.row_total AS FLOAT64)) AS total_revenue,
        AVG(CAST(item.price AS FLOAT64)) AS avg_price,
        COUNT(DISTINCT item.order_entity_id) AS order_count
    FROM {items_table} item
    INNER JOIN {orders_table} o
        ON item.order_entity_id = o.entity_id
    WHERE item.order_date BETWEEN @start_date AND @end_date
        AND COALESCE(CAST(o.ext_is_samples AS INT64), 0) = 1
        {site_filter}
    GROUP BY order_date, store_id, sku, product_id
"""


def get_top_sample_products(
    pipeline: ReportPipeline,
    options: QueryOptions,
    limit: int = 10,
) -> Dict:
    """Sample products ranked by quantity ordered."""
    site_filter = pipeline.site_filter(
        options.tenant_id, options.site_id, column='item.website_id'
    )
    query = QUERY.format(
        items_table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_sales_items'),
        orders_table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_orders_flattened'),
        site_filter=site_filter.clause,
    )
    params = {**options.date_params(), **site_filter.params}

    result = pipeline.execute(query, params, options, TOP_SAMPLE_PRODUCTS)

    return {
        'products': rank_products(
            result.rows, limit=limit, sort_by='quantity', columns=SAMPLE_PRODUCT_COLUMNS
        ),
        'data_quality': result.data_quality,
    }
