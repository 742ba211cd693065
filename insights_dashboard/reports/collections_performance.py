"""
Revenue and quantity by product collection.
"""

from typing import Dict, List

import pandas as pd

from ..core.utils import make_json_serializable
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline

TOTAL_COLUMNS = ['total_revenue', 'total_qty', 'order_count']

COLLECTIONS_PERFORMANCE = ReportDefinition(
    name='collections_performance',
    monetary_fields=(
        MonetaryField('total_revenue', site_field='store_id', date_field='order_date'),
    ),
    group_by=('order_date', 'collection'),
    sum_fields=tuple(TOTAL_COLUMNS),
    site_field='store_id',
)

QUERY = """
    SELECT
        item.order_date,
        item.website_id AS store_id,
        COALESCE(JSON_VALUE(p.attributes, '$.sdb_collection_name'), 'Unknown') AS collection,
        SUM(CAST(item.row_total AS FLOAT64)) AS total_revenue,
        SUM(CAST(item.qty_ordered AS FLOAT64)) AS total_qty,
        COUNT(DISTINCT item.order_entity_id) AS order_count
    FROM {items_table} item
    INNER JOIN {orders_table} o
        ON item.order_entity_id = o.entity_id
    LEFT JOIN {products_table} p
        ON item.sku = p.sku
    WHERE item.order_date BETWEEN @start_date AND @end_date
        AND COALESCE(CAST(o.ext_is_samples AS INT64), 0) = @is_samples
        {site_filter}
    GROUP BY order_date, store_id, collection
"""


def rank_collections(rows: List[Dict], sort_by: str = 'revenue', limit: int = 20) -> List[Dict]:
    """Per-collection totals across the period, sorted and limited."""
    if not rows:
        return []

    df = pd.DataFrame(rows)
    for column in TOTAL_COLUMNS:
        if column not in df.columns:
            df[column] = 0
        df[column] = pd.to_numeric(df[column], errors='coerce').fillna(0)

    if 'collection' not in df.columns:
        df['collection'] = None
    df['collection'] = df['collection'].fillna('Unknown').replace('', 'Unknown')

    collections = df.groupby('collection', sort=False)[TOTAL_COLUMNS].sum().reset_index()

    sort_column = 'total_qty' if sort_by == 'qty' else 'total_revenue'
    collections = collections.sort_values(sort_column, ascending=False, kind='stable').head(limit)
    return make_json_serializable(collections.to_dict(orient='records'))


def get_collections_performance(
    pipeline: ReportPipeline,
    options: QueryOptions,
    order_type: str = 'main',
    sort_by: str = 'revenue',
    limit: int = 20,
) -> Dict:
    """
    Fetch collection totals.

    Args:
        order_type: 'main' for regular orders, 'sample' for sample orders
        sort_by: 'revenue' or 'qty'
        limit: Number of collections to return
    """
    if order_type not in ('main', 'sample'):
        raise ValueError(f"order_type must be 'main' or 'sample', got {order_type!r}")
    if sort_by not in ('revenue', 'qty'):
        raise ValueError(f"sort_by must be 'revenue' or 'qty', got {sort_by!r}")

    site_filter = pipeline.site_filter(
        options.tenant_id, options.site_id, column='item.website_id'
    )
    query = QUERY.format(
        items_table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_sales_items'),
        orders_table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_orders_flattened'),
        products_table=pipeline.table(options.dataset_id, 'mv_adobe_commerce_products_flattened'),
        site_filter=site_filter.clause,
    )
    params = {
        **options.date_params(),
        'is_samples': 1 if order_type == 'sample' else 0,
        **site_filter.params,
    }

    result = pipeline.execute(query, params, options, COLLECTIONS_PERFORMANCE)

    return {
        'collections': rank_collections(result.rows, sort_by=sort_by, limit=limit),
        'data_quality': result.data_quality,
    }
