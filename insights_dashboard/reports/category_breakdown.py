"""
Revenue share by product group.
"""

from typing import Dict, List
import json

import pandas as pd

from ..core.utils import make_json_serializable
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline

CATEGORY_BREAKDOWN = ReportDefinition(
    name='category_breakdown',
    monetary_fields=(
        MonetaryField('total_revenue', site_field='store_id', date_field='order_date'),
    ),
    group_by=('order_date', 'product_group'),
    sum_fields=('total_revenue', 'total_qty', 'order_count'),
    site_field='store_id',
)

QUERY = """
    SELECT
        item.order_date,
        item.website_id AS store_id,
        COALESCE(JSON_VALUE(p.attributes, '$.sdb_product_group_code_data'), 'Unknown') AS product_group,
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
    GROUP BY order_date, store_id, product_group
"""


def product_group_label(value) -> str:
    """
    Display label for a product group.

    Groups sometimes arrive as JSON such as ``[{"label": "Wallpaper"}]``;
    the first label is used when present.
    """
    if value is None or value == '' or (isinstance(value, float) and pd.isna(value)):
        return 'Unknown'

    text = str(value)
    if text.startswith('[') or text.startswith('{'):
        try:
            parsed = json.loads(text)
        except ValueError:
            return text
        if isinstance(parsed, list) and parsed and isinstance(parsed[0], dict) and parsed[0].get('label'):
            return str(parsed[0]['label'])
        if isinstance(parsed, dict) and parsed.get('label'):
            return str(parsed['label'])

    return text


def summarize_categories(rows: List[Dict]) -> List[Dict]:
    """Per-group totals sorted by revenue, with each group's revenue share."""
    if not rows:
        return []

    df = pd.DataFrame(rows)
    for column in ['total_revenue', 'total_qty', 'order_count']:
        if column not in df.columns:
            df[column] = 0
        df[column] = pd.to_numeric(df[column], errors='coerce').fillna(0)

    if 'product_group' not in df.columns:
        df['product_group'] = None
    df['product_group'] = df['product_group'].apply(product_group_label)

    groups = (
        df.groupby('product_group', sort=False)[['total_revenue', 'total_qty', 'order_count']]
        .sum()
        .reset_index()
    )

    total_revenue = groups['total_revenue'].sum()
    groups['percentage'] = groups['total_revenue'] / total_revenue * 100 if total_revenue > 0 else 0.0

    groups = groups.sort_values('total_revenue', ascending=False, kind='stable')
    return make_json_serializable(groups.to_dict(orient='records'))


def get_category_breakdown(
    pipeline: ReportPipeline,
    options: QueryOptions,
    order_type: str = 'main',
) -> Dict:
    """
    Fetch revenue by product group.

    Args:
        order_type: 'main' for regular orders, 'sample' for sample orders
    """
    if order_type not in ('main', 'sample'):
        raise ValueError(f"order_type must be 'main' or 'sample', got {order_type!r}")

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

    result = pipeline.execute(query, params, options, CATEGORY_BREAKDOWN)

    return {
        'categories': summarize_categories(result.rows),
        'data_quality': result.data_quality,
    }
