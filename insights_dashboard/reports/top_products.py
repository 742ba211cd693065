"""
Top products by revenue or quantity.
"""

from typing import Dict, List, Sequence

import pandas as pd

from ..core.utils import make_json_serializable
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline

QUANTITY_COLUMNS = ['total_qty_ordered', 'total_qty_invoiced', 'total_qty_shipped', 'order_count']
MONEY_COLUMNS = ['total_revenue', 'total_discount']

TOP_PRODUCTS = ReportDefinition(
    name='top_products',
    monetary_fields=(
        MonetaryField('total_revenue'),
        MonetaryField('total_discount'),
        MonetaryField('avg_price'),
    ),
    group_by=('date', 'sku', 'product_id'),
    sum_fields=tuple(QUANTITY_COLUMNS + MONEY_COLUMNS),
)

QUERY = """
    SELECT
        date,
        website_id,
        sku,
        product_name,
        product_id,
        total_qty_ordered,
        total_qty_invoiced,
        total_qty_shipped,
        total_revenue,
        total_discount,
        avg_price,
        order_count
    FROM {table}
    WHERE date BETWEEN @start_date AND @end_date
        {site_filter}
"""


def rank_products(
    rows: List[Dict],
    limit: int = 10,
    sort_by: str = 'revenue',
    columns: Sequence[str] = tuple(QUANTITY_COLUMNS + MONEY_COLUMNS),
) -> List[Dict]:
    """
    Roll daily product rows up to one row per product and rank them.

    ``columns`` are summed per product and must include
    ``total_qty_ordered`` and ``total_revenue``. ``avg_price`` is
    recomputed from the combined revenue and quantity, since per-day
    averages cannot be added.
    """
    if not rows:
        return []

    df = pd.DataFrame(rows)
    for column in columns:
        if column not in df.columns:
            df[column] = 0
        df[column] = pd.to_numeric(df[column], errors='coerce').fillna(0)

    for column in ['sku', 'product_id', 'product_name']:
        if column not in df.columns:
            df[column] = None
    df['sku'] = df['sku'].fillna('unknown')
    df['product_id'] = df['product_id'].fillna('unknown')

    products = (
        df.groupby(['sku', 'product_id'], sort=False)
        .agg(
            product_name=('product_name', 'first'),
            **{column: (column, 'sum') for column in columns}
        )
        .reset_index()
    )

    products['avg_price'] = (
        products['total_revenue'] / products['total_qty_ordered'].where(products['total_qty_ordered'] > 0)
    ).fillna(0)

    sort_column = 'total_qty_ordered' if sort_by == 'quantity' else 'total_revenue'
    products = products.sort_values(sort_column, ascending=False, kind='stable').head(limit)

    return make_json_serializable(products.to_dict(orient='records'))


def get_top_products(
    pipeline: ReportPipeline,
    options: QueryOptions,
    limit: int = 10,
    sort_by: str = 'revenue',
) -> Dict:
    """Fetch the best selling products for the period."""
    if sort_by not in ('revenue', 'quantity'):
        raise ValueError(f"sort_by must be 'revenue' or 'quantity', got {sort_by!r}")

    site_filter = pipeline.site_filter(options.tenant_id, options.site_id)
    query = QUERY.format(
        table=pipeline.table(options.dataset_id, 'mv_agg_product_performance_daily'),
        site_filter=site_filter.clause,
    )
    params = {**options.date_params(), **site_filter.params}

    result = pipeline.execute(query, params, options, TOP_PRODUCTS)

    return {
        'products': rank_products(result.rows, limit=limit, sort_by=sort_by),
        'data_quality': result.data_quality,
    }
