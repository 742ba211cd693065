"""
Sales by hour of day, with peak hours.
"""

from typing import Dict, List

import pandas as pd

from ..core.utils import make_json_serializable
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline

HOURLY_SALES = ReportDefinition(
    name='hourly_sales',
    monetary_fields=(MonetaryField('total_revenue'),),
    group_by=('date', 'hour'),
    sum_fields=('total_orders', 'total_revenue'),
)

QUERY = """
    SELECT
        date,
        hour,
        website_id,
        total_orders,
        total_revenue
    FROM {table}
    WHERE date BETWEEN @start_date AND @end_date
        {site_filter}
    ORDER BY date DESC, hour DESC
"""


def bucket_by_hour(rows: List[Dict]) -> List[Dict]:
    """
    Totals for each of the 24 hours, with per-day averages.

    Averages divide by the number of distinct dates that had data for
    that hour.
    """
    empty = pd.DataFrame(columns=['date', 'hour', 'total_orders', 'total_revenue'])
    df = pd.DataFrame(rows) if rows else empty
    for column in empty.columns:
        if column not in df.columns:
            df[column] = None

    df['hour'] = pd.to_numeric(df['hour'], errors='coerce')
    df['total_orders'] = pd.to_numeric(df['total_orders'], errors='coerce').fillna(0)
    df['total_revenue'] = pd.to_numeric(df['total_revenue'], errors='coerce').fillna(0)

    by_hour = df.dropna(subset=['hour']).groupby('hour').agg(
        total_orders=('total_orders', 'sum'),
        total_revenue=('total_revenue', 'sum'),
        day_count=('date', 'nunique'),
    )

    hourly = []
    for hour in range(24):
        if hour in by_hour.index:
            stats = by_hour.loc[hour]
            orders = float(stats['total_orders'])
            revenue = float(stats['total_revenue'])
            days = int(stats['day_count'])
        else:
            orders, revenue, days = 0.0, 0.0, 0

        hourly.append({
            'hour': hour,
            'total_orders': orders,
            'total_revenue': revenue,
            'avg_orders_per_day': orders / days if days else 0,
            'avg_revenue_per_day': revenue / days if days else 0,
        })

    return hourly


def peak_hours(hourly: List[Dict]) -> Dict:
    # First hour wins ties
    return {
        'orders': max(hourly, key=lambda bucket: bucket['total_orders']),
        'revenue': max(hourly, key=lambda bucket: bucket['total_revenue']),
    }


def get_hourly_sales(pipeline: ReportPipeline, options: QueryOptions) -> Dict:
    """Fetch hourly sales buckets and the peak hours."""
    site_filter = pipeline.site_filter(options.tenant_id, options.site_id)
    query = QUERY.format(
        table=pipeline.table(options.dataset_id, 'mv_agg_sales_overview_hourly'),
        site_filter=site_filter.clause,
    )
    params = {**options.date_params(), **site_filter.params}

    result = pipeline.execute(query, params, options, HOURLY_SALES)
    hourly = bucket_by_hour(result.rows)

    return make_json_serializable({
        'hourly': hourly,
        'peaks': peak_hours(hourly),
        'data_quality': result.data_quality,
    })
