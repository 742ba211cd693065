"""
Search performance (clicks, impressions, position) per day and per
search query, with the distribution of queries over ranking bands.
"""

from typing import Dict, List

import pandas as pd

from ..core.utils import make_json_serializable, safe_divide, to_number
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline

ADDITIVE_COLUMNS = ('total_clicks', 'total_impressions', 'weighted_position', 'attributed_revenue')

SEO_PERFORMANCE = ReportDefinition(
    name='seo_performance',
    monetary_fields=(MonetaryField('attributed_revenue'),),
    group_by=('date',),
    sum_fields=ADDITIVE_COLUMNS,
    max_fields=('worst_position',),
)

SEO_QUERIES = ReportDefinition(
    name='seo_queries',
    monetary_fields=(MonetaryField('attributed_revenue'),),
    group_by=('date', 'query_text'),
    sum_fields=ADDITIVE_COLUMNS,
)

# Position is averaged weighted by impressions, so it stays additive across sites
QUERY = """
    SELECT
        date,
        website_id,
        SUM(total_clicks) AS total_clicks,
        SUM(total_impressions) AS total_impressions,
        SUM(avg_position * total_impressions) AS weighted_position,
        MAX(avg_position) AS worst_position,
        SUM(attributed_revenue) AS attributed_revenue
    FROM {table}
    WHERE date BETWEEN @start_date AND @end_date
        {site_filter}
    GROUP BY date, website_id
    ORDER BY date DESC
"""

QUERIES_QUERY = """
    SELECT
        date,
        website_id,
        query_text,
        SUM(total_clicks) AS total_clicks,
        SUM(total_impressions) AS total_impressions,
        SUM(avg_position * total_impressions) AS weighted_position,
        SUM(attributed_revenue) AS attributed_revenue
    FROM {table}
    WHERE date BETWEEN @start_date AND @end_date
        {site_filter}
    GROUP BY date, website_id, query_text
"""

POSITION_BUCKETS = (
    ('1-3', 3),
    ('4-10', 10),
    ('11-20', 20),
    ('21-50', 50),
    ('51+', None),
)


def position_bucket(position: float) -> str:
    """Ranking band for an average position."""
    for label, upper in POSITION_BUCKETS:
        if upper is None or position <= upper:
            return label
    return POSITION_BUCKETS[-1][0]


def with_derived_metrics(row: Dict) -> Dict:
    clicks = to_number(row.get('total_clicks'))
    impressions = to_number(row.get('total_impressions'))
    avg_position = safe_divide(to_number(row.get('weighted_position')), impressions)
    return {
        **row,
        'avg_ctr': safe_divide(clicks, impressions),
        'avg_position': avg_position,
        'position_range': position_bucket(avg_position) if impressions else None,
    }


def summarize_seo(daily: List[Dict]) -> Dict:
    clicks = sum(to_number(row.get('total_clicks')) for row in daily)
    impressions = sum(to_number(row.get('total_impressions')) for row in daily)
    weighted = sum(to_number(row.get('weighted_position')) for row in daily)
    worst = max((to_number(row.get('worst_position')) for row in daily), default=0)
    return {
        'total_clicks': clicks,
        'total_impressions': impressions,
        'avg_ctr': safe_divide(clicks, impressions),
        'avg_position': safe_divide(weighted, impressions),
        'worst_position': worst,
        'total_attributed_revenue': sum(to_number(row.get('attributed_revenue')) for row in daily),
    }


def rank_queries(rows: List[Dict], sort_by: str = 'clicks', limit: int = 50) -> List[Dict]:
    """
    Roll per-day query rows up to one row per search query and rank them.

    Args:
        rows: Query rows already merged across sites
        sort_by: 'clicks' or 'impressions'
        limit: Number of queries to keep
    """
    if not rows:
        return []

    df = pd.DataFrame(rows)
    for column in ADDITIVE_COLUMNS:
        if column not in df.columns:
            df[column] = 0
        df[column] = pd.to_numeric(df[column], errors='coerce').fillna(0)
    if 'query_text' not in df.columns:
        df['query_text'] = None
    df['query_text'] = df['query_text'].fillna('(not set)')

    queries = df.groupby('query_text', sort=False)[list(ADDITIVE_COLUMNS)].sum().reset_index()

    impressions = queries['total_impressions'].where(queries['total_impressions'] > 0)
    queries['avg_ctr'] = (queries['total_clicks'] / impressions).fillna(0)
    queries['avg_position'] = (queries['weighted_position'] / impressions).fillna(0)

    sort_column = 'total_impressions' if sort_by == 'impressions' else 'total_clicks'
    queries = queries.sort_values(sort_column, ascending=False, kind='stable').head(limit)
    queries = queries.drop(columns=['weighted_position'])

    return make_json_serializable(queries.to_dict(orient='records'))


def position_distribution(rows: List[Dict]) -> List[Dict]:
    """
    Clicks and impressions per ranking band.

    Each query row falls in the band of its own impression-weighted
    position; rows without impressions are left out. Every band is
    listed, in ranking order.
    """
    totals = {label: {'total_clicks': 0, 'total_impressions': 0} for label, _ in POSITION_BUCKETS}
    for row in rows:
        impressions = to_number(row.get('total_impressions'))
        if not impressions:
            continue
        label = position_bucket(safe_divide(to_number(row.get('weighted_position')), impressions))
        totals[label]['total_clicks'] += to_number(row.get('total_clicks'))
        totals[label]['total_impressions'] += impressions

    return [{'position_range': label, **totals[label]} for label, _ in POSITION_BUCKETS]


def get_seo_performance(pipeline: ReportPipeline, options: QueryOptions, limit: int = 50) -> Dict:
    """
    Fetch daily search performance, top queries and the position distribution.

    Args:
        limit: Number of queries in each top-queries list
    """
    site_filter = pipeline.site_filter(options.tenant_id, options.site_id)
    table = pipeline.table(options.dataset_id, 'agg_seo_performance_daily')
    params = {**options.date_params(), **site_filter.params}

    daily_result = pipeline.execute(
        QUERY.format(table=table, site_filter=site_filter.clause), params, options, SEO_PERFORMANCE
    )
    query_result = pipeline.execute(
        QUERIES_QUERY.format(table=table, site_filter=site_filter.clause), params, options, SEO_QUERIES
    )

    daily = sorted(
        (with_derived_metrics(row) for row in daily_result.rows),
        key=lambda row: str(row.get('date') or ''),
        reverse=True,
    )
    issues = daily_result.issues.merge(query_result.issues)

    return {
        'daily': daily,
        'summary': summarize_seo(daily),
        'top_queries': rank_queries(query_result.rows, sort_by='clicks', limit=limit),
        'top_impressions': rank_queries(query_result.rows, sort_by='impressions', limit=limit),
        'position_distribution': position_distribution(query_result.rows),
        'data_quality': issues.to_dict(),
    }
