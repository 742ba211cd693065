"""
Website behavior (sessions, engagement, bounce) per day.
"""

from typing import Dict, List

from ..core.utils import safe_divide, to_number
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline

ADDITIVE_COLUMNS = (
    'sessions',
    'pageviews',
    'users',
    'bounces',
    'engaged_sessions',
    'session_duration_seconds',
    'purchase_revenue',
)

WEBSITE_BEHAVIOR = ReportDefinition(
    name='website_behavior',
    monetary_fields=(MonetaryField('purchase_revenue'),),
    group_by=('date',),
    sum_fields=ADDITIVE_COLUMNS,
)

QUERY = """
    SELECT
        date,
        website_id,
        sessions,
        pageviews,
        users,
        bounces,
        engaged_sessions,
        session_duration_seconds,
        purchase_revenue
    FROM {table}
    WHERE date BETWEEN @start_date AND @end_date
        {site_filter}
    ORDER BY date DESC
"""


def summarize_behavior(daily: List[Dict]) -> Dict:
    totals = {column: sum(to_number(row.get(column)) for row in daily) for column in ADDITIVE_COLUMNS}
    sessions = totals['sessions']
    return {
        **totals,
        'bounce_rate': safe_divide(totals['bounces'], sessions),
        'engagement_rate': safe_divide(totals['engaged_sessions'], sessions),
        'avg_session_duration': safe_divide(totals['session_duration_seconds'], sessions),
        'pageviews_per_session': safe_divide(totals['pageviews'], sessions),
        'revenue_per_session': safe_divide(totals['purchase_revenue'], sessions),
    }


def get_website_behavior(pipeline: ReportPipeline, options: QueryOptions) -> Dict:
    """Fetch daily website behavior and a period summary."""
    site_filter = pipeline.site_filter(options.tenant_id, options.site_id)
    query = QUERY.format(
        table=pipeline.table(options.dataset_id, 'agg_website_behavior_daily'),
        site_filter=site_filter.clause,
    )
    params = {**options.date_params(), **site_filter.params}

    result = pipeline.execute(query, params, options, WEBSITE_BEHAVIOR)
    daily = sorted(result.rows, key=lambda row: str(row.get('date') or ''), reverse=True)

    return {
        'daily': daily,
        'summary': summarize_behavior(daily),
        'data_quality': result.data_quality,
    }
