"""
Customer counts and revenue per customer.
"""

from typing import Dict, List

from ..core.utils import is_number, safe_divide, to_number
from ..data.currency import MonetaryField
from ..data.pipeline import QueryOptions, ReportDefinition, ReportPipeline


def with_total_revenue(row: Dict) -> Dict:
    """Fill ``total_revenue`` from the per-customer figure when the row lacks it."""
    if is_number(row.get('total_revenue')):
        return row
    return {
        **row,
        'total_revenue': to_number(row.get('revenue_per_customer')) * to_number(row.get('unique_customers')),
    }


# revenue_per_customer is a ratio, so only its numerator and denominator are summed
CUSTOMER_METRICS = ReportDefinition(
    name='customer_metrics',
    monetary_fields=(MonetaryField('total_revenue'),),
    group_by=('date',),
    sum_fields=(
        'unique_customers',
        'registered_customers',
        'guest_customers',
        'total_revenue',
    ),
    prepare_row=with_total_revenue,
)

QUERY = """
    SELECT
        date,
        website_id,
        unique_customers,
        registered_customers,
        guest_customers,
        revenue_per_customer,
        revenue_per_customer * unique_customers AS total_revenue
    FROM {table}
    WHERE date BETWEEN @start_date AND @end_date
        {site_filter}
    ORDER BY date DESC
"""


def with_revenue_per_customer(row: Dict) -> Dict:
    revenue = to_number(row.get('total_revenue'))
    return {
        **row,
        'revenue_per_customer': safe_divide(revenue, to_number(row.get('unique_customers'))),
    }


def summarize_customers(daily: List[Dict]) -> Dict:
    """Customer totals; revenue per customer is weighted by customers."""
    unique_customers = sum(to_number(row.get('unique_customers')) for row in daily)
    total_revenue = sum(to_number(row.get('total_revenue')) for row in daily)
    return {
        'total_unique_customers': unique_customers,
        'total_registered_customers': sum(to_number(row.get('registered_customers')) for row in daily),
        'total_guest_customers': sum(to_number(row.get('guest_customers')) for row in daily),
        'total_revenue': total_revenue,
        'avg_revenue_per_customer': safe_divide(total_revenue, unique_customers),
    }


def get_customer_metrics(pipeline: ReportPipeline, options: QueryOptions) -> Dict:
    """Fetch daily customer metrics and their summary."""
    site_filter = pipeline.site_filter(options.tenant_id, options.site_id)
    query = QUERY.format(
        table=pipeline.table(options.dataset_id, 'mv_agg_customer_metrics_daily'),
        site_filter=site_filter.clause,
    )
    params = {**options.date_params(), **site_filter.params}

    result = pipeline.execute(query, params, options, CUSTOMER_METRICS)
    daily = sorted(
        (with_revenue_per_customer(row) for row in result.rows),
        key=lambda row: str(row.get('date') or ''),
        reverse=True,
    )

    return {
        'daily': daily,
        'summary': summarize_customers(daily),
        'data_quality': result.data_quality,
    }
