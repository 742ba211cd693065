"""
Concurrent report bundles.

Pages and the AI assistant need several reports for the same request.
The reports have no ordering dependency on each other, so they run on a
thread pool and are joined before returning. A failing report fails the
whole bundle; partial bundles are never returned as success.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Sequence
import logging

from ..core.utils import safe_json_dumps
from ..data.pipeline import QueryOptions, ReportPipeline
from ..reports import get_report, report_options

logger = logging.getLogger(__name__)

DEFAULT_SECTIONS = (
    'sales_overview',
    'top_products',
    'customer_metrics',
    'seo_performance',
    'website_behavior',
)


def run_concurrently(tasks: Mapping[str, Callable[[], Any]], max_workers: int = 4) -> Dict[str, Any]:
    """
    Run independent callables concurrently and collect their results by name.

    The first exception raised by any task is re-raised once every task
    has finished.
    """
    if not tasks:
        return {}

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(tasks)))) as pool:
        futures = {name: pool.submit(task) for name, task in tasks.items()}

    # Leaving the with-block waits for every task
    return {name: future.result() for name, future in futures.items()}


def build_report_bundle(
    pipeline: ReportPipeline,
    options: QueryOptions,
    sections: Optional[Sequence[str]] = None,
    report_kwargs: Optional[Mapping[str, Dict[str, Any]]] = None,
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run several reports for one request concurrently.

    Args:
        pipeline: Report pipeline shared by all sections
        options: Request options
        sections: Report names (defaults to DEFAULT_SECTIONS)
        report_kwargs: Extra keyword arguments per report name
        max_workers: Thread pool size (defaults to the pipeline config)

    Returns:
        Dictionary with request metadata, one entry per section and a
        combined data-quality flag
    """
    sections = list(sections or DEFAULT_SECTIONS)
    report_kwargs = report_kwargs or {}
    if not isinstance(report_kwargs, Mapping):
        raise ValueError("Bundle options must map report names to their options")

    tasks = {}
    for name in sections:
        report = get_report(name)
        kwargs = report_options(name, report_kwargs.get(name))
        tasks[name] = lambda report=report, kwargs=kwargs: report(pipeline, options, **kwargs)

    logger.info(f"Building report bundle for {options.tenant_id}: {sections}")
    results = run_concurrently(
        tasks, max_workers=max_workers or pipeline.config.max_workers
    )

    incomplete = [
        name for name, result in results.items()
        if not result.get('data_quality', {}).get('complete', True)
    ]

    return {
        'tenant_id': options.tenant_id,
        'site_id': options.site_id,
        'start_date': options.start_date,
        'end_date': options.end_date,
        'generated_at': datetime.now().isoformat(),
        'sections': results,
        'data_quality': {
            'complete': not incomplete,
            'incomplete_sections': incomplete,
        },
    }


def bundle_to_json(bundle: Dict[str, Any]) -> str:
    """Serialize a bundle for downstream consumers such as the assistant."""
    return safe_json_dumps(bundle)
