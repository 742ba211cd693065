"""
AWS Lambda entry point for report requests.

Event parameters:
    report: Report name (see reports.REPORTS), or "bundle"
    tenant_id: Tenant identifier
    site_id: Site identifier or "all_combined"
    start_date / end_date: YYYY-MM-DD
    dataset_id: Warehouse dataset (optional, looked up from the tenant)
    options: Extra keyword arguments for the report (optional)
    sections: Report names for a bundle (optional)
"""

from typing import Any, Dict, Optional
import json
import logging

from .core.config import AppConfig
from .core.exceptions import ReportNotFoundError, SiteNotFoundError, TenantNotFoundError
from .core.utils import safe_json_dumps
from .data.pipeline import QueryOptions, ReportPipeline
from .reports import get_report, report_options
from .services.report_bundle import build_report_bundle

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('report', 'tenant_id', 'site_id', 'start_date', 'end_date')

_pipeline: Optional[ReportPipeline] = None


def get_pipeline() -> ReportPipeline:
    """Pipeline over DynamoDB and BigQuery, created once per container."""
    global _pipeline
    if _pipeline is None:
        from .data.tenant_store import TenantMetadataStore
        from .data.warehouse import BigQueryExecutor

        config = AppConfig.load()
        _pipeline = ReportPipeline(
            TenantMetadataStore(config), BigQueryExecutor(config), config
        )
    return _pipeline


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": safe_json_dumps(body),
    }


def run_report_request(event: Dict[str, Any], pipeline: ReportPipeline) -> Dict[str, Any]:
    """
    Run the report described by ``event``.

    Raises:
        ValueError: missing or malformed parameters
        ReportNotFoundError, TenantNotFoundError, SiteNotFoundError
    """
    missing = [name for name in REQUIRED_FIELDS if not event.get(name)]
    if missing:
        raise ValueError(f"Missing required parameters: {', '.join(missing)}")

    tenant_id = event['tenant_id']
    dataset_id = event.get('dataset_id') or pipeline.dataset_for(tenant_id)

    options = QueryOptions(
        tenant_id=tenant_id,
        dataset_id=dataset_id,
        site_id=event['site_id'],
        start_date=event['start_date'],
        end_date=event['end_date'],
    )

    if event['report'] == 'bundle':
        return build_report_bundle(
            pipeline,
            options,
            sections=event.get('sections'),
            report_kwargs=event.get('options'),
        )

    report = get_report(event['report'])
    return report(pipeline, options, **report_options(event['report'], event.get('options')))


def lambda_handler(event, context, pipeline: Optional[ReportPipeline] = None):
    """AWS Lambda entry point."""
    if isinstance(event.get('body'), str):
        # API Gateway proxy events carry the request in the body
        try:
            event = json.loads(event['body'])
        except ValueError:
            return _response(400, {"success": False, "error": "Request body is not valid JSON"})

    try:
        data = run_report_request(event, pipeline or get_pipeline())
    except (ReportNotFoundError, TenantNotFoundError, SiteNotFoundError) as e:
        logger.warning(f"Report request rejected: {e}")
        return _response(404, {"success": False, "error": str(e)})
    except ValueError as e:
        return _response(400, {"success": False, "error": str(e)})
    except Exception as e:
        logger.exception("Report request failed")
        return _response(500, {"success": False, "error": str(e) or "Internal server error"})

    return _response(200, {"success": True, "data": data})
