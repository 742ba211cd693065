"""
BigQuery query executor for the analytics warehouse.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from google.cloud import bigquery

from ..core.config import AppConfig

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _parameter_type(value: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "BOOL"
    if isinstance(value, int):
        return "INT64"
    if isinstance(value, float):
        return "FLOAT64"
    if isinstance(value, Decimal):
        return "NUMERIC"
    if isinstance(value, datetime):
        return "TIMESTAMP"
    if isinstance(value, date):
        return "DATE"
    return "STRING"


def to_query_parameter(name: str, value: Any):
    """Translate a named Python value into a BigQuery query parameter."""
    if isinstance(value, (list, tuple)):
        element_type = _parameter_type(value[0]) if value else "STRING"
        return bigquery.ArrayQueryParameter(name, element_type, list(value))
    return bigquery.ScalarQueryParameter(name, _parameter_type(value), value)


class BigQueryExecutor:
    """Runs parameterized queries and returns plain dict rows."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        client: Optional[bigquery.Client] = None,
    ):
        self.config = config or AppConfig.load()
        self.client = client or bigquery.Client(
            project=self.config.gcp_project,
            location=self.config.bigquery_location,
        )

    @property
    def project_id(self) -> str:
        return self.config.gcp_project or self.client.project

    def table(self, dataset_id: str, table_name: str) -> str:
        """Fully qualified, backtick-quoted table reference."""
        return f"`{self.project_id}.{dataset_id}.{table_name}`"

    def run(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a query with named parameters.

        Args:
            query: SQL text referencing parameters as ``@name``
            params: Parameter name -> value

        Returns:
            List of result rows as dicts
        """
        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                to_query_parameter(name, value) for name, value in (params or {}).items()
            ],
            maximum_bytes_billed=self.config.maximum_bytes_billed,
        )

        try:
            job = self.client.query(
                query, job_config=job_config, location=self.config.bigquery_location
            )
            rows = [dict(row.items()) for row in job.result()]
        except Exception as e:
            logger.error(f"BigQuery error: {e}")
            raise

        logger.info(f"Query returned {len(rows)} rows")
        return rows
