"""
Application configuration and constants.
"""

from dataclasses import dataclass, fields
from typing import Dict, Optional
import os


# Site selection meaning "every site the tenant owns"
COMBINE_ALL_SITES = "all_combined"

# Platform default used when a tenant has no base currency configured
DEFAULT_BASE_CURRENCY = "GBP"

# Column carrying the warehouse site identifier on analytic rows
SITE_FIELD = "website_id"


@dataclass
class AppConfig:
    """Application configuration settings."""

    # AWS Settings (tenant metadata store)
    aws_access_key: Optional[str] = None
    aws_secret_key: Optional[str] = None
    aws_region: str = "eu-west-2"
    tenants_table: str = "insights-tenants"
    sites_table: str = "insights-sites"

    # Warehouse Settings
    gcp_project: Optional[str] = None
    bigquery_location: str = "europe-west2"
    maximum_bytes_billed: Optional[int] = None

    # Reporting Settings
    default_base_currency: str = DEFAULT_BASE_CURRENCY
    combine_all_sentinel: str = COMBINE_ALL_SITES
    max_workers: int = 4

    @classmethod
    def from_environment(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        bytes_billed = os.environ.get("BIGQUERY_MAXIMUM_BYTES_BILLED")
        return cls(
            aws_access_key=os.environ.get("AWS_ACCESS_KEY_ID"),
            aws_secret_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
            aws_region=os.environ.get("AWS_DEFAULT_REGION", "eu-west-2"),
            tenants_table=os.environ.get("INSIGHTS_TENANTS_TABLE", "insights-tenants"),
            sites_table=os.environ.get("INSIGHTS_SITES_TABLE", "insights-sites"),
            gcp_project=os.environ.get("GOOGLE_CLOUD_PROJECT"),
            bigquery_location=os.environ.get("BIGQUERY_LOCATION", "europe-west2"),
            maximum_bytes_billed=int(bytes_billed) if bytes_billed else None,
            default_base_currency=os.environ.get(
                "INSIGHTS_DEFAULT_CURRENCY", DEFAULT_BASE_CURRENCY
            ).upper(),
            max_workers=int(os.environ.get("INSIGHTS_MAX_WORKERS", "4")),
        )

    @classmethod
    def load(cls, overrides: Optional[Dict] = None) -> 'AppConfig':
        """Load configuration from environment first, then apply explicit overrides."""
        config = cls.from_environment()

        known = {f.name for f in fields(cls)}
        for key, value in (overrides or {}).items():
            if key not in known:
                raise ValueError(f"Unknown configuration option: {key}")
            if value is not None:
                setattr(config, key, value)

        return config
