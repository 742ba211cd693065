"""
Core utilities for the reporting layer.
Provides configuration, exceptions and shared utilities.
"""

from .config import (
    COMBINE_ALL_SITES,
    DEFAULT_BASE_CURRENCY,
    SITE_FIELD,
    AppConfig,
)
from .exceptions import (
    InsightsError,
    TenantNotFoundError,
    SiteNotFoundError,
    ReportNotFoundError,
)
from .utils import (
    make_json_serializable,
    safe_json_dumps,
    normalize_date_value,
    is_number,
    to_number,
    safe_divide,
)

__all__ = [
    # Config
    'COMBINE_ALL_SITES',
    'DEFAULT_BASE_CURRENCY',
    'SITE_FIELD',
    'AppConfig',
    # Exceptions
    'InsightsError',
    'TenantNotFoundError',
    'SiteNotFoundError',
    'ReportNotFoundError',
    # Utils
    'make_json_serializable',
    'safe_json_dumps',
    'normalize_date_value',
    'is_number',
    'to_number',
    'safe_divide',
]
