"""
Services built on top of the report pipelines.
"""

from .report_bundle import (
    DEFAULT_SECTIONS,
    run_concurrently,
    build_report_bundle,
    bundle_to_json,
)

__all__ = [
    'DEFAULT_SECTIONS',
    'run_concurrently',
    'build_report_bundle',
    'bundle_to_json',
]
