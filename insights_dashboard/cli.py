#!/usr/bin/env python3
"""
Command line report runner.

Runs one report (or a bundle of reports) for a tenant and prints the
result as JSON, normalized to the tenant's base currency.
"""

from typing import List, Optional
import argparse
import json
import sys

from .core.config import COMBINE_ALL_SITES
from .core.exceptions import InsightsError
from .core.utils import safe_json_dumps
from .handler import get_pipeline, run_report_request
from .reports import REPORTS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run eCommerce reports for a tenant')
    parser.add_argument('report', choices=sorted(REPORTS) + ['bundle'], help='Report to run')
    parser.add_argument('--tenant', required=True, help='Tenant ID')
    parser.add_argument('--site', default=COMBINE_ALL_SITES, help='Site ID (default: all sites)')
    parser.add_argument('--start', required=True, help='Start date (YYYY-MM-DD)')
    parser.add_argument('--end', required=True, help='End date (YYYY-MM-DD)')
    parser.add_argument('--dataset', help='Warehouse dataset (default: from tenant settings)')
    parser.add_argument('--sections', nargs='+', choices=sorted(REPORTS),
                        help='Reports to include in a bundle')
    parser.add_argument('--options', help='Extra report arguments as JSON, e.g. \'{"limit": 20}\'')
    parser.add_argument('--output', help='Output JSON file path')
    return parser


def main(argv: Optional[List[str]] = None, pipeline=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        options = json.loads(args.options) if args.options else None
    except ValueError as e:
        print(f"Invalid --options JSON: {e}", file=sys.stderr)
        return 2

    event = {
        'report': args.report,
        'tenant_id': args.tenant,
        'site_id': args.site,
        'start_date': args.start,
        'end_date': args.end,
        'dataset_id': args.dataset,
        'sections': args.sections,
        'options': options,
    }

    try:
        result = run_report_request(event, pipeline or get_pipeline())
    except (InsightsError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = safe_json_dumps(result)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(output)
        print(f"Saved to {args.output}")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
