"""
Combining rows that came from several sites of a group.
"""

from typing import Any, Dict, List, Sequence

from ..core.config import SITE_FIELD
from ..core.utils import to_number


def _without_site(row: Dict[str, Any], site_field: str) -> Dict[str, Any]:
    return {k: v for k, v in row.items() if k != site_field}


def aggregate_grouped_rows(
    rows: Sequence[Dict[str, Any]],
    group_by: Sequence[str],
    sum_fields: Sequence[str],
    max_fields: Sequence[str] = (),
    site_field: str = SITE_FIELD,
) -> List[Dict[str, Any]]:
    """
    Collapse already-converted rows from multiple sites into one row per group.

    Rows whose ``group_by`` values match are merged: ``sum_fields`` are
    added (missing or non-numeric counts as zero) and ``max_fields`` take
    the largest value seen. Other fields come from the group's first row.
    The site field is always dropped, since a combined row has no single
    site. When the rows span at most one site nothing is merged.

    Args:
        rows: Rows to combine
        group_by: Fields forming the group key
        sum_fields: Additive fields
        max_fields: Fields taking the maximum
        site_field: Field holding the site identifier

    Returns:
        New list of new rows; output group order is not significant.
    """
    if not rows:
        return []

    site_ids = {row.get(site_field) for row in rows if row.get(site_field)}
    if len(site_ids) <= 1:
        return [_without_site(row, site_field) for row in rows]

    groups: Dict[str, List[Dict[str, Any]]] = {}
    for row in rows:
        key = '|'.join(
            '' if row.get(name) is None else str(row.get(name)) for name in group_by
        )
        groups.setdefault(key, []).append(row)

    aggregated = []
    for group_rows in groups.values():
        combined = _without_site(group_rows[0], site_field)

        if len(group_rows) > 1:
            for name in sum_fields:
                combined[name] = sum(to_number(row.get(name)) for row in group_rows)
            for name in max_fields:
                combined[name] = max(to_number(row.get(name)) for row in group_rows)

        aggregated.append(combined)

    return aggregated
