"""
Site filter predicates for warehouse queries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from ..core.config import SITE_FIELD


@dataclass(frozen=True)
class SiteFilter:
    """A WHERE-clause fragment and the parameters it binds."""

    clause: str = ''
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.clause


def build_site_filter(
    ids: Optional[Sequence[str]],
    column: str = SITE_FIELD,
    param_name: str = SITE_FIELD,
) -> SiteFilter:
    """
    Build an equality or IN predicate over resolved identifiers.

    Args:
        ids: Resolved identifiers, or None for "no filter"
        column: Column to filter, optionally table-qualified (``o.website_id``)
        param_name: Base name for the bound parameters

    Returns:
        SiteFilter; the clause starts with ``AND`` so it can be appended to
        an existing WHERE condition.

    Raises:
        ValueError: if ``ids`` is an empty sequence
    """
    if ids is None:
        return SiteFilter()

    ids = list(ids)
    if not ids:
        raise ValueError("Cannot build a site filter from an empty identifier set")

    if len(ids) == 1:
        return SiteFilter(
            clause=f"AND {column} = @{param_name}",
            params={param_name: ids[0]},
        )

    # One distinctly named parameter per identifier
    params = {f"{param_name}{i}": value for i, value in enumerate(ids)}
    placeholders = ', '.join(f"@{name}" for name in params)
    return SiteFilter(
        clause=f"AND {column} IN ({placeholders})",
        params=params,
    )
