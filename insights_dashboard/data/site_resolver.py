"""
Resolution of a logical site selection into physical identifiers.

A selection is either the "combine all sites" sentinel (no filtering),
a plain site, or a grouping site whose members are resolved one level
deep. The outcome is a tagged SiteResolution so "no filter" and
"not found" can never be confused.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import logging

from ..core.config import COMBINE_ALL_SITES
from .models import Site

logger = logging.getLogger(__name__)


class ResolutionKind(Enum):
    """Outcome of resolving a site selection."""
    NO_FILTER = "no_filter"      # combine all sites
    NOT_FOUND = "not_found"      # requested site missing or unusable
    RESOLVED = "resolved"        # concrete identifiers available


class IdScheme(Enum):
    """Which physical identifier to resolve to."""
    WAREHOUSE = "warehouse"
    COMMERCE = "commerce"


@dataclass(frozen=True)
class SiteResolution:
    kind: ResolutionKind
    ids: Tuple[str, ...] = ()
    reason: Optional[str] = None

    @classmethod
    def no_filter(cls) -> 'SiteResolution':
        return cls(ResolutionKind.NO_FILTER)

    @classmethod
    def not_found(cls, reason: str) -> 'SiteResolution':
        return cls(ResolutionKind.NOT_FOUND, reason=reason)

    @classmethod
    def resolved(cls, ids) -> 'SiteResolution':
        # Ordered, first occurrence wins
        return cls(ResolutionKind.RESOLVED, ids=tuple(dict.fromkeys(ids)))

    @property
    def is_no_filter(self) -> bool:
        return self.kind is ResolutionKind.NO_FILTER

    @property
    def is_not_found(self) -> bool:
        return self.kind is ResolutionKind.NOT_FOUND

    @property
    def is_resolved(self) -> bool:
        return self.kind is ResolutionKind.RESOLVED


def _physical_id(site: Site, scheme: IdScheme) -> Optional[str]:
    if scheme is IdScheme.COMMERCE:
        return site.commerce_store_id
    return site.warehouse_site_id


def resolve_site(
    store,
    tenant_id: str,
    site_id: Optional[str],
    id_scheme: IdScheme = IdScheme.WAREHOUSE,
    combine_all: str = COMBINE_ALL_SITES,
) -> SiteResolution:
    """
    Resolve a site selection to warehouse (or commerce) identifiers.

    Args:
        store: Tenant metadata store
        tenant_id: Owning tenant
        site_id: Logical site identifier, the combine-all sentinel, or None
        id_scheme: Identifier family to collect
        combine_all: Sentinel meaning "no filter"

    Returns:
        SiteResolution. A grouping site whose members all lack an
        identifier resolves to an empty identifier tuple.
    """
    if not site_id or site_id == combine_all:
        return SiteResolution.no_filter()

    item = store.get_site(tenant_id, site_id)
    if not item:
        logger.warning(f"Site not found: {tenant_id}/{site_id}")
        return SiteResolution.not_found("site not found")

    site = Site.from_item(item)

    if site.is_grouping:
        logger.info(
            f"Resolving grouping site {site_id} with {len(site.member_site_ids)} members"
        )
        ids = []
        for member_id in site.member_site_ids:
            member_item = store.get_site(tenant_id, member_id)
            if not member_item:
                logger.warning(f"Grouped site {member_id} of {site_id} not found, skipping")
                continue

            member = Site.from_item(member_item)
            physical_id = None if member.is_grouping else _physical_id(member, id_scheme)
            if not physical_id:
                logger.warning(
                    f"Grouped site {member_id} of {site_id} has no "
                    f"{id_scheme.value} identifier, skipping"
                )
                continue
            ids.append(physical_id)

        logger.info(f"Resolved {site_id} to {ids}")
        return SiteResolution.resolved(ids)

    physical_id = _physical_id(site, id_scheme)
    if not physical_id:
        logger.warning(f"Site {site_id} has no {id_scheme.value} identifier")
        return SiteResolution.not_found(f"site has no {id_scheme.value} identifier")

    return SiteResolution.resolved([physical_id])
