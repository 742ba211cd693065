"""
Tenant and site records read from the tenant metadata store.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


def _clean_code(value: Any) -> Optional[str]:
    if value is None:
        return None
    code = str(value).strip().upper()
    return code or None


def _clean_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    ident = str(value).strip()
    return ident or None


@dataclass(frozen=True)
class Site:
    """A physical storefront, or a grouping of several of them."""

    site_id: str
    tenant_id: Optional[str] = None
    site_name: Optional[str] = None
    warehouse_site_id: Optional[str] = None
    commerce_store_id: Optional[str] = None
    currency_code: Optional[str] = None
    is_grouping: bool = False
    member_site_ids: Tuple[str, ...] = ()

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Site':
        """Build a Site from a store document."""
        # Store currency wins over display/base currency
        currency = (
            _clean_code(item.get('store_currency_code'))
            or _clean_code(item.get('display_currency_code'))
            or _clean_code(item.get('base_currency_code'))
        )
        members = item.get('member_site_ids') or ()
        return cls(
            site_id=str(item.get('site_id', '')),
            tenant_id=item.get('tenant_id'),
            site_name=item.get('site_name'),
            warehouse_site_id=_clean_id(item.get('warehouse_site_id')),
            commerce_store_id=_clean_id(item.get('commerce_store_id')),
            currency_code=currency,
            is_grouping=bool(item.get('is_grouping', False)),
            member_site_ids=tuple(str(m) for m in members),
        )


@dataclass(frozen=True)
class Tenant:
    """A customer organization and its currency settings."""

    tenant_id: str
    tenant_name: Optional[str] = None
    dataset_id: Optional[str] = None
    base_currency: Optional[str] = None
    monthly_rates: Dict[str, Dict[str, float]] = field(default_factory=dict)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Tenant':
        """Build a Tenant from a store document."""
        settings = item.get('currency_settings') or {}

        rates: Dict[str, Dict[str, float]] = {}
        for currency, by_month in (settings.get('monthly_rates') or {}).items():
            code = _clean_code(currency)
            if not code or not isinstance(by_month, dict):
                continue
            months = rates.setdefault(code, {})
            for month_key, rate in by_month.items():
                try:
                    months[str(month_key)] = float(rate)
                except (TypeError, ValueError):
                    # Unusable rate is a configuration gap, skipped at lookup time
                    continue

        return cls(
            tenant_id=str(item.get('tenant_id', '')),
            tenant_name=item.get('tenant_name'),
            dataset_id=item.get('dataset_id'),
            base_currency=_clean_code(settings.get('base_currency')),
            monthly_rates=rates,
        )
