"""
Currency conversion into a tenant's base reporting currency.

Rates are stored per source currency and calendar month, defined as
"1 unit of base currency = rate units of source currency", so a value
recorded in the source currency converts back with ``value / rate``.
A missing rate is a configuration gap: the value is returned
unconverted and the gap is recorded for the response's data-quality flag.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple
import logging
import re

import pandas as pd

from ..core.config import DEFAULT_BASE_CURRENCY, SITE_FIELD
from ..core.utils import is_number, to_number
from .models import Site, Tenant

logger = logging.getLogger(__name__)

MONTH_KEY_PATTERN = re.compile(r'^(\d{4})-(0[1-9]|1[0-2])$')
ISO_DATE_PATTERN = re.compile(r'^(\d{4})-(0[1-9]|1[0-2])-\d{2}$')
COMPACT_DATE_PATTERN = re.compile(r'^(\d{4})(0[1-9]|1[0-2])\d{2}$')


@dataclass(frozen=True)
class CurrencyContext:
    """Request-scoped conversion settings for one tenant."""

    base_currency: str
    monthly_rates: Mapping[str, Mapping[str, float]]
    site_currencies: Mapping[str, str]

    def currency_for(self, site_id: Optional[str]) -> Optional[str]:
        if not site_id:
            return None
        return self.site_currencies.get(str(site_id))

    def rate_for(self, currency: str, month_key: str) -> Optional[float]:
        return (self.monthly_rates.get(currency) or {}).get(month_key)


@dataclass
class ConversionIssues:
    """Conversions skipped during one request."""

    missing_rates: Set[Tuple[str, str]] = field(default_factory=set)
    unknown_currencies: Set[str] = field(default_factory=set)
    unresolved_dates: int = 0
    context_missing: bool = False

    def record_missing_rate(self, currency: str, month_key: str) -> None:
        self.missing_rates.add((currency, month_key))

    def record_unknown_currency(self, site_id: Optional[str]) -> None:
        self.unknown_currencies.add('' if site_id is None else str(site_id))

    def record_unresolved_date(self) -> None:
        self.unresolved_dates += 1

    def record_context_missing(self) -> None:
        self.context_missing = True

    def merge(self, other: 'ConversionIssues') -> 'ConversionIssues':
        """Fold the issues of another query of the same request into this one."""
        self.missing_rates |= other.missing_rates
        self.unknown_currencies |= other.unknown_currencies
        self.unresolved_dates += other.unresolved_dates
        self.context_missing = self.context_missing or other.context_missing
        return self

    @property
    def complete(self) -> bool:
        return not (
            self.missing_rates
            or self.unknown_currencies
            or self.unresolved_dates
            or self.context_missing
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'complete': self.complete,
            'missing_rates': [
                {'currency': currency, 'month': month}
                for currency, month in sorted(self.missing_rates)
            ],
            'unknown_currencies': sorted(self.unknown_currencies),
            'unresolved_dates': self.unresolved_dates,
            'context_missing': self.context_missing,
        }


def build_currency_context(
    tenant: Tenant,
    sites: Iterable[Site],
    default_currency: str = DEFAULT_BASE_CURRENCY,
) -> CurrencyContext:
    """
    Assemble a CurrencyContext from already loaded records.

    Each site's currency is addressable by its warehouse identifier and,
    when present, its commerce store identifier.
    """
    site_currencies: Dict[str, str] = {}
    for site in sites:
        if not site.currency_code:
            continue
        if site.warehouse_site_id:
            site_currencies[site.warehouse_site_id] = site.currency_code
        if site.commerce_store_id:
            site_currencies[site.commerce_store_id] = site.currency_code

    return CurrencyContext(
        base_currency=(tenant.base_currency or default_currency).upper(),
        monthly_rates=tenant.monthly_rates,
        site_currencies=site_currencies,
    )


def load_currency_context(
    store,
    tenant_id: str,
    default_currency: str = DEFAULT_BASE_CURRENCY,
) -> Optional[CurrencyContext]:
    """
    Load a tenant's currency settings and site currencies.

    Args:
        store: Tenant metadata store
        tenant_id: Tenant to load
        default_currency: Base currency used when the tenant has none

    Returns:
        CurrencyContext, or None if the tenant does not exist. Callers
        treat None as "leave values unconverted". Store errors propagate.
    """
    tenant_item = store.get_tenant(tenant_id)
    if not tenant_item:
        logger.warning(f"Tenant not found when loading currency context: {tenant_id}")
        return None

    tenant = Tenant.from_item(tenant_item)
    sites = [Site.from_item(item) for item in store.list_sites(tenant_id)]
    return build_currency_context(tenant, sites, default_currency)


def resolve_month_key(value: Any, fallback_month: Optional[str] = None) -> Optional[str]:
    """
    Calendar month (``YYYY-MM``) of a date-like value.

    Falls back to ``fallback_month`` when the value cannot be read to at
    least year-month precision. Timezone-aware values are read in UTC.
    """
    month_key = _month_of(value)
    if month_key:
        return month_key

    if fallback_month and MONTH_KEY_PATTERN.match(str(fallback_month).strip()):
        return str(fallback_month).strip()

    return None


def _month_of(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, date):
        return f"{value.year:04d}-{value.month:02d}"

    if not isinstance(value, str):
        return None

    text = value.strip()
    if len(text) < 7:
        return None

    match = (
        MONTH_KEY_PATTERN.match(text)
        or ISO_DATE_PATTERN.match(text)
        or COMPACT_DATE_PATTERN.match(text)
    )
    if match:
        return f"{match.group(1)}-{match.group(2)}"

    parsed = pd.to_datetime(text, errors='coerce', utc=True)
    if pd.isna(parsed):
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def convert_to_base_currency(
    value: Any,
    context: Optional[CurrencyContext],
    site_id: Optional[str] = None,
    store_id: Optional[str] = None,
    currency_code: Optional[str] = None,
    date: Any = None,
    fallback_month: Optional[str] = None,
    issues: Optional[ConversionIssues] = None,
) -> float:
    """
    Convert a monetary value into the tenant's base currency.

    The source currency is ``currency_code`` when given, otherwise the
    currency of ``site_id``, otherwise that of ``store_id``. Values are
    returned unchanged when there is no context, no known source
    currency, the source already is the base currency, or no positive
    rate exists for the value's month.
    """
    if value is None:
        return 0
    if not context or not value:
        return value

    source = (
        (currency_code.strip().upper() if currency_code else None)
        or context.currency_for(site_id)
        or context.currency_for(store_id)
    )
    if not source:
        unknown = site_id if site_id is not None else store_id
        logger.warning(f"No currency configured for site {unknown!r}, value left unconverted")
        if issues is not None:
            issues.record_unknown_currency(unknown)
        return value
    if source.upper() == context.base_currency.upper():
        return value

    month_key = resolve_month_key(date, fallback_month)
    if not month_key:
        logger.warning(
            f"Unable to determine month for currency conversion "
            f"(currency={source}, date={date!r})"
        )
        if issues is not None:
            issues.record_unresolved_date()
        return value

    rate = context.rate_for(source.upper(), month_key)
    if not is_number(rate) or rate <= 0:
        logger.warning(f"Missing or invalid conversion rate for {source} in {month_key}")
        if issues is not None:
            issues.record_missing_rate(source.upper(), month_key)
        return value

    return to_number(value) / rate


@dataclass(frozen=True)
class MonetaryField:
    """Where to find a monetary value and the data needed to convert it."""

    field: str
    site_field: Optional[str] = SITE_FIELD
    store_field: Optional[str] = None
    currency_field: Optional[str] = None
    date_field: Optional[str] = 'date'
    fallback_month: Optional[str] = None


def convert_monetary_fields(
    row: Dict[str, Any],
    context: Optional[CurrencyContext],
    fields: List[MonetaryField],
    fallback_month: Optional[str] = None,
    issues: Optional[ConversionIssues] = None,
) -> Dict[str, Any]:
    """
    Convert the named monetary fields of a row.

    Returns a new dict with only those fields replaced; the input row is
    never mutated. Non-numeric values are left alone.
    """
    if not context or not fields:
        return row

    converted = dict(row)
    for config in fields:
        value = row.get(config.field)
        if not is_number(value):
            continue

        converted[config.field] = convert_to_base_currency(
            value,
            context,
            site_id=row.get(config.site_field) if config.site_field else None,
            store_id=row.get(config.store_field) if config.store_field else None,
            currency_code=row.get(config.currency_field) if config.currency_field else None,
            date=row.get(config.date_field) if config.date_field else None,
            fallback_month=config.fallback_month or fallback_month,
            issues=issues,
        )

    return converted
