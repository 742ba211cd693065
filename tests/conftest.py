"""
Shared fixtures: in-memory stand-ins for the tenant metadata store and
the warehouse.
"""

import copy

import pytest

from insights_dashboard.core.config import AppConfig
from insights_dashboard.data.pipeline import QueryOptions, ReportPipeline


class FakeTenantStore:
    """Tenant metadata store backed by dicts."""

    def __init__(self, tenants=None, sites=None):
        self.tenants = tenants or {}
        # {tenant_id: {site_id: item}}
        self.sites = sites or {}
        self.site_reads = []

    def get_tenant(self, tenant_id):
        item = self.tenants.get(tenant_id)
        return copy.deepcopy(item) if item else None

    def list_sites(self, tenant_id):
        return [copy.deepcopy(item) for item in self.sites.get(tenant_id, {}).values()]

    def get_site(self, tenant_id, site_id):
        self.site_reads.append((tenant_id, site_id))
        item = self.sites.get(tenant_id, {}).get(site_id)
        return copy.deepcopy(item) if item else None


class FakeWarehouse:
    """Warehouse returning canned rows and recording every query."""

    project_id = 'test-project'

    def __init__(self, rows=None):
        self.rows = rows or []
        self.calls = []

    def table(self, dataset_id, table_name):
        return f"`{self.project_id}.{dataset_id}.{table_name}`"

    def run(self, query, params=None):
        self.calls.append((query, dict(params or {})))
        return copy.deepcopy(self.rows)


def make_site(site_id, warehouse_id=None, store_id=None, currency=None, members=None, **extra):
    item = {'tenant_id': 'acme', 'site_id': site_id, 'site_name': site_id.title()}
    if warehouse_id:
        item['warehouse_site_id'] = warehouse_id
    if store_id:
        item['commerce_store_id'] = store_id
    if currency:
        item['store_currency_code'] = currency
    if members is not None:
        item['is_grouping'] = True
        item['member_site_ids'] = members
    item.update(extra)
    return item


@pytest.fixture
def tenant_item():
    return {
        'tenant_id': 'acme',
        'tenant_name': 'Acme Interiors',
        'dataset_id': 'acme_dataset',
        'currency_settings': {
            'base_currency': 'GBP',
            'monthly_rates': {
                'EUR': {'2024-05': 1.17, '2024-04': 1.16},
                'USD': {'2024-05': 1.25},
            },
        },
    }


@pytest.fixture
def site_items():
    return {
        'uk': make_site('uk', 'wh-uk', '1', 'GBP'),
        'eu': make_site('eu', 'wh-eu', '2', 'EUR'),
        'us': make_site('us', 'wh-us', '3', 'USD'),
        'no_wh': make_site('no_wh', store_id='4', currency='EUR'),
        'global': make_site('global', members=['uk', 'eu', 'us']),
        'europe': make_site('europe', members=['eu', 'no_wh', 'gone']),
        'empty_group': make_site('empty_group', members=['no_wh']),
    }


@pytest.fixture
def store(tenant_item, site_items):
    return FakeTenantStore(tenants={'acme': tenant_item}, sites={'acme': site_items})


@pytest.fixture
def warehouse():
    return FakeWarehouse()


@pytest.fixture
def config():
    return AppConfig(gcp_project='test-project', default_base_currency='GBP')


@pytest.fixture
def pipeline(store, warehouse, config):
    return ReportPipeline(store, warehouse, config)


@pytest.fixture
def make_options():
    def _make(site_id='all_combined', start_date='2024-05-01', end_date='2024-05-31'):
        return QueryOptions(
            tenant_id='acme',
            dataset_id='acme_dataset',
            site_id=site_id,
            start_date=start_date,
            end_date=end_date,
        )
    return _make
