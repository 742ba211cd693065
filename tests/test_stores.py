"""
Tests for the DynamoDB tenant store and the BigQuery executor, with the
AWS and Google clients mocked out.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from google.cloud import bigquery

from insights_dashboard.core.config import AppConfig
from insights_dashboard.data.tenant_store import TenantMetadataStore, from_dynamodb
from insights_dashboard.data.warehouse import BigQueryExecutor, to_query_parameter


@pytest.fixture
def tables():
    return {'insights-tenants': MagicMock(), 'insights-sites': MagicMock()}


@pytest.fixture
def tenant_store(tables):
    dynamodb = MagicMock()
    dynamodb.Table.side_effect = lambda name: tables[name]
    return TenantMetadataStore(AppConfig(), dynamodb=dynamodb)


def _client_error():
    return ClientError({'Error': {'Code': 'ProvisionedThroughputExceededException', 'Message': 'slow down'}}, 'Query')


class TestTenantMetadataStore:

    def test_get_tenant_converts_decimals(self, tenant_store, tables):
        tables['insights-tenants'].get_item.return_value = {
            'Item': {
                'tenant_id': 'acme',
                'currency_settings': {'monthly_rates': {'EUR': {'2024-05': Decimal('1.17')}}},
            }
        }

        item = tenant_store.get_tenant('acme')

        tables['insights-tenants'].get_item.assert_called_once_with(Key={'tenant_id': 'acme'})
        assert item['currency_settings']['monthly_rates']['EUR']['2024-05'] == 1.17

    def test_get_tenant_missing(self, tenant_store, tables):
        tables['insights-tenants'].get_item.return_value = {}
        assert tenant_store.get_tenant('nobody') is None

    def test_list_sites_follows_pages(self, tenant_store, tables):
        tables['insights-sites'].query.side_effect = [
            {'Items': [{'site_id': 'a'}], 'LastEvaluatedKey': {'site_id': 'a'}},
            {'Items': [{'site_id': 'b'}]},
        ]

        sites = tenant_store.list_sites('acme')

        assert [s['site_id'] for s in sites] == ['a', 'b']
        assert tables['insights-sites'].query.call_count == 2
        assert tables['insights-sites'].query.call_args.kwargs['ExclusiveStartKey'] == {'site_id': 'a'}

    def test_get_site(self, tenant_store, tables):
        tables['insights-sites'].get_item.return_value = {'Item': {'site_id': 'eu', 'tenant_id': 'acme'}}

        assert tenant_store.get_site('acme', 'eu') == {'site_id': 'eu', 'tenant_id': 'acme'}
        tables['insights-sites'].get_item.assert_called_once_with(
            Key={'tenant_id': 'acme', 'site_id': 'eu'}
        )

    def test_client_errors_propagate(self, tenant_store, tables):
        tables['insights-sites'].query.side_effect = _client_error()

        with pytest.raises(ClientError):
            tenant_store.list_sites('acme')

    def test_configured_table_names(self):
        dynamodb = MagicMock()
        TenantMetadataStore(AppConfig(tenants_table='t1', sites_table='s1'), dynamodb=dynamodb)

        names = [c.args[0] for c in dynamodb.Table.call_args_list]
        assert names == ['t1', 's1']


def test_from_dynamodb_nested():
    assert from_dynamodb({'a': [Decimal('2'), {'b': Decimal('0.5')}], 'c': 'x'}) == {
        'a': [2.0, {'b': 0.5}],
        'c': 'x',
    }


class TestQueryParameters:

    @pytest.mark.parametrize('value, expected_type', [
        ('wh-eu', 'STRING'),
        (3, 'INT64'),
        (1.5, 'FLOAT64'),
        (True, 'BOOL'),
        (Decimal('1.2'), 'NUMERIC'),
        (date(2024, 5, 1), 'DATE'),
    ])
    def test_scalar_types(self, value, expected_type):
        param = to_query_parameter('p', value)

        assert isinstance(param, bigquery.ScalarQueryParameter)
        assert param.type_ == expected_type
        assert param.value == value

    def test_list_becomes_array(self):
        param = to_query_parameter('ids', ['a', 'b'])

        assert isinstance(param, bigquery.ArrayQueryParameter)
        assert param.array_type == 'STRING'
        assert param.values == ['a', 'b']


class TestBigQueryExecutor:

    @pytest.fixture
    def client(self):
        client = MagicMock()
        row = MagicMock()
        row.items.return_value = [('date', '2024-05-01'), ('total_revenue', 12.5)]
        client.query.return_value.result.return_value = [row]
        return client

    def test_table_reference(self, client):
        executor = BigQueryExecutor(AppConfig(gcp_project='proj'), client=client)
        assert executor.table('ds', 'orders') == '`proj.ds.orders`'

    def test_run_binds_parameters(self, client):
        executor = BigQueryExecutor(
            AppConfig(gcp_project='proj', maximum_bytes_billed=10 ** 9), client=client
        )

        rows = executor.run("SELECT 1", {'start_date': '2024-05-01', 'website_id0': 'wh-eu'})

        assert rows == [{'date': '2024-05-01', 'total_revenue': 12.5}]
        args, kwargs = client.query.call_args
        assert args[0] == "SELECT 1"
        assert kwargs['location'] == 'europe-west2'
        job_config = kwargs['job_config']
        assert [p.name for p in job_config.query_parameters] == ['start_date', 'website_id0']
        assert job_config.maximum_bytes_billed == 10 ** 9

    def test_errors_propagate(self, client):
        client.query.side_effect = RuntimeError("quota exceeded")
        executor = BigQueryExecutor(AppConfig(gcp_project='proj'), client=client)

        with pytest.raises(RuntimeError):
            executor.run("SELECT 1")
