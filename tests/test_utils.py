"""
Tests for shared helpers and configuration loading.
"""

from datetime import date, datetime
from decimal import Decimal
import json

import numpy as np
import pandas as pd
import pytest

from insights_dashboard.core.config import AppConfig
from insights_dashboard.core.utils import (
    is_number,
    make_json_serializable,
    normalize_date_value,
    safe_divide,
    safe_json_dumps,
    to_number,
)


class _Wrapped:
    def __init__(self, value):
        self.value = value


@pytest.mark.parametrize('value, expected', [
    ('2024-05-01', '2024-05-01'),
    ({'value': '2024-05-01'}, '2024-05-01'),
    (date(2024, 5, 1), '2024-05-01'),
    (datetime(2024, 5, 1, 8, 30), '2024-05-01T08:30:00'),
    (_Wrapped(date(2024, 5, 1)), '2024-05-01'),
    (None, None),
    (42, 42),
])
def test_normalize_date_value(value, expected):
    assert normalize_date_value(value) == expected


def test_number_helpers():
    assert is_number(1) and is_number(2.5) and is_number(Decimal('1'))
    assert not is_number(True)
    assert not is_number('3')
    assert to_number(None) == 0
    assert to_number('3') == 0
    assert to_number(float('nan')) == 0
    assert to_number(Decimal('1.5')) == 1.5
    assert safe_divide(1, 0) == 0
    assert safe_divide(3, 2) == 1.5


def test_make_json_serializable():
    data = {
        'count': np.int64(3),
        'ratio': np.float64(0.5),
        'flag': np.bool_(True),
        'amount': Decimal('9.99'),
        'day': date(2024, 5, 1),
        'when': pd.Timestamp('2024-05-01T10:00:00'),
        'missing': float('nan'),
        'items': (1, 2),
    }

    result = make_json_serializable(data)

    assert result == {
        'count': 3,
        'ratio': 0.5,
        'flag': True,
        'amount': 9.99,
        'day': '2024-05-01',
        'when': '2024-05-01T10:00:00',
        'missing': None,
        'items': [1, 2],
    }
    json.dumps(result)


def test_safe_json_dumps_round_trips_plain_values():
    assert json.loads(safe_json_dumps({'a': [1, 2]})) == {'a': [1, 2]}


class TestAppConfig:

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv('INSIGHTS_TENANTS_TABLE', 'tenants-prod')
        monkeypatch.setenv('INSIGHTS_DEFAULT_CURRENCY', 'eur')
        monkeypatch.setenv('BIGQUERY_MAXIMUM_BYTES_BILLED', '1000')
        monkeypatch.setenv('INSIGHTS_MAX_WORKERS', '8')

        config = AppConfig.from_environment()

        assert config.tenants_table == 'tenants-prod'
        assert config.default_base_currency == 'EUR'
        assert config.maximum_bytes_billed == 1000
        assert config.max_workers == 8

    def test_overrides(self, monkeypatch):
        monkeypatch.delenv('GOOGLE_CLOUD_PROJECT', raising=False)

        config = AppConfig.load({'gcp_project': 'proj', 'aws_region': None})

        assert config.gcp_project == 'proj'
        assert config.aws_region

    def test_unknown_override(self):
        with pytest.raises(ValueError):
            AppConfig.load({'colour': 'blue'})
