"""
Tests for combining rows from grouped sites.
"""

import copy

from insights_dashboard.data.aggregation import aggregate_grouped_rows


def _by_date(rows):
    return {row['date']: row for row in rows}


def test_empty_input():
    assert aggregate_grouped_rows([], ['date'], ['revenue']) == []


def test_single_site_rows_pass_through_without_site_field():
    rows = [
        {'date': '2024-05-01', 'website_id': 'wh-eu', 'revenue': 10},
        {'date': '2024-05-01', 'website_id': 'wh-eu', 'revenue': 5},
    ]

    result = aggregate_grouped_rows(rows, ['date'], ['revenue'])

    assert result == [
        {'date': '2024-05-01', 'revenue': 10},
        {'date': '2024-05-01', 'revenue': 5},
    ]


def test_rows_from_two_sites_are_summed():
    rows = [
        {'date': '2024-05-01', 'website_id': 'A', 'revenue': 100.0},
        {'date': '2024-05-01', 'website_id': 'B', 'revenue': 50.0},
    ]

    assert aggregate_grouped_rows(rows, ['date'], ['revenue']) == [
        {'date': '2024-05-01', 'revenue': 150.0}
    ]


def test_sum_fields_preserved_across_groups():
    rows = [
        {'date': '2024-05-01', 'website_id': 'A', 'orders': 3, 'revenue': 30.5},
        {'date': '2024-05-01', 'website_id': 'B', 'orders': 2, 'revenue': 20},
        {'date': '2024-05-02', 'website_id': 'A', 'orders': 1, 'revenue': 7},
        {'date': '2024-05-02', 'website_id': 'C', 'orders': 4, 'revenue': 1.5},
    ]

    result = aggregate_grouped_rows(rows, ['date'], ['orders', 'revenue'])

    assert sum(row['orders'] for row in result) == sum(row['orders'] for row in rows)
    assert sum(row['revenue'] for row in result) == sum(row['revenue'] for row in rows)
    assert _by_date(result)['2024-05-01']['orders'] == 5
    assert all('website_id' not in row for row in result)


def test_missing_and_non_numeric_count_as_zero():
    rows = [
        {'date': '2024-05-01', 'website_id': 'A', 'orders': 3},
        {'date': '2024-05-01', 'website_id': 'B', 'orders': None},
        {'date': '2024-05-01', 'website_id': 'C', 'orders': 'n/a'},
    ]

    assert aggregate_grouped_rows(rows, ['date'], ['orders'])[0]['orders'] == 3


def test_max_fields_take_largest():
    rows = [
        {'date': '2024-05-01', 'website_id': 'A', 'worst_position': 12.0, 'clicks': 1},
        {'date': '2024-05-01', 'website_id': 'B', 'worst_position': 48.5, 'clicks': 2},
    ]

    result = aggregate_grouped_rows(rows, ['date'], ['clicks'], max_fields=['worst_position'])

    assert result == [{'date': '2024-05-01', 'worst_position': 48.5, 'clicks': 3}]


def test_other_fields_come_from_first_row():
    rows = [
        {'date': '2024-05-01', 'sku': 'S1', 'website_id': 'A', 'name': 'Fern', 'qty': 1},
        {'date': '2024-05-01', 'sku': 'S1', 'website_id': 'B', 'name': 'Fern (EU)', 'qty': 2},
        {'date': '2024-05-01', 'sku': 'S2', 'website_id': 'B', 'name': 'Moss', 'qty': 5},
    ]

    result = aggregate_grouped_rows(rows, ['date', 'sku'], ['qty'])
    by_sku = {row['sku']: row for row in result}

    assert by_sku['S1'] == {'date': '2024-05-01', 'sku': 'S1', 'name': 'Fern', 'qty': 3}
    assert by_sku['S2'] == {'date': '2024-05-01', 'sku': 'S2', 'name': 'Moss', 'qty': 5}


def test_none_and_zero_are_distinct_keys():
    rows = [
        {'hour': 0, 'website_id': 'A', 'orders': 1},
        {'hour': None, 'website_id': 'B', 'orders': 2},
    ]

    assert len(aggregate_grouped_rows(rows, ['hour'], ['orders'])) == 2


def test_custom_site_field():
    rows = [
        {'order_date': '2024-05-01', 'store_id': '1', 'total': 10},
        {'order_date': '2024-05-01', 'store_id': '2', 'total': 15},
    ]

    result = aggregate_grouped_rows(rows, ['order_date'], ['total'], site_field='store_id')

    assert result == [{'order_date': '2024-05-01', 'total': 25}]


def test_input_rows_not_mutated():
    rows = [
        {'date': '2024-05-01', 'website_id': 'A', 'revenue': 1},
        {'date': '2024-05-01', 'website_id': 'B', 'revenue': 2},
    ]
    before = copy.deepcopy(rows)

    aggregate_grouped_rows(rows, ['date'], ['revenue'])

    assert rows == before
