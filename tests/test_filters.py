"""
Tests for site filter predicates.
"""

import pytest

from insights_dashboard.data.filters import SiteFilter, build_site_filter


def test_no_ids_means_no_filter():
    site_filter = build_site_filter(None)

    assert site_filter == SiteFilter()
    assert site_filter.is_empty
    assert site_filter.params == {}


def test_single_id_is_equality():
    site_filter = build_site_filter(['wh-eu'])

    assert site_filter.clause == "AND website_id = @website_id"
    assert site_filter.params == {'website_id': 'wh-eu'}


def test_several_ids_use_distinct_parameters():
    site_filter = build_site_filter(['wh-uk', 'wh-eu', 'wh-us'])

    assert site_filter.clause == "AND website_id IN (@website_id0, @website_id1, @website_id2)"
    assert site_filter.params == {
        'website_id0': 'wh-uk',
        'website_id1': 'wh-eu',
        'website_id2': 'wh-us',
    }
    assert len(set(site_filter.params)) == 3


def test_empty_ids_rejected():
    with pytest.raises(ValueError):
        build_site_filter([])


def test_qualified_column_and_parameter_name():
    site_filter = build_site_filter(('1', '2'), column='o.store_id', param_name='store')

    assert site_filter.clause == "AND o.store_id IN (@store0, @store1)"
    assert site_filter.params == {'store0': '1', 'store1': '2'}


def test_values_are_bound_not_inlined():
    site_filter = build_site_filter(["x' OR '1'='1"])

    assert "OR" not in site_filter.clause
    assert site_filter.params['website_id'] == "x' OR '1'='1"
