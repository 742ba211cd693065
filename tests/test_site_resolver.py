"""
Tests for site resolution.
"""

import pytest

from insights_dashboard.data.site_resolver import (
    IdScheme,
    ResolutionKind,
    SiteResolution,
    resolve_site,
)

from .conftest import FakeTenantStore, make_site


@pytest.mark.parametrize('site_id', ['all_combined', None, ''])
def test_combine_all_means_no_filter(store, site_id):
    resolution = resolve_site(store, 'acme', site_id)

    assert resolution.is_no_filter
    assert resolution.ids == ()
    # No store reads for the sentinel
    assert store.site_reads == []


def test_custom_sentinel(store):
    assert resolve_site(store, 'acme', 'everything', combine_all='everything').is_no_filter
    assert resolve_site(store, 'acme', 'all_combined', combine_all='everything').is_not_found


def test_plain_site_resolves_to_warehouse_id(store):
    resolution = resolve_site(store, 'acme', 'eu')

    assert resolution.kind is ResolutionKind.RESOLVED
    assert resolution.ids == ('wh-eu',)


def test_commerce_scheme(store):
    assert resolve_site(store, 'acme', 'eu', id_scheme=IdScheme.COMMERCE).ids == ('2',)
    assert resolve_site(store, 'acme', 'global', id_scheme=IdScheme.COMMERCE).ids == ('1', '2', '3')


def test_missing_site_is_not_found(store):
    resolution = resolve_site(store, 'acme', 'nowhere')

    assert resolution.is_not_found
    assert resolution.reason == "site not found"


def test_site_of_other_tenant_is_not_found(store):
    assert resolve_site(store, 'other', 'eu').is_not_found


def test_site_without_warehouse_id_is_not_found(store):
    resolution = resolve_site(store, 'acme', 'no_wh')

    assert resolution.is_not_found
    assert 'warehouse' in resolution.reason


def test_grouping_site_resolves_members_in_order(store):
    resolution = resolve_site(store, 'acme', 'global')

    assert resolution.is_resolved
    assert resolution.ids == ('wh-uk', 'wh-eu', 'wh-us')


def test_grouping_skips_missing_and_unusable_members(store):
    # 'no_wh' lacks a warehouse id and 'gone' does not exist
    assert resolve_site(store, 'acme', 'europe').ids == ('wh-eu',)


def test_grouping_with_no_usable_members_resolves_empty(store):
    resolution = resolve_site(store, 'acme', 'empty_group')

    assert resolution.is_resolved
    assert resolution.ids == ()


def test_group_of_two_with_one_missing_id():
    sites = {
        'G': make_site('G', members=['A', 'B']),
        'A': make_site('A', 'wh-a'),
        'B': make_site('B'),
    }
    store = FakeTenantStore(sites={'acme': sites})

    assert resolve_site(store, 'acme', 'G').ids == ('wh-a',)


def test_nested_grouping_member_skipped():
    sites = {
        'outer': make_site('outer', members=['inner', 'A']),
        'inner': make_site('inner', 'wh-inner', members=['A']),
        'A': make_site('A', 'wh-a'),
    }
    store = FakeTenantStore(sites={'acme': sites})

    assert resolve_site(store, 'acme', 'outer').ids == ('wh-a',)


def test_duplicate_member_ids_collapsed():
    sites = {
        'G': make_site('G', members=['A', 'B', 'A']),
        'A': make_site('A', 'wh-a'),
        'B': make_site('B', 'wh-a'),
    }
    store = FakeTenantStore(sites={'acme': sites})

    assert resolve_site(store, 'acme', 'G').ids == ('wh-a',)


def test_resolution_constructors():
    assert SiteResolution.no_filter().kind is ResolutionKind.NO_FILTER
    assert SiteResolution.not_found('gone').reason == 'gone'
    assert SiteResolution.resolved(['b', 'a', 'b']).ids == ('b', 'a')
