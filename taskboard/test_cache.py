"""
taskboard/test_cache.py

Tests for the permission cache: TTL, LRU eviction, invalidation contract and
the no-stale-write guarantee.

Run:
    pytest taskboard/test_cache.py -v
"""

from unittest.mock import patch

import pytest

from taskboard.cache import CachedPermissionService, PermissionCache
from taskboard.checker import PermissionsData
from taskboard.dependencies import get_permission_cache, get_permission_service, get_resolver
from taskboard.errors import ProjectNotFoundError
from taskboard.roles import ProjectRole


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return PermissionCache(ttl_seconds=60, max_entries=100, clock=clock)


@pytest.fixture
def service(resolver, cache):
    return CachedPermissionService(resolver, cache)


class TestCacheBasics:

    def test_second_lookup_is_a_hit(self, service, resolver):
        with patch.object(resolver, "resolve", wraps=resolver.resolve) as resolve:
            first = service.get_permissions("u-multi", "p-roadmap")
            second = service.get_permissions("u-multi", "p-roadmap")
        assert first == second
        assert resolve.call_count == 1
        stats = service.cache.stats()
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.size == 1

    def test_entries_expire(self, service, resolver, clock):
        with patch.object(resolver, "resolve", wraps=resolver.resolve) as resolve:
            service.get_permissions("u-multi", "p-roadmap")
            clock.advance(61)
            service.get_permissions("u-multi", "p-roadmap")
        assert resolve.call_count == 2

    def test_failures_are_not_cached(self, service):
        for _ in range(2):
            with pytest.raises(ProjectNotFoundError):
                service.get_permissions("u-multi", "p-missing")
        assert len(service.cache) == 0

    def test_lookup_by_slug_shares_entry(self, service):
        service.get_permissions_by_ref("u-multi", "roadmap")
        service.get_permissions_by_ref("u-multi", "p-roadmap")
        assert len(service.cache) == 1

    def test_lru_eviction_drops_a_quarter(self, clock):
        cache = PermissionCache(ttl_seconds=600, max_entries=4, clock=clock)
        data = PermissionsData.no_access()
        for index in range(4):
            cache.set(f"u-{index}", "p", data)
            clock.advance(1)
        cache.get("u-0", "p")  # u-0 is now most recently used
        cache.set("u-new", "p", data)

        assert len(cache) == 4
        assert cache.get("u-1", "p") is None
        assert cache.get("u-0", "p") is not None
        assert cache.stats().evictions == 1


class TestInvalidation:

    def test_membership_change_needs_user_invalidation(self, service, run_sql):
        assert service.get_permissions("u-nobody", "p-roadmap").effective_role is ProjectRole.none

        run_sql("INSERT INTO team_members (team_id, user_id, role) VALUES (?, ?, ?)", ("t-eng", "u-nobody", "member"))
        # Unreported change stays invisible until the TTL runs out
        assert service.get_permissions("u-nobody", "p-roadmap").effective_role is ProjectRole.none

        service.cache.invalidate_user("u-nobody")
        assert service.get_permissions("u-nobody", "p-roadmap").effective_role is ProjectRole.editor

    def test_grant_change_needs_project_invalidation(self, service, run_sql):
        assert service.get_permissions("u-eng-admin", "p-roadmap").effective_role is ProjectRole.editor
        assert service.get_permissions("u-multi", "p-roadmap").effective_role is ProjectRole.editor

        run_sql("UPDATE project_teams SET role = ? WHERE project_id = ? AND team_id = ?", ("viewer", "p-roadmap", "t-eng"))
        removed = service.cache.invalidate_project("p-roadmap")

        assert removed == 2
        assert service.get_permissions("u-eng-admin", "p-roadmap").effective_role is ProjectRole.viewer

    def test_team_invalidation_is_targeted(self, service):
        service.get_permissions("u-eng-admin", "p-roadmap")  # via t-eng
        service.get_permissions("u-multi", "p-roadmap")      # via t-design, t-platform
        service.get_permissions("u-solo", "p-website")       # via t-solo

        assert service.cache.invalidate_team("t-platform") == 1
        assert service.cache.get("u-multi", "p-roadmap") is None
        assert service.cache.get("u-eng-admin", "p-roadmap") is not None
        assert service.cache.get("u-solo", "p-website") is not None

    def test_single_entry_and_clear(self, service):
        service.get_permissions("u-eng-admin", "p-roadmap")
        service.get_permissions("u-multi", "p-roadmap")
        assert service.cache.invalidate("u-eng-admin", "p-roadmap") == 1
        assert len(service.cache) == 1
        service.cache.clear()
        assert len(service.cache) == 0

    def test_load_raced_by_invalidation_is_not_stored(self, cache):
        stale = PermissionsData.no_access()

        def loader():
            # Membership service reports a change while we are still reading
            cache.invalidate_user("u-1")
            return stale, frozenset()

        assert cache.get_or_load("u-1", "p", loader) is stale
        assert cache.get("u-1", "p") is None


class TestServiceWiring:

    def test_empty_cache_is_used_not_replaced(self, resolver, cache):
        assert len(cache) == 0
        service = CachedPermissionService(resolver, cache)
        assert service.cache is cache

        service.get_permissions("u-multi", "p-roadmap")
        assert len(cache) == 1

    def test_requests_share_the_process_cache(self, store):
        with patch("taskboard.dependencies._permission_cache", PermissionCache(ttl_seconds=60)) as shared, \
                patch.object(store, "get_project_owner", wraps=store.get_project_owner) as owner_lookup:
            for _ in range(3):
                service = get_permission_service(get_resolver(store), get_permission_cache())
                assert service.cache is shared
                service.get_permissions("u-multi", "p-roadmap")

        assert owner_lookup.call_count == 1
        stats = shared.stats()
        assert stats.size == 1
        assert stats.hits == 2
