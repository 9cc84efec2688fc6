"""
taskboard/cache.py

Short-TTL cache of PermissionsData keyed by (user_id, project_id).

This is a bounded-staleness trade-off. Callers that change memberships or
grants must report the change:

    membership added/removed/role changed  -> invalidate_user(user_id)
    grant added/removed/role changed       -> invalidate_project(project_id)
    project ownership transferred          -> invalidate_project(project_id)
    team deleted or made personal          -> invalidate_team(team_id)

Changes nobody reports stay visible for at most ttl_seconds.

A load that races with an invalidation is returned to its caller but not
stored, so an invalidation can never be overwritten by data read before it.
Loader failures are never cached.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from taskboard.checker import PermissionsData, ProjectPermissionChecker
from taskboard.config import IS_DEV, PERMISSION_CACHE_MAX_ENTRIES, PERMISSION_CACHE_TTL_SECONDS
from taskboard.resolver import MembershipResolver

# (data, team ids that can affect it)
LoadResult = Tuple[PermissionsData, FrozenSet[str]]


@dataclass
class CacheEntry:
    data: PermissionsData
    user_id: str
    project_id: str
    team_ids: FrozenSet[str]
    created_at: float
    last_accessed: float
    access_count: int = 1


@dataclass
class CacheStats:
    size: int
    hits: int
    misses: int
    evictions: int
    entries: List[Dict[str, Any]] = field(default_factory=list)


def cache_key(user_id: str, project_id: str) -> str:
    return f"project:{user_id}:{project_id}"


class PermissionCache:

    def __init__(
        self,
        ttl_seconds: int = PERMISSION_CACHE_TTL_SECONDS,
        max_entries: int = PERMISSION_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._generation = 0
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get(self, user_id: str, project_id: str) -> Optional[PermissionsData]:
        key = cache_key(user_id, project_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            now = self._clock()
            if now - entry.created_at > self.ttl_seconds:
                del self._entries[key]
                self._misses += 1
                return None

            entry.access_count += 1
            entry.last_accessed = now
            self._hits += 1
            return entry.data

    def get_or_load(self, user_id: str, project_id: str, loader: Callable[[], LoadResult]) -> PermissionsData:
        cached = self.get(user_id, project_id)
        if cached is not None:
            return cached

        with self._lock:
            generation = self._generation

        # I/O happens outside the lock
        data, team_ids = loader()

        with self._lock:
            if generation == self._generation:
                self._store(user_id, project_id, data, team_ids)
            elif IS_DEV:
                print(f"[CACHE] Discarding load raced by invalidation: {cache_key(user_id, project_id)}")
        return data

    def set(self, user_id: str, project_id: str, data: PermissionsData, team_ids: FrozenSet[str] = frozenset()) -> None:
        with self._lock:
            self._store(user_id, project_id, data, team_ids)

    def _store(self, user_id: str, project_id: str, data: PermissionsData, team_ids: FrozenSet[str]) -> None:
        key = cache_key(user_id, project_id)
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict_oldest()
        now = self._clock()
        self._entries[key] = CacheEntry(
            data=data,
            user_id=user_id,
            project_id=project_id,
            team_ids=frozenset(team_ids),
            created_at=now,
            last_accessed=now,
        )

    def _evict_oldest(self) -> None:
        """Drop the least recently used quarter of the cache (at least one entry)."""
        by_access = sorted(self._entries.items(), key=lambda item: item[1].last_accessed)
        count = max(1, len(by_access) // 4)
        for key, _ in by_access[:count]:
            del self._entries[key]
        self._evictions += count

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------
    def _invalidate_where(self, predicate: Callable[[CacheEntry], bool], label: str) -> int:
        with self._lock:
            self._generation += 1
            doomed = [key for key, entry in self._entries.items() if predicate(entry)]
            for key in doomed:
                del self._entries[key]
        if IS_DEV:
            print(f"[CACHE] Invalidated {len(doomed)} entries for {label}")
        return len(doomed)

    def invalidate(self, user_id: str, project_id: str) -> int:
        return self._invalidate_where(
            lambda e: e.user_id == user_id and e.project_id == project_id,
            f"user={user_id} project={project_id}",
        )

    def invalidate_user(self, user_id: str) -> int:
        return self._invalidate_where(lambda e: e.user_id == user_id, f"user={user_id}")

    def invalidate_project(self, project_id: str) -> int:
        return self._invalidate_where(lambda e: e.project_id == project_id, f"project={project_id}")

    def invalidate_team(self, team_id: str) -> int:
        return self._invalidate_where(lambda e: team_id in e.team_ids, f"team={team_id}")

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()
        if IS_DEV:
            print("[CACHE] Permission cache cleared")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            return CacheStats(
                size=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                entries=[
                    {
                        "key": key,
                        "age": now - entry.created_at,
                        "access_count": entry.access_count,
                        "last_accessed": entry.last_accessed,
                    }
                    for key, entry in self._entries.items()
                ],
            )


class CachedPermissionService:
    """
    Permission lookups through a PermissionCache.

    Every miss runs a fresh ProjectPermissionChecker, so each cached value is a
    complete authorization context.
    """

    def __init__(self, resolver: MembershipResolver, cache: Optional[PermissionCache] = None):
        self.resolver = resolver
        # An empty cache is falsy (__len__), so test for None explicitly
        self.cache = cache if cache is not None else PermissionCache()

    def get_permissions(self, user_id: str, project_id: str) -> PermissionsData:
        def _load() -> LoadResult:
            checker = ProjectPermissionChecker(self.resolver)
            data = checker.load_context(user_id, project_id)
            return data, checker.team_ids

        return self.cache.get_or_load(user_id, project_id, _load)

    def get_permissions_by_ref(self, user_id: str, project_ref: str) -> PermissionsData:
        return self.get_permissions(user_id, self.resolver.resolve_project_ref(project_ref))
