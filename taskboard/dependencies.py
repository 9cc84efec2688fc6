"""
taskboard/dependencies.py

Reusable FastAPI dependencies wiring the permission engine into routes.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException

from taskboard.auth_context import AuthContext, require_auth_context
from taskboard.cache import CachedPermissionService, PermissionCache
from taskboard.capabilities import Capability
from taskboard.checker import PermissionsData
from taskboard.config import IS_DEV
from taskboard.errors import ProjectNotFoundError
from taskboard.resolver import MembershipResolver
from taskboard.stores import SQLiteStore

# Process-wide cache; membership/grant writers report changes through
# /internal/permissions/invalidate
_permission_cache = PermissionCache()


def get_store() -> SQLiteStore:
    return SQLiteStore()


def get_resolver(store: SQLiteStore = Depends(get_store)) -> MembershipResolver:
    return MembershipResolver(store, store, store)


def get_permission_cache() -> PermissionCache:
    return _permission_cache


def get_permission_service(
    resolver: MembershipResolver = Depends(get_resolver),
    cache: PermissionCache = Depends(get_permission_cache),
) -> CachedPermissionService:
    return CachedPermissionService(resolver, cache)


def require_project_capability(capability: Capability) -> Callable:
    """
    FastAPI dependency factory for mutation handlers.

    The route must take a `project_ref` path parameter (id or slug). The
    engine itself never rejects; this is the caller-side decision point that
    turns a False capability into a 403.

    Usage in routes:
        @router.post("/projects/{project_ref}/cards",
                     dependencies=[Depends(require_project_capability(Capability.CARD_CREATE))])
        def create_card(...):
            ...

    Raises:
        HTTPException(401): unauthenticated (from require_auth_context)
        HTTPException(404): project does not exist
        HTTPException(403): capability not held
    """
    def _check_capability(
        project_ref: str,
        ctx: AuthContext = Depends(require_auth_context),
        service: CachedPermissionService = Depends(get_permission_service),
    ) -> PermissionsData:
        try:
            data = service.get_permissions_by_ref(ctx.user_id, project_ref)
        except ProjectNotFoundError:
            raise HTTPException(status_code=404, detail="Project not found")

        if not data.permissions.allows(capability):
            if IS_DEV:
                print(f"[AUTHZ] Capability denied: capability={capability.value}, "
                      f"user_id={ctx.user_id}, project={project_ref}, "
                      f"role={data.effective_role.value}")
            raise HTTPException(
                status_code=403,
                detail="Insufficient permissions for this project",
            )

        if IS_DEV:
            print(f"[AUTHZ] Capability granted: capability={capability.value}, "
                  f"user_id={ctx.user_id}, role={data.effective_role.value}")
        return data

    return _check_capability
