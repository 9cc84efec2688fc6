"""
taskboard/routes_permissions.py

Permission query endpoints.

Contract:
- 401 when the caller is not authenticated
- 404 when the project/team does not exist
- never 403: lack of access is reported as hasAccess=false with every
  capability false, and the caller decides what to do with it
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from taskboard.auth_context import AuthContext, require_auth_context
from taskboard.cache import CachedPermissionService, PermissionCache
from taskboard.config import IS_DEV
from taskboard.dependencies import get_permission_cache, get_permission_service, get_store
from taskboard.errors import ProjectNotFoundError, TeamNotFoundError
from taskboard.stores import SQLiteStore
from taskboard.team_checker import TeamPermissionChecker


router = APIRouter(
    prefix="/api",
    tags=["permissions"],
)


class InvalidationRequest(BaseModel):
    """Change report from the membership service. At least one field is required."""
    user_id: Optional[str] = Field(None, description="Membership of this user changed")
    project_id: Optional[str] = Field(None, description="Grants or ownership of this project changed")
    team_id: Optional[str] = Field(None, description="This team was deleted or made personal")


@router.get("/projects/{project_ref}/permissions")
def read_project_permissions(
    project_ref: str,
    ctx: AuthContext = Depends(require_auth_context),
    service: CachedPermissionService = Depends(get_permission_service),
) -> Dict[str, Any]:
    """
    Effective permissions of the caller on a project (id or slug).

    Returns:
        {role, permissions, hasAccess, isProjectOwner}
    """
    try:
        data = service.get_permissions_by_ref(ctx.user_id, project_ref)
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")
    except TeamNotFoundError as e:
        # A grant points at a team that no longer exists: server-side data error
        print(f"[PERMS] Dangling team grant on project={project_ref}: {e}")
        raise HTTPException(status_code=500, detail="Permission check failed")

    return data.to_response()


@router.get("/teams/{team_ref}/permissions")
def read_team_permissions(
    team_ref: str,
    ctx: AuthContext = Depends(require_auth_context),
    store: SQLiteStore = Depends(get_store),
) -> Dict[str, Any]:
    """Effective permissions of the caller on a team (id or slug)."""
    checker = TeamPermissionChecker(store, store)
    try:
        data = checker.load_context(ctx.user_id, checker.resolve_team_ref(team_ref))
    except TeamNotFoundError:
        raise HTTPException(status_code=404, detail="Team not found")

    return data.to_response()


@router.post("/internal/permissions/invalidate")
def invalidate_permissions(
    req: InvalidationRequest,
    ctx: AuthContext = Depends(require_auth_context),
    cache: PermissionCache = Depends(get_permission_cache),
) -> Dict[str, Any]:
    """
    Evict cached permissions affected by a membership, grant or team change.
    """
    if not (req.user_id or req.project_id or req.team_id):
        raise HTTPException(status_code=400, detail="Provide user_id, project_id or team_id")

    # Each field is independent: a membership change can touch every project
    # the user reaches, so user+project must not narrow to one entry
    removed = 0
    if req.user_id:
        removed += cache.invalidate_user(req.user_id)
    if req.project_id:
        removed += cache.invalidate_project(req.project_id)
    if req.team_id:
        removed += cache.invalidate_team(req.team_id)

    if IS_DEV:
        print(f"[CACHE] Invalidation reported by user_id={ctx.user_id}: "
              f"user={req.user_id}, project={req.project_id}, team={req.team_id}, removed={removed}")

    return {"removed": removed}
