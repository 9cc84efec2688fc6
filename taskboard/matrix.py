"""
taskboard/matrix.py

Capability matrix builder: effective role (+ ownership) -> ProjectPermissions.
"""

from __future__ import annotations

from taskboard.capabilities import ProjectPermissions
from taskboard.roles import ProjectRole, base_capabilities

# Granted to direct owners regardless of what the role row says
OWNER_OVERRIDES = {
    "can_manage_teams": True,
    "can_archive_project": True,
}


def build_permissions(effective_role: ProjectRole, is_direct_owner: bool) -> ProjectPermissions:
    """
    Expand an effective role into the full capability record.

    The role row comes from the catalog unchanged; direct ownership then
    forces the owner overrides on. Every field is always set.
    """
    permissions = base_capabilities(effective_role)
    if is_direct_owner:
        permissions = permissions.model_copy(update=OWNER_OVERRIDES)
    return permissions
