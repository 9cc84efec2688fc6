"""
taskboard/roles.py

Role catalog for project and team authorization.

Two role scales exist:
- Team scope:    owner > admin > member
- Project scope: owner > admin > editor > viewer > none

ROLE_CAPABILITIES is the single source of truth for what each project role can
do. Each role's set is written as the previous role's set plus additions, so
capabilities are monotonic along the project order by construction.

Pure Python logic - no FastAPI imports, no database access.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

from taskboard.capabilities import (
    Capability,
    ProjectPermissions,
    TeamCapability,
    permissions_from_capabilities,
)


# ============================================================================
# Role Definitions
# ============================================================================

class TeamRole(str, Enum):
    """A member's standing within a team."""
    owner = "owner"
    admin = "admin"
    member = "member"


class ProjectRole(str, Enum):
    """Project-scope role. `none` means no access."""
    owner = "owner"
    admin = "admin"
    editor = "editor"
    viewer = "viewer"
    none = "none"


# ============================================================================
# Role Hierarchy
# ============================================================================

PROJECT_ROLE_HIERARCHY: Dict[ProjectRole, int] = {
    ProjectRole.owner: 4,
    ProjectRole.admin: 3,
    ProjectRole.editor: 2,
    ProjectRole.viewer: 1,
    ProjectRole.none: 0,
}

TEAM_ROLE_HIERARCHY: Dict[TeamRole, int] = {
    TeamRole.owner: 3,
    TeamRole.admin: 2,
    TeamRole.member: 1,
}

# Highest project role a team standing can carry into a project.
# A plain member never goes past editor, whatever the team was granted.
TEAM_ROLE_CEILING: Dict[TeamRole, ProjectRole] = {
    TeamRole.owner: ProjectRole.owner,
    TeamRole.admin: ProjectRole.admin,
    TeamRole.member: ProjectRole.editor,
}

_PROJECT_ROLES_BY_RANK: Dict[int, ProjectRole] = {
    level: role for role, level in PROJECT_ROLE_HIERARCHY.items()
}


def rank(role: Union[ProjectRole, TeamRole, None]) -> int:
    """
    Numeric level for a role (higher = more privileged).

    Accepts project or team roles. Anything unknown ranks 0.
    """
    if isinstance(role, ProjectRole):
        return PROJECT_ROLE_HIERARCHY[role]
    if isinstance(role, TeamRole):
        return TEAM_ROLE_HIERARCHY[role]
    return 0


def project_role_for_rank(level: int) -> ProjectRole:
    """Inverse of rank() on the project scale. Out-of-range levels map to none."""
    return _PROJECT_ROLES_BY_RANK.get(level, ProjectRole.none)


def team_role_ceiling(team_role: TeamRole) -> ProjectRole:
    return TEAM_ROLE_CEILING.get(team_role, ProjectRole.none)


def role_at_least(user_role: ProjectRole, required_role: ProjectRole) -> bool:
    """Check if user_role meets or exceeds required_role on the project scale."""
    return rank(user_role) >= rank(required_role)


def parse_team_role(value: Optional[str]) -> Optional[TeamRole]:
    """Parse a stored team role string. Unknown or empty values return None."""
    if not value:
        return None
    try:
        return TeamRole(value.strip().lower())
    except ValueError:
        return None


def parse_project_role(value: Optional[str]) -> Optional[ProjectRole]:
    """
    Parse a stored grant role string.

    `none` is not a grantable role, so it parses to None like any unknown value.
    """
    if not value:
        return None
    try:
        role = ProjectRole(value.strip().lower())
    except ValueError:
        return None
    return None if role is ProjectRole.none else role


# ============================================================================
# Role to Capabilities Mapping
# ============================================================================

_VIEWER: FrozenSet[Capability] = frozenset({
    Capability.PROJECT_VIEW,
    Capability.COMMENT_CREATE,
})

_EDITOR: FrozenSet[Capability] = _VIEWER | {
    Capability.PROJECT_EDIT,
    Capability.COLUMN_CREATE,
    Capability.COLUMN_EDIT,
    Capability.COLUMN_REORDER,
    Capability.CARD_CREATE,
    Capability.CARD_EDIT,
    Capability.CARD_ASSIGN,
    Capability.CARD_MOVE,
    Capability.COMMENT_EDIT,
    Capability.LABEL_CREATE,
    Capability.LABEL_EDIT,
    Capability.ATTACHMENT_UPLOAD,
}

# Everything except deleting the project itself
_ADMIN: FrozenSet[Capability] = _EDITOR | {
    Capability.PROJECT_ARCHIVE,
    Capability.PROJECT_MANAGE_TEAMS,
    Capability.COLUMN_DELETE,
    Capability.CARD_DELETE,
    Capability.COMMENT_DELETE,
    Capability.LABEL_DELETE,
    Capability.ATTACHMENT_DELETE,
}

_OWNER: FrozenSet[Capability] = _ADMIN | {
    Capability.PROJECT_DELETE,
}

ROLE_CAPABILITIES: Dict[ProjectRole, FrozenSet[Capability]] = {
    ProjectRole.owner: _OWNER,
    ProjectRole.admin: _ADMIN,
    ProjectRole.editor: _EDITOR,
    ProjectRole.viewer: _VIEWER,
    ProjectRole.none: frozenset(),
}


def role_capabilities(role: ProjectRole) -> FrozenSet[Capability]:
    return ROLE_CAPABILITIES.get(role, frozenset())


def base_capabilities(role: ProjectRole) -> ProjectPermissions:
    """
    Complete capability matrix for a project role.

    `none` (and anything not in the table) yields the all-false matrix.
    """
    return permissions_from_capabilities(role_capabilities(role))


# ============================================================================
# Team Role Capabilities
# ============================================================================

TEAM_ROLE_CAPABILITIES: Dict[TeamRole, FrozenSet[TeamCapability]] = {
    # Owners cannot delete or archive; that is reserved for the team creator
    TeamRole.owner: frozenset({
        TeamCapability.TEAM_VIEW,
        TeamCapability.TEAM_EDIT,
        TeamCapability.TEAM_MANAGE_MEMBERS,
        TeamCapability.TEAM_MANAGE_ROLES,
        TeamCapability.TEAM_INVITE_MEMBERS,
        TeamCapability.TEAM_REMOVE_MEMBERS,
    }),
    TeamRole.admin: frozenset({
        TeamCapability.TEAM_VIEW,
        TeamCapability.TEAM_EDIT,
        TeamCapability.TEAM_MANAGE_MEMBERS,
        TeamCapability.TEAM_INVITE_MEMBERS,
        TeamCapability.TEAM_REMOVE_MEMBERS,
    }),
    TeamRole.member: frozenset({
        TeamCapability.TEAM_VIEW,
        TeamCapability.TEAM_INVITE_MEMBERS,
        TeamCapability.TEAM_LEAVE,
    }),
}

# Personal teams have an immutable name/slug, a single member, and cannot be
# archived, deleted or left.
PERSONAL_TEAM_DENIED: FrozenSet[TeamCapability] = frozenset({
    TeamCapability.TEAM_EDIT,
    TeamCapability.TEAM_DELETE,
    TeamCapability.TEAM_ARCHIVE,
    TeamCapability.TEAM_INVITE_MEMBERS,
    TeamCapability.TEAM_LEAVE,
})
