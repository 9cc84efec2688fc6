"""
taskboard/capabilities.py

Capability vocabulary for project and team authorization.

A capability is a (resource, action) pair such as "card:move". Every capability
maps onto exactly one boolean field of ProjectPermissions (or TeamPermissions).
Lookups by (action, resource) go through the enums below, so an unknown pair
never reaches a permission record: it is denied.

Pure Python logic - no FastAPI imports, no database access.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ============================================================================
# Project Capabilities
# ============================================================================

class Capability(str, Enum):
    """Project-scope capabilities, valued as "resource:action"."""

    # Project
    PROJECT_VIEW = "project:view"
    PROJECT_EDIT = "project:edit"
    PROJECT_DELETE = "project:delete"
    PROJECT_ARCHIVE = "project:archive"
    PROJECT_MANAGE_TEAMS = "project:manage_teams"

    # Columns
    COLUMN_CREATE = "column:create"
    COLUMN_EDIT = "column:edit"
    COLUMN_DELETE = "column:delete"
    COLUMN_REORDER = "column:reorder"

    # Cards
    CARD_CREATE = "card:create"
    CARD_EDIT = "card:edit"
    CARD_DELETE = "card:delete"
    CARD_ASSIGN = "card:assign"
    CARD_MOVE = "card:move"

    # Comments
    COMMENT_CREATE = "comment:create"
    COMMENT_EDIT = "comment:edit"
    COMMENT_DELETE = "comment:delete"

    # Labels
    LABEL_CREATE = "label:create"
    LABEL_EDIT = "label:edit"
    LABEL_DELETE = "label:delete"

    # Attachments
    ATTACHMENT_UPLOAD = "attachment:upload"
    ATTACHMENT_DELETE = "attachment:delete"

    @property
    def resource(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[1]

    @classmethod
    def from_pair(cls, action: str, resource: str) -> Optional["Capability"]:
        """
        Look up a capability by its (action, resource) pair.

        Returns None for any pair that is not a known capability. Callers
        treat None as a denial.
        """
        if not action or not resource:
            return None
        try:
            return cls(f"{resource.lower()}:{action.lower()}")
        except ValueError:
            return None


class ProjectPermissions(BaseModel):
    """
    Complete capability matrix for one user on one project.

    Every field is required, so a record can never be built with a
    capability left undefined. Serializes with camelCase keys.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    can_view_project: bool
    can_edit_project: bool
    can_delete_project: bool
    can_archive_project: bool
    can_manage_teams: bool

    can_create_columns: bool
    can_edit_columns: bool
    can_delete_columns: bool
    can_reorder_columns: bool

    can_create_cards: bool
    can_edit_cards: bool
    can_delete_cards: bool
    can_assign_cards: bool
    can_move_cards: bool

    can_create_comments: bool
    can_edit_comments: bool
    can_delete_comments: bool

    can_create_labels: bool
    can_edit_labels: bool
    can_delete_labels: bool

    can_upload_attachments: bool
    can_delete_attachments: bool

    def allows(self, capability: Capability) -> bool:
        return bool(getattr(self, CAPABILITY_FIELDS[capability]))

    def granted(self) -> frozenset:
        """Set of capabilities that are true in this matrix."""
        return frozenset(cap for cap in Capability if self.allows(cap))

    @classmethod
    def none(cls) -> "ProjectPermissions":
        return permissions_from_capabilities(())


# Capability -> ProjectPermissions field
CAPABILITY_FIELDS: Dict[Capability, str] = {
    Capability.PROJECT_VIEW: "can_view_project",
    Capability.PROJECT_EDIT: "can_edit_project",
    Capability.PROJECT_DELETE: "can_delete_project",
    Capability.PROJECT_ARCHIVE: "can_archive_project",
    Capability.PROJECT_MANAGE_TEAMS: "can_manage_teams",
    Capability.COLUMN_CREATE: "can_create_columns",
    Capability.COLUMN_EDIT: "can_edit_columns",
    Capability.COLUMN_DELETE: "can_delete_columns",
    Capability.COLUMN_REORDER: "can_reorder_columns",
    Capability.CARD_CREATE: "can_create_cards",
    Capability.CARD_EDIT: "can_edit_cards",
    Capability.CARD_DELETE: "can_delete_cards",
    Capability.CARD_ASSIGN: "can_assign_cards",
    Capability.CARD_MOVE: "can_move_cards",
    Capability.COMMENT_CREATE: "can_create_comments",
    Capability.COMMENT_EDIT: "can_edit_comments",
    Capability.COMMENT_DELETE: "can_delete_comments",
    Capability.LABEL_CREATE: "can_create_labels",
    Capability.LABEL_EDIT: "can_edit_labels",
    Capability.LABEL_DELETE: "can_delete_labels",
    Capability.ATTACHMENT_UPLOAD: "can_upload_attachments",
    Capability.ATTACHMENT_DELETE: "can_delete_attachments",
}


def permissions_from_capabilities(capabilities: Iterable[Capability]) -> ProjectPermissions:
    """Build a total ProjectPermissions record: listed capabilities true, the rest false."""
    granted = set(capabilities)
    return ProjectPermissions(**{
        field: capability in granted for capability, field in CAPABILITY_FIELDS.items()
    })


# ============================================================================
# Team Capabilities
# ============================================================================

class TeamCapability(str, Enum):
    """Team-scope capabilities, valued as "team:action"."""

    TEAM_VIEW = "team:view"
    TEAM_EDIT = "team:edit"
    TEAM_DELETE = "team:delete"
    TEAM_ARCHIVE = "team:archive"
    TEAM_MANAGE_MEMBERS = "team:manage_members"
    TEAM_MANAGE_ROLES = "team:manage_roles"
    TEAM_INVITE_MEMBERS = "team:invite_members"
    TEAM_REMOVE_MEMBERS = "team:remove_members"
    TEAM_LEAVE = "team:leave"

    @classmethod
    def from_pair(cls, action: str, resource: str) -> Optional["TeamCapability"]:
        if not action or not resource:
            return None
        try:
            return cls(f"{resource.lower()}:{action.lower()}")
        except ValueError:
            return None


class TeamPermissions(BaseModel):
    """Capability matrix for one user on one team."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    can_view_team: bool
    can_edit_team: bool
    can_delete_team: bool
    can_archive_team: bool
    can_manage_members: bool
    can_manage_roles: bool
    can_invite_members: bool
    can_remove_members: bool
    can_leave_team: bool

    def allows(self, capability: TeamCapability) -> bool:
        return bool(getattr(self, TEAM_CAPABILITY_FIELDS[capability]))


TEAM_CAPABILITY_FIELDS: Dict[TeamCapability, str] = {
    TeamCapability.TEAM_VIEW: "can_view_team",
    TeamCapability.TEAM_EDIT: "can_edit_team",
    TeamCapability.TEAM_DELETE: "can_delete_team",
    TeamCapability.TEAM_ARCHIVE: "can_archive_team",
    TeamCapability.TEAM_MANAGE_MEMBERS: "can_manage_members",
    TeamCapability.TEAM_MANAGE_ROLES: "can_manage_roles",
    TeamCapability.TEAM_INVITE_MEMBERS: "can_invite_members",
    TeamCapability.TEAM_REMOVE_MEMBERS: "can_remove_members",
    TeamCapability.TEAM_LEAVE: "can_leave_team",
}


def team_permissions_from_capabilities(capabilities: Iterable[TeamCapability]) -> TeamPermissions:
    granted = set(capabilities)
    return TeamPermissions(**{
        field: capability in granted for capability, field in TEAM_CAPABILITY_FIELDS.items()
    })
