"""
taskboard/checker.py

Project permission checker: the public entry point of the permission engine.

One checker instance is one authorization context:

    checker = ProjectPermissionChecker(resolver)
    data = checker.load_context(user_id, project_id)
    if checker.can_edit_cards():
        ...

States: Unloaded -> Loaded, only through load_context(). There is no way back;
a new authorization context needs a new checker. The loaded PermissionsData is
immutable.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from taskboard.aggregator import aggregate_role
from taskboard.capabilities import Capability, ProjectPermissions
from taskboard.config import IS_DEV
from taskboard.errors import ContextAlreadyLoadedError, NotLoadedError
from taskboard.matrix import build_permissions
from taskboard.resolver import MembershipResolver, ResolvedMembership
from taskboard.roles import ProjectRole


class PermissionsData(BaseModel):
    """
    Result of one authorization context.

    Fields:
        effective_role: Single role used to build the matrix (none = no access)
        permissions: Full capability matrix
        has_access: True iff effective_role is not none
        is_project_owner: User owns the project directly
    """
    model_config = ConfigDict(frozen=True)

    effective_role: ProjectRole
    permissions: ProjectPermissions
    has_access: bool
    is_project_owner: bool

    def to_response(self) -> Dict[str, Any]:
        """Wire shape: {role, permissions, hasAccess, isProjectOwner}."""
        return {
            "role": None if self.effective_role is ProjectRole.none else self.effective_role.value,
            "permissions": self.permissions.model_dump(by_alias=True),
            "hasAccess": self.has_access,
            "isProjectOwner": self.is_project_owner,
        }

    @classmethod
    def no_access(cls) -> "PermissionsData":
        return cls(
            effective_role=ProjectRole.none,
            permissions=ProjectPermissions.none(),
            has_access=False,
            is_project_owner=False,
        )


def build_permissions_data(resolved: ResolvedMembership) -> PermissionsData:
    """Pure part of load_context: resolved facts -> PermissionsData."""
    role = aggregate_role(resolved)
    return PermissionsData(
        effective_role=role,
        permissions=build_permissions(role, resolved.is_direct_owner),
        has_access=role is not ProjectRole.none,
        is_project_owner=resolved.is_direct_owner,
    )


class ProjectPermissionChecker:

    def __init__(self, resolver: MembershipResolver):
        self.resolver = resolver
        self._data: Optional[PermissionsData] = None
        self._user_id: Optional[str] = None
        self._project_id: Optional[str] = None
        self._team_ids: frozenset = frozenset()

    # ------------------------------------------------------------------
    # Context loading
    # ------------------------------------------------------------------
    def load_context(self, user_id: str, project_id: str) -> PermissionsData:
        """
        Resolve memberships, aggregate the role, build the matrix, and keep it.

        Nothing is stored until every step has succeeded, so a failed or
        interrupted load leaves the checker Unloaded. Once Loaded, repeating
        the same (user_id, project_id) returns the loaded data unchanged.

        Raises:
            ProjectNotFoundError: project does not exist
            TeamNotFoundError: a grant references a missing team
            ContextAlreadyLoadedError: loaded for a different user or project
        """
        if self._data is not None:
            if (user_id, project_id) != (self._user_id, self._project_id):
                raise ContextAlreadyLoadedError((self._user_id, self._project_id), (user_id, project_id))
            return self._data

        resolved = self.resolver.resolve(user_id, project_id)
        data = build_permissions_data(resolved)

        self._user_id = user_id
        self._project_id = project_id
        self._team_ids = resolved.team_ids
        self._data = data

        if IS_DEV:
            print(f"[PERMS] Context loaded: user_id={user_id}, project_id={project_id}, "
                  f"role={data.effective_role.value}, owner={data.is_project_owner}, "
                  f"team_paths={len(resolved.team_grants)}")
        return data

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    @property
    def permissions_data(self) -> PermissionsData:
        if self._data is None:
            raise NotLoadedError()
        return self._data

    @property
    def permissions(self) -> ProjectPermissions:
        return self.permissions_data.permissions

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def project_id(self) -> Optional[str]:
        return self._project_id

    @property
    def team_ids(self) -> frozenset:
        """Teams whose membership or grant changes affect this context."""
        return self._team_ids

    # ------------------------------------------------------------------
    # Generic lookup
    # ------------------------------------------------------------------
    def allows(self, capability: Capability) -> bool:
        return self.permissions.allows(capability)

    def has_permission(self, action: str, resource: str) -> bool:
        """
        Generic (action, resource) lookup, e.g. has_permission("move", "card").

        Unknown pairs are denied, never raised, so callers written against a
        newer capability list stay safe.
        """
        permissions = self.permissions
        capability = Capability.from_pair(action, resource)
        if capability is None:
            if IS_DEV:
                print(f"[PERMS] Unknown capability denied: action={action!r}, resource={resource!r}")
            return False
        return permissions.allows(capability)

    # ------------------------------------------------------------------
    # Named predicates
    # ------------------------------------------------------------------
    def can_view_project(self) -> bool:
        return self.permissions.can_view_project

    def can_edit_project(self) -> bool:
        return self.permissions.can_edit_project

    def can_delete_project(self) -> bool:
        return self.permissions.can_delete_project

    def can_archive_project(self) -> bool:
        return self.permissions.can_archive_project

    def can_manage_teams(self) -> bool:
        return self.permissions.can_manage_teams

    def can_create_columns(self) -> bool:
        return self.permissions.can_create_columns

    def can_edit_columns(self) -> bool:
        return self.permissions.can_edit_columns

    def can_delete_columns(self) -> bool:
        return self.permissions.can_delete_columns

    def can_reorder_columns(self) -> bool:
        return self.permissions.can_reorder_columns

    def can_create_cards(self) -> bool:
        return self.permissions.can_create_cards

    def can_edit_cards(self) -> bool:
        return self.permissions.can_edit_cards

    def can_delete_cards(self) -> bool:
        return self.permissions.can_delete_cards

    def can_assign_cards(self) -> bool:
        return self.permissions.can_assign_cards

    def can_move_cards(self) -> bool:
        return self.permissions.can_move_cards

    def can_create_comments(self) -> bool:
        return self.permissions.can_create_comments

    def can_edit_comments(self) -> bool:
        return self.permissions.can_edit_comments

    def can_delete_comments(self) -> bool:
        return self.permissions.can_delete_comments

    def can_create_labels(self) -> bool:
        return self.permissions.can_create_labels

    def can_edit_labels(self) -> bool:
        return self.permissions.can_edit_labels

    def can_delete_labels(self) -> bool:
        return self.permissions.can_delete_labels

    def can_upload_attachments(self) -> bool:
        return self.permissions.can_upload_attachments

    def can_delete_attachments(self) -> bool:
        return self.permissions.can_delete_attachments

    def can_modify_comment(self, author_id: Optional[str]) -> bool:
        """
        Whether the caller may edit/delete a specific comment.

        Anyone who can delete comments may modify any comment; otherwise only
        the author, and only with comment edit rights.
        """
        permissions = self.permissions
        if permissions.can_delete_comments:
            return True
        if permissions.can_edit_comments:
            return author_id is not None and author_id == self._user_id
        return False


def get_project_permissions(resolver: MembershipResolver, user_id: str, project_ref: str) -> PermissionsData:
    """
    Resolve a project id or slug and load a fresh context for it.

    Raises:
        ProjectNotFoundError: no project with that id or slug
    """
    project_id = resolver.resolve_project_ref(project_ref)
    checker = ProjectPermissionChecker(resolver)
    return checker.load_context(user_id, project_id)
