"""
taskboard/team_checker.py

Team-scope permission checker.

Role matrix (TEAM_ROLE_CAPABILITIES in roles.py):
- owner:  view, edit, manage members, manage roles, invite, remove
- admin:  view, edit, manage members, invite, remove
- member: view, invite, leave
- team creator: everything
- not a member: nothing

Personal teams are always narrowed afterwards: no edit, delete, archive,
invite or leave, whoever asks.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from taskboard.capabilities import (
    TeamCapability,
    TeamPermissions,
    team_permissions_from_capabilities,
)
from taskboard.config import IS_DEV
from taskboard.errors import ContextAlreadyLoadedError, NotLoadedError, TeamNotFoundError
from taskboard.roles import (
    PERSONAL_TEAM_DENIED,
    TEAM_ROLE_CAPABILITIES,
    TeamRole,
    parse_team_role,
)
from taskboard.stores import MembershipStore, TeamStore


class TeamPermissionsData(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Optional[TeamRole]
    permissions: TeamPermissions
    is_team_creator: bool
    is_personal: bool

    def to_response(self) -> Dict[str, Any]:
        return {
            "role": self.role.value if self.role else None,
            "permissions": self.permissions.model_dump(by_alias=True),
            "isTeamCreator": self.is_team_creator,
            "isPersonal": self.is_personal,
        }


def build_team_permissions(role: Optional[TeamRole], is_team_creator: bool, is_personal: bool) -> TeamPermissions:
    if is_team_creator:
        capabilities = set(TeamCapability)
    elif role is not None:
        capabilities = set(TEAM_ROLE_CAPABILITIES.get(role, frozenset()))
    else:
        capabilities = set()

    if is_personal:
        capabilities -= PERSONAL_TEAM_DENIED

    return team_permissions_from_capabilities(capabilities)


class TeamPermissionChecker:

    def __init__(self, team_store: TeamStore, membership_store: MembershipStore):
        self.team_store = team_store
        self.membership_store = membership_store
        self._data: Optional[TeamPermissionsData] = None
        self._user_id: Optional[str] = None
        self._team_id: Optional[str] = None

    def resolve_team_ref(self, team_ref: str) -> str:
        team_id = self.team_store.find_team_id(team_ref) if team_ref else None
        if not team_id:
            raise TeamNotFoundError(team_ref)
        return team_id

    def load_context(self, user_id: str, team_id: str) -> TeamPermissionsData:
        """
        Repeating the same (user_id, team_id) once Loaded returns the loaded data.

        Raises:
            TeamNotFoundError: team does not exist
            ContextAlreadyLoadedError: loaded for a different user or team
        """
        if self._data is not None:
            if (user_id, team_id) != (self._user_id, self._team_id):
                raise ContextAlreadyLoadedError((self._user_id, self._team_id), (user_id, team_id))
            return self._data

        team = self.team_store.get_team(team_id)
        if team is None:
            raise TeamNotFoundError(team_id)

        role = parse_team_role(self.membership_store.get_team_role(team_id, user_id))
        is_team_creator = team.owner_id == user_id

        data = TeamPermissionsData(
            role=role,
            permissions=build_team_permissions(role, is_team_creator, team.is_personal),
            is_team_creator=is_team_creator,
            is_personal=team.is_personal,
        )
        self._user_id = user_id
        self._team_id = team_id
        self._data = data

        if IS_DEV:
            print(f"[PERMS] Team context loaded: user_id={user_id}, team_id={team_id}, "
                  f"role={role.value if role else None}, creator={is_team_creator}, "
                  f"personal={team.is_personal}")
        return data

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    @property
    def permissions_data(self) -> TeamPermissionsData:
        if self._data is None:
            raise NotLoadedError()
        return self._data

    @property
    def permissions(self) -> TeamPermissions:
        return self.permissions_data.permissions

    def has_permission(self, action: str, resource: str) -> bool:
        permissions = self.permissions
        capability = TeamCapability.from_pair(action, resource)
        if capability is None:
            return False
        return permissions.allows(capability)

    def can_view_team(self) -> bool:
        return self.permissions.can_view_team

    def can_edit_team(self) -> bool:
        return self.permissions.can_edit_team

    def can_delete_team(self) -> bool:
        return self.permissions.can_delete_team

    def can_archive_team(self) -> bool:
        return self.permissions.can_archive_team

    def can_manage_members(self) -> bool:
        return self.permissions.can_manage_members

    def can_manage_roles(self) -> bool:
        return self.permissions.can_manage_roles

    def can_invite_members(self) -> bool:
        return self.permissions.can_invite_members

    def can_remove_members(self) -> bool:
        return self.permissions.can_remove_members

    def can_leave_team(self) -> bool:
        return self.permissions.can_leave_team
