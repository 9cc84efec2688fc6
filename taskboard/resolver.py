"""
taskboard/resolver.py

Membership resolution: the only step of permission evaluation that performs I/O.

Given a user and a project, collects the raw facts the aggregator needs:
- is the user the project's direct owner
- which of the user's team memberships reach this project through a grant,
  and with which (team role, grant role) pair

Rules:
- Missing project -> ProjectNotFoundError (a LookupError)
- Grant pointing at an unknown team -> TeamNotFoundError (a LookupError)
- No relevant memberships -> empty grant list, not an error
- Never decides permissions itself, never raises a permission error
- Unknown role strings are skipped (they can only narrow access)
- Personal teams count only for their owner; nobody else can inherit a grant
  through someone else's personal team
- Store errors propagate unchanged (no retries here)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

from taskboard.config import IS_DEV
from taskboard.errors import ProjectNotFoundError, TeamNotFoundError
from taskboard.roles import ProjectRole, TeamRole, parse_project_role, parse_team_role
from taskboard.stores import MembershipStore, ProjectStore, TeamStore


@dataclass(frozen=True)
class ResolvedMembership:
    """
    Raw facts for one (user, project) pair.

    team_ids holds every team that could change this result (the user's teams
    that hold a grant on the project), for cache invalidation.
    """
    user_id: str
    project_id: str
    is_direct_owner: bool
    team_grants: Tuple[Tuple[TeamRole, ProjectRole], ...] = ()
    team_ids: FrozenSet[str] = field(default_factory=frozenset)


class MembershipResolver:

    def __init__(self, project_store: ProjectStore, team_store: TeamStore, membership_store: MembershipStore):
        self.project_store = project_store
        self.team_store = team_store
        self.membership_store = membership_store

    def resolve_project_ref(self, project_ref: str) -> str:
        """Resolve a project id or slug to its id."""
        project_id = self.project_store.find_project_id(project_ref) if project_ref else None
        if not project_id:
            raise ProjectNotFoundError(project_ref)
        return project_id

    def resolve(self, user_id: str, project_id: str) -> ResolvedMembership:
        owner_id = self.project_store.get_project_owner(project_id)
        if owner_id is None:
            raise ProjectNotFoundError(project_id)

        is_direct_owner = owner_id == user_id

        grants_by_team: Dict[str, str] = dict(self.membership_store.get_project_grants(project_id))
        memberships = self.membership_store.get_team_memberships(user_id)

        team_grants = []
        team_ids = set()
        for team_id, raw_team_role in memberships:
            if team_id not in grants_by_team:
                continue

            team = self.team_store.get_team(team_id)
            if team is None:
                raise TeamNotFoundError(team_id)

            team_ids.add(team_id)

            if team.is_personal and team.owner_id != user_id:
                if IS_DEV:
                    print(f"[PERMS] Skipping personal team grant: team_id={team_id}, "
                          f"user_id={user_id}, project_id={project_id}")
                continue

            team_role = parse_team_role(raw_team_role)
            grant_role = parse_project_role(grants_by_team[team_id])
            if team_role is None or grant_role is None:
                if IS_DEV:
                    print(f"[PERMS] Ignoring unrecognized role: team_id={team_id}, "
                          f"team_role={raw_team_role!r}, grant_role={grants_by_team[team_id]!r}")
                continue

            team_grants.append((team_role, grant_role))

        return ResolvedMembership(
            user_id=user_id,
            project_id=project_id,
            is_direct_owner=is_direct_owner,
            team_grants=tuple(team_grants),
            team_ids=frozenset(team_ids),
        )
