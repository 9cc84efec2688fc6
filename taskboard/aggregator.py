"""
taskboard/aggregator.py

Reduces resolved membership facts to a single effective project role.

- Direct ownership short-circuits to owner.
- Each (team role, grant role) pair is capped by both: the team standing's
  ceiling on the project scale and the role the team was granted.
- The best capped path wins. max/min make the result independent of the
  order memberships were returned in.
- No grants -> none.

Pure Python logic - no FastAPI imports, no database access.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from taskboard.resolver import ResolvedMembership
from taskboard.roles import (
    ProjectRole,
    TeamRole,
    project_role_for_rank,
    rank,
    team_role_ceiling,
)


def effective_grant(team_role: TeamRole, grant_role: ProjectRole) -> ProjectRole:
    """Project role one team path yields: min(team ceiling, grant)."""
    return project_role_for_rank(min(rank(team_role_ceiling(team_role)), rank(grant_role)))


def best_grant(team_grants: Iterable[Tuple[TeamRole, ProjectRole]]) -> ProjectRole:
    best = 0
    for team_role, grant_role in team_grants:
        best = max(best, rank(effective_grant(team_role, grant_role)))
    return project_role_for_rank(best)


def aggregate_role(resolved: ResolvedMembership) -> ProjectRole:
    if resolved.is_direct_owner:
        return ProjectRole.owner
    return best_grant(resolved.team_grants)
