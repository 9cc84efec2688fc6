"""
taskboard/stores.py

Collaborator interfaces the permission engine reads from, plus their SQLite
implementation.

The engine never writes through these interfaces: role assignments and grants
are owned by the membership service. Role values are returned as raw strings;
parsing (and ignoring anything unknown) is the resolver's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from taskboard.db import get_db_connection


@dataclass(frozen=True)
class Team:
    id: str
    owner_id: str
    is_personal: bool = False
    slug: Optional[str] = None
    name: Optional[str] = None


class ProjectStore(ABC):

    @abstractmethod
    def get_project_owner(self, project_id: str) -> Optional[str]:
        """Owner user id, or None when the project does not exist."""

    @abstractmethod
    def find_project_id(self, project_ref: str) -> Optional[str]:
        """Resolve an id or slug to a project id, or None."""


class TeamStore(ABC):

    @abstractmethod
    def get_team(self, team_id: str) -> Optional[Team]:
        ...

    @abstractmethod
    def find_team_id(self, team_ref: str) -> Optional[str]:
        ...


class MembershipStore(ABC):

    @abstractmethod
    def get_team_memberships(self, user_id: str) -> List[Tuple[str, str]]:
        """(team_id, team_role) for every team the user belongs to."""

    @abstractmethod
    def get_project_grants(self, project_id: str) -> List[Tuple[str, str]]:
        """(team_id, grant_role) for every team granted access to the project."""

    @abstractmethod
    def get_team_role(self, team_id: str, user_id: str) -> Optional[str]:
        """The user's role string in one team, or None when not a member."""


class SQLiteStore(ProjectStore, TeamStore, MembershipStore):
    """
    Read-only SQLite implementation of all three stores.

    Opens a short-lived connection per call. Errors from sqlite3 propagate
    unchanged; retry policy belongs to the caller.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    def get_project_owner(self, project_id: str) -> Optional[str]:
        with get_db_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT owner_id FROM projects WHERE id = ?",
                (project_id,),
            ).fetchone()
        return row["owner_id"] if row else None

    def find_project_id(self, project_ref: str) -> Optional[str]:
        # Prefer an exact id match over a slug that happens to equal another id
        with get_db_connection(self.db_path) as conn:
            row = conn.execute(
                """
                SELECT id FROM projects
                WHERE id = ? OR slug = ?
                ORDER BY CASE WHEN id = ? THEN 0 ELSE 1 END
                LIMIT 1
                """,
                (project_ref, project_ref, project_ref),
            ).fetchone()
        return row["id"] if row else None

    def get_team(self, team_id: str) -> Optional[Team]:
        with get_db_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT id, slug, name, owner_id, is_personal FROM teams WHERE id = ?",
                (team_id,),
            ).fetchone()
        if not row:
            return None
        return Team(
            id=row["id"],
            owner_id=row["owner_id"],
            is_personal=bool(row["is_personal"]),
            slug=row["slug"],
            name=row["name"],
        )

    def find_team_id(self, team_ref: str) -> Optional[str]:
        with get_db_connection(self.db_path) as conn:
            row = conn.execute(
                """
                SELECT id FROM teams
                WHERE id = ? OR slug = ?
                ORDER BY CASE WHEN id = ? THEN 0 ELSE 1 END
                LIMIT 1
                """,
                (team_ref, team_ref, team_ref),
            ).fetchone()
        return row["id"] if row else None

    def get_team_memberships(self, user_id: str) -> List[Tuple[str, str]]:
        with get_db_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT team_id, role FROM team_members WHERE user_id = ?",
                (user_id,),
            ).fetchall()
        return [(row["team_id"], row["role"]) for row in rows]

    def get_project_grants(self, project_id: str) -> List[Tuple[str, str]]:
        with get_db_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT team_id, role FROM project_teams WHERE project_id = ?",
                (project_id,),
            ).fetchall()
        return [(row["team_id"], row["role"]) for row in rows]

    def get_team_role(self, team_id: str, user_id: str) -> Optional[str]:
        with get_db_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT role FROM team_members WHERE team_id = ? AND user_id = ? LIMIT 1",
                (team_id, user_id),
            ).fetchone()
        return row["role"] if row else None
