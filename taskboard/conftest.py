"""
Shared fixtures: a temporary SQLite database seeded with a small org.

Projects
    p-roadmap ("roadmap")  owner u-owner
    p-website ("website")  owner u-outsider

Teams and grants on p-roadmap
    t-eng      editor   u-eng-admin (admin), u-owner (member)
    t-design   viewer   u-multi (member), u-owner (member)
    t-platform editor   u-multi (owner)

Grants on p-website
    t-solo     admin    personal team of u-solo; u-intruder (admin) is a stray row
    t-odd      "superuser" (unknown role); u-odd (member)
"""

import sqlite3

import pytest

from taskboard.db import init_db
from taskboard.resolver import MembershipResolver
from taskboard.stores import SQLiteStore

PROJECTS = [
    ("p-roadmap", "roadmap", "Roadmap", "u-owner"),
    ("p-website", "website", "Website", "u-outsider"),
]

TEAMS = [
    ("t-eng", "eng", "Engineering", "u-eng-admin", 0),
    ("t-design", "design", "Design", "u-multi", 0),
    ("t-platform", "platform", "Platform", "u-multi", 0),
    ("t-solo", "solo", "Solo's space", "u-solo", 1),
    ("t-odd", "odd", "Odd", "u-odd", 0),
]

TEAM_MEMBERS = [
    ("t-eng", "u-eng-admin", "admin"),
    ("t-eng", "u-owner", "member"),
    ("t-design", "u-multi", "member"),
    ("t-design", "u-owner", "member"),
    ("t-platform", "u-multi", "owner"),
    ("t-solo", "u-solo", "owner"),
    ("t-solo", "u-intruder", "admin"),
    ("t-odd", "u-odd", "member"),
]

PROJECT_TEAMS = [
    ("p-roadmap", "t-eng", "editor"),
    ("p-roadmap", "t-design", "viewer"),
    ("p-roadmap", "t-platform", "editor"),
    ("p-website", "t-solo", "admin"),
    ("p-website", "t-odd", "superuser"),
]


def seed_database(db_path: str) -> None:
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    cur.executemany("INSERT INTO projects (id, slug, name, owner_id) VALUES (?, ?, ?, ?)", PROJECTS)
    cur.executemany("INSERT INTO teams (id, slug, name, owner_id, is_personal) VALUES (?, ?, ?, ?, ?)", TEAMS)
    cur.executemany("INSERT INTO team_members (team_id, user_id, role) VALUES (?, ?, ?)", TEAM_MEMBERS)
    cur.executemany("INSERT INTO project_teams (project_id, team_id, role) VALUES (?, ?, ?)", PROJECT_TEAMS)
    conn.commit()
    conn.close()


def execute(db_path: str, query: str, params: tuple = ()) -> None:
    """Apply a membership/grant change the way the membership service would."""
    conn = sqlite3.connect(db_path)
    conn.execute(query, params)
    conn.commit()
    conn.close()


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "taskboard_test.db")
    seed_database(path)
    return path


@pytest.fixture
def run_sql(db_path):
    return lambda query, params=(): execute(db_path, query, params)


@pytest.fixture
def store(db_path):
    return SQLiteStore(db_path)


@pytest.fixture
def resolver(store):
    return MembershipResolver(store, store, store)
