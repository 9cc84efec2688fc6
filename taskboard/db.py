# taskboard/db.py
# SQLite access for the membership/project data the permission engine reads

import sqlite3
from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Generator, Optional

from taskboard.config import DATABASE_PATH, IS_DEV

# Relative paths resolve next to the package, absolute paths are used as-is
DB_PATH = str(FsPath(__file__).resolve().parent / DATABASE_PATH)


SCHEMA = """
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    slug TEXT UNIQUE NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    owner_id TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS teams (
    id TEXT PRIMARY KEY,
    slug TEXT UNIQUE NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    owner_id TEXT NOT NULL,
    is_personal INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS team_members (
    team_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    role TEXT NOT NULL,
    PRIMARY KEY (team_id, user_id),
    FOREIGN KEY (team_id) REFERENCES teams(id)
);

CREATE TABLE IF NOT EXISTS project_teams (
    project_id TEXT NOT NULL,
    team_id TEXT NOT NULL,
    role TEXT NOT NULL,
    PRIMARY KEY (project_id, team_id),
    FOREIGN KEY (project_id) REFERENCES projects(id),
    FOREIGN KEY (team_id) REFERENCES teams(id)
);

CREATE INDEX IF NOT EXISTS idx_team_members_user ON team_members(user_id);
CREATE INDEX IF NOT EXISTS idx_project_teams_project ON project_teams(project_id);
"""


def get_db(db_path: Optional[str] = None) -> sqlite3.Connection:
    """
    Create and return a SQLite connection with Row factory.
    """
    conn = sqlite3.connect(db_path or DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db_connection(db_path: Optional[str] = None) -> Generator[sqlite3.Connection, None, None]:
    """Context manager that always closes the connection."""
    conn = get_db(db_path)
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None) -> None:
    """Create the tables the permission engine reads, if missing."""
    with get_db_connection(db_path) as conn:
        conn.executescript(SCHEMA)
        conn.commit()
    if IS_DEV:
        print(f"[DB] Schema ready at {db_path or DB_PATH}")
