# ---------------------------------------------------------
# taskboard/main.py
# Taskboard - Permission service
#
# Run: uvicorn taskboard.main:app --reload (from repo root)
#
# - FastAPI + SQLite (read-only view of memberships and grants)
# - /api/projects/{project_ref}/permissions : caller's capabilities on a project
# - /api/teams/{team_ref}/permissions       : caller's capabilities on a team
# - /api/internal/permissions/invalidate    : membership/grant change reports
# ---------------------------------------------------------

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.config import CORS_ORIGINS, ENV
from taskboard.db import init_db
from taskboard.routes_permissions import router as permissions_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    print(f"[APP] Taskboard permission service started (env={ENV})")
    yield


app = FastAPI(title="Taskboard Permissions", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(permissions_router)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
