"""
taskboard/auth_context.py

Authentication context for FastAPI dependency injection.

Identity is verified upstream by the identity provider; this module only reads
the bearer token it issued and extracts the user id. Every failure here is a
401: the permission engine never runs without a user.

This module MUST NOT import taskboard.main to avoid circular dependencies.
"""

from __future__ import annotations

from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict

from taskboard.config import ALGORITHM, IS_DEV, SECRET_KEY

# auto_error=False so a missing header becomes our 401, not FastAPI's default
security = HTTPBearer(auto_error=False)


def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        HTTPException(401): If token is expired or invalid
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


class AuthContext(BaseModel):
    """Immutable identity for one request. user_id comes from the token, never the body."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: Optional[str] = None


def require_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthContext:
    """
    Raises:
        HTTPException(401): missing header, bad token, or no subject
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = verify_token(credentials.credentials)
    user_id = payload.get("sub")

    if not user_id:
        print("[AUTH] Missing user_id in token payload")
        raise HTTPException(status_code=401, detail="Invalid token payload")

    ctx = AuthContext(user_id=str(user_id), email=payload.get("email"))

    if IS_DEV:
        print(f"[AUTH] Authenticated: user_id={ctx.user_id}")

    return ctx
