"""
corgiquest.api.deps — FastAPI dependencies
===========================================

Engine and config singletons for route injection, plus the admin JWT
guard.  ``JWT_SECRET`` is validated when this module is imported, so a
misconfigured deployment fails at boot rather than on the first admin call.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Annotated, Any

import jwt
from fastapi import Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from corgiquest.config import CorgiQuestConfig, load_config
from corgiquest.database.engine import create_db_engine

JWT_ALGORITHM = "HS256"
ADMIN_TOKEN_HOURS = 12
MIN_SECRET_LENGTH = 32

# Values that ship in examples and docs; never acceptable in a deployment
_WEAK_SECRETS = frozenset({
    "corgiquest-dev-secret-change-me",
    "change-me",
    "changeme",
    "secret",
    "dev",
})


def _load_jwt_secret() -> str:
    """Return ``JWT_SECRET`` or raise :class:`RuntimeError` describing the problem."""
    secret = os.getenv("JWT_SECRET", "").strip()
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set; generate one with "
            "`python -c \"import secrets; print(secrets.token_urlsafe(64))\"`."
        )
    if secret.lower() in _WEAK_SECRETS:
        raise RuntimeError(f"JWT_SECRET {secret!r} is a known weak default; pick a unique value.")
    if len(secret) < MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short: {len(secret)} chars, need at least {MIN_SECRET_LENGTH}."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


# ---------------------------------------------------------------------------
# Singletons (overridden in tests)
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> CorgiQuestConfig:
    return load_config()


# ---------------------------------------------------------------------------
# Admin auth
# ---------------------------------------------------------------------------
def create_admin_token(subject: str, hours: int = ADMIN_TOKEN_HOURS) -> str:
    """Mint an admin JWT for *subject*, valid for *hours*."""
    now = datetime.now(UTC)
    claims = {"sub": subject, "is_admin": True, "iat": now, "exp": now + timedelta(hours=hours)}
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def get_current_admin(
    authorization: Annotated[str | None, Header()] = None,
) -> dict[str, Any]:
    """Decode the bearer token: 401 when absent or invalid, 403 when not admin."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme != "Bearer" or not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    try:
        claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError as exc:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token") from exc
    if claims.get("is_admin") is not True:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not admin")
    return claims
