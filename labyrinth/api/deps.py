"""
labyrinth.api.deps — FastAPI dependency injection
===================================================

The caller's identity comes from a bearer JWT whose ``sub`` claim is the
signer token.  A request without an ``Authorization`` header is anonymous;
operations that need a caller reject it with ``NotAuthenticated``.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from labyrinth.config import LabyrinthConfig, default_config, load_config
from labyrinth.database.engine import create_db_engine
from labyrinth.engine.identity import Signer
from labyrinth.services.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

_WEAK_SECRETS = frozenset({
    "labyrinth-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> LabyrinthConfig:
    try:
        return load_config()
    except FileNotFoundError:
        logger.warning("No config.yaml found; using built-in defaults")
        return default_config()


@lru_cache(maxsize=1)
def get_dispatcher() -> Dispatcher:
    return Dispatcher(get_engine(), config=get_config())


def get_session(engine: Annotated[Engine, Depends(get_engine)]):
    with Session(engine) as session:
        yield session


def create_access_token(signer: str) -> str:
    """Sign a token whose ``sub`` is *signer*."""
    return jwt.encode({"sub": signer}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def get_signer(
    authorization: Annotated[str | None, Header()] = None,
) -> Signer | None:
    """Decode the bearer JWT.  No header → anonymous; bad token → 401."""
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token has no subject")
    return Signer(str(subject))
