from __future__ import annotations

import hmac
import logging
from typing import Optional

import jwt
from fastapi import HTTPException, status

from app.config import get_settings

logger = logging.getLogger(__name__)


def _load_api_keys() -> dict[str, str]:
    """Parse ``API_KEYS`` into ``{key: actor}``.

    Entries are ``key:actor`` pairs; a bare key maps to the actor ``api-key``.
    """
    settings = get_settings()
    keys: dict[str, str] = {}
    if not settings.API_KEYS:
        return keys
    for value in settings.API_KEYS.split(","):
        value = value.strip()
        if not value:
            continue
        key, _, actor = value.partition(":")
        key = key.strip()
        if key:
            keys[key] = actor.strip() or "api-key"
    return keys


def _get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_jwt(token: str) -> dict:
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="JWT auth is not configured",
        )

    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
    except jwt.PyJWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid JWT",
        ) from exc


def _match_api_key(api_key: str, keys: dict[str, str]) -> Optional[str]:
    for key, actor in keys.items():
        if hmac.compare_digest(api_key, key):
            return actor
    return None


def resolve_actor(
    api_key: Optional[str],
    authorization: Optional[str],
) -> str:
    """Return the name stamped into created_by / updated_by / deleted_by."""
    settings = get_settings()

    if api_key:
        actor = _match_api_key(api_key, _load_api_keys())
        if actor is not None:
            return actor
        if settings.AUTH_REQUIRED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid API key",
            )

    token = _get_bearer_token(authorization)
    if token:
        payload = _decode_jwt(token)
        subject = payload.get("sub") or payload.get("preferred_username")
        if subject:
            return str(subject)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
        )

    if settings.AUTH_REQUIRED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return settings.DEFAULT_ACTOR


__all__ = ["resolve_actor"]
