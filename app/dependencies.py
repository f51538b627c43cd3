from typing import Optional

from fastapi import Header, Request

from app.config import get_settings
from app.core.security import resolve_actor
from app.database.session import get_db


def get_current_actor(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> str:
    settings = get_settings()
    api_key = request.headers.get(settings.API_KEY_HEADER) or request.headers.get("api-key")
    return resolve_actor(api_key=api_key, authorization=authorization)


__all__ = ["get_current_actor", "get_db"]
