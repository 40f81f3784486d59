"""
FastAPI Dependencies

Shared dependencies for route handlers.
"""

from pathlib import Path
from typing import Optional
import sys

from fastapi import Depends, HTTPException, Request

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from config import AUTH_COOKIE_NAME
from database.db import get_db
from i18n.i18n import translate as t
from services.auth_service import AuthService


def get_request_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the auth cookie."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(AUTH_COOKIE_NAME)


async def get_optional_user(request: Request) -> Optional[dict]:
    """Signed-in user, or None for anonymous requests."""
    token = get_request_token(request)
    if not token:
        return None

    async with get_db() as db:
        return await AuthService(db).get_user_for_token(token)


async def get_current_user(user: Optional[dict] = Depends(get_optional_user)) -> dict:
    """Signed-in user; 401 otherwise."""
    if user is None:
        raise HTTPException(status_code=401, detail=t('api.errors.not_authenticated'))
    return user


__all__ = ['get_db', 'get_request_token', 'get_optional_user', 'get_current_user']
