"""
Auth API Routes

Sign-up, sign-in and sign-out for the dashboard and saved thumbnails.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.dependencies import get_current_user, get_request_token
from config import AUTH_COOKIE_NAME, AUTH_TOKEN_TTL_HOURS
from database.db import get_db
from exceptions import AuthError
from i18n.i18n import translate as t
from services.auth_service import AuthService


router = APIRouter()
logger = logging.getLogger(__name__)


class SignUpRequest(BaseModel):
    email: str
    password: str
    username: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


def _auth_error(error: AuthError, status_code: int) -> HTTPException:
    detail = t(error.message_key) if error.message_key else str(error)
    return HTTPException(status_code=status_code, detail=detail)


@router.post("/signup", status_code=201)
async def sign_up(body: SignUpRequest):
    """Create an account. Username defaults to the email's local part."""
    async with get_db() as db:
        try:
            user = await AuthService(db).sign_up(body.email, body.password, body.username)
        except AuthError as e:
            # Duplicate email is a conflict, the rest are bad input
            status = 409 if e.message_key == 'auth.errors.email_taken' else 400
            raise _auth_error(e, status)

    return {"user": user}


@router.post("/signin")
async def sign_in(body: SignInRequest):
    """Check credentials; returns a token and sets the auth cookie."""
    async with get_db() as db:
        try:
            session = await AuthService(db).sign_in(body.email, body.password)
        except AuthError as e:
            raise _auth_error(e, 401)

    response = JSONResponse(content={"token": session["token"], "user": session["user"]})
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=session["token"],
        max_age=AUTH_TOKEN_TTL_HOURS * 60 * 60,
        httponly=True,
        samesite="lax"
    )
    return response


@router.post("/signout")
async def sign_out(request: Request):
    token = get_request_token(request)
    if token:
        async with get_db() as db:
            await AuthService(db).sign_out(token)

    response = JSONResponse(content={"success": True})
    response.delete_cookie(AUTH_COOKIE_NAME)
    return response


@router.get("/me")
async def me(user: dict = Depends(get_current_user)):
    return {"user": user}
