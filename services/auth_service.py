"""
Auth Service

Email/password accounts with opaque bearer tokens.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import aiosqlite
import bcrypt

from config import AUTH_TOKEN_TTL_HOURS, MIN_PASSWORD_LENGTH
from database.db import fetch_one
from exceptions import AuthError


logger = logging.getLogger(__name__)

SQLITE_TIMESTAMP = "%Y-%m-%d %H:%M:%S"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def _utc_timestamp(delta: timedelta = timedelta(0)) -> str:
    # Same format as SQLite's CURRENT_TIMESTAMP so comparisons work in SQL
    return (datetime.now(timezone.utc) + delta).strftime(SQLITE_TIMESTAMP)


class AuthService:
    """Service for sign-up, sign-in and token lookup."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def sign_up(self, email: str, password: str, username: Optional[str] = None) -> dict:
        """
        Create an account.

        Username defaults to the local part of the email.

        Raises:
            AuthError: missing fields, short password or email already registered
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthError("email and password required", message_key="auth.errors.missing_credentials")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError("password too short", message_key="auth.errors.password_too_short")

        username = (username or "").strip() or email.split("@")[0]

        try:
            cursor = await self.db.execute(
                "INSERT INTO users (email, username, password_hash) VALUES (?, ?, ?)",
                [email, username, hash_password(password)]
            )
            await self.db.commit()
        except aiosqlite.IntegrityError as e:
            raise AuthError("email already registered", message_key="auth.errors.email_taken") from e

        logger.info(f"New account: {email}")
        return {"id": cursor.lastrowid, "email": email, "username": username}

    async def sign_in(self, email: str, password: str) -> dict:
        """
        Check credentials and issue a token.

        Returns:
            {"token", "expires_at", "user"}

        Raises:
            AuthError: unknown email or wrong password
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthError("email and password required", message_key="auth.errors.missing_credentials")

        user = await fetch_one(
            self.db,
            "SELECT id, email, username, password_hash FROM users WHERE email = ?",
            [email]
        )
        if not user or not verify_password(password, user["password_hash"]):
            logger.warning(f"Failed sign-in for {email}")
            raise AuthError("invalid email or password", message_key="auth.errors.invalid_credentials")

        token = secrets.token_urlsafe(32)
        expires_at = _utc_timestamp(timedelta(hours=AUTH_TOKEN_TTL_HOURS))
        await self.db.execute(
            "INSERT INTO auth_sessions (token, user_id, expires_at) VALUES (?, ?, ?)",
            [token, user["id"], expires_at]
        )
        await self.db.commit()

        return {
            "token": token,
            "expires_at": expires_at,
            "user": {"id": user["id"], "email": user["email"], "username": user["username"]},
        }

    async def sign_out(self, token: str) -> bool:
        cursor = await self.db.execute("DELETE FROM auth_sessions WHERE token = ?", [token])
        await self.db.commit()
        return cursor.rowcount > 0

    async def get_user_for_token(self, token: Optional[str]) -> Optional[dict]:
        """Current user for a token, None if missing or expired."""
        if not token:
            return None

        query = """
            SELECT u.id, u.email, u.username
            FROM auth_sessions s
            JOIN users u ON u.id = s.user_id
            WHERE s.token = ? AND s.expires_at > ?
        """
        return await fetch_one(self.db, query, [token, _utc_timestamp()])
