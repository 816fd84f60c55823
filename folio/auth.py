from __future__ import annotations

import secrets
import sqlite3
from datetime import datetime, timezone

import bcrypt
import structlog

from .config import Settings, settings as default_settings
from .store import users
from .utils import new_id, parse_iso, utc_in

log = structlog.get_logger()

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


class AuthError(Exception):
    """Bad credentials or unusable session."""


class EmailTaken(ValueError):
    pass


def hash_password(password: str, rounds: int) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, stored: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), (stored or "").encode("utf-8"))
    except ValueError:
        # not a bcrypt hash
        return False


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def sign_up(
    conn: sqlite3.Connection,
    email: str,
    password: str,
    display_name: str = "",
    settings: Settings | None = None,
) -> dict:
    settings = settings or default_settings
    email = _normalize_email(email)
    if "@" not in email:
        raise ValueError("A valid email is required.")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
    if users.get_user_by_email(conn, email):
        raise EmailTaken("An account with this email already exists.")
    uid = new_id()
    users.insert_user(conn, uid, email, display_name, hash_password(password, settings.password_hash_rounds))
    log.info("auth_signup", uid=uid)
    return users.public_profile(users.get_user(conn, uid))


def sign_in(conn: sqlite3.Connection, email: str, password: str, settings: Settings | None = None) -> dict:
    settings = settings or default_settings
    user = users.get_user_by_email(conn, _normalize_email(email))
    if not user or not verify_password(password or "", user["password_hash"]):
        log.warning("auth_signin_failed")
        raise AuthError("Invalid email or password.")
    token = secrets.token_urlsafe(32)
    expires = utc_in(settings.session_ttl_hours)
    users.insert_session(conn, token, user["uid"], expires)
    users.touch_last_login(conn, user["uid"])
    log.info("auth_signin", uid=user["uid"])
    return {"token": token, "expires_at_utc": expires, "user": users.public_profile(users.get_user(conn, user["uid"]))}


def sign_out(conn: sqlite3.Connection, token: str) -> bool:
    return users.delete_session(conn, token)


def resolve_user(conn: sqlite3.Connection, token: str | None) -> dict | None:
    if not token:
        return None
    session = users.get_session(conn, token)
    if not session:
        return None
    expires = parse_iso(session["expires_at_utc"])
    if expires is None or expires <= datetime.now(timezone.utc):
        users.delete_session(conn, token)
        return None
    user = users.get_user(conn, session["uid"])
    return users.public_profile(user) if user else None
