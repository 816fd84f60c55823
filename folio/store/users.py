from __future__ import annotations

import sqlite3

from ..utils import now_utc_iso

_COLS = "uid, email, display_name, password_hash, created_at_utc, last_login_at_utc"


def _row_to_user(row) -> dict:
    return {
        "uid": row[0],
        "email": row[1],
        "display_name": row[2] or "",
        "password_hash": row[3],
        "created_at_utc": row[4],
        "last_login_at_utc": row[5],
    }


def public_profile(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "password_hash"}


def get_user(conn: sqlite3.Connection, uid: str) -> dict | None:
    row = conn.execute(f"SELECT {_COLS} FROM users WHERE uid=?", (uid,)).fetchone()
    return _row_to_user(row) if row else None


def get_user_by_email(conn: sqlite3.Connection, email: str) -> dict | None:
    row = conn.execute(f"SELECT {_COLS} FROM users WHERE email=?", (email,)).fetchone()
    return _row_to_user(row) if row else None


def insert_user(conn: sqlite3.Connection, uid: str, email: str, display_name: str, password_hash: str):
    conn.execute(
        f"INSERT INTO users({_COLS}) VALUES(?,?,?,?,?,?)",
        (uid, email, display_name or "", password_hash, now_utc_iso(), None),
    )


def touch_last_login(conn: sqlite3.Connection, uid: str):
    conn.execute("UPDATE users SET last_login_at_utc=? WHERE uid=?", (now_utc_iso(), uid))


def insert_session(conn: sqlite3.Connection, token: str, uid: str, expires_at_utc: str):
    conn.execute(
        "INSERT INTO sessions(token, uid, created_at_utc, expires_at_utc) VALUES(?,?,?,?)",
        (token, uid, now_utc_iso(), expires_at_utc),
    )


def get_session(conn: sqlite3.Connection, token: str) -> dict | None:
    row = conn.execute(
        "SELECT token, uid, created_at_utc, expires_at_utc FROM sessions WHERE token=?",
        (token,),
    ).fetchone()
    if not row:
        return None
    return {"token": row[0], "uid": row[1], "created_at_utc": row[2], "expires_at_utc": row[3]}


def delete_session(conn: sqlite3.Connection, token: str) -> bool:
    return conn.execute("DELETE FROM sessions WHERE token=?", (token,)).rowcount > 0
