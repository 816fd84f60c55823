from __future__ import annotations

import sqlite3
from typing import Iterator

from fastapi import Depends, Header, HTTPException, Request

from ..auth import resolve_user
from ..config import Settings
from ..db import Database
from ..store.strategies import get_strategy


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[sqlite3.Connection]:
    database: Database = request.app.state.db
    conn = database.connect()
    try:
        yield conn
    finally:
        conn.close()


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_user(
    token: str | None = Depends(bearer_token),
    conn: sqlite3.Connection = Depends(get_db),
) -> dict:
    user = resolve_user(conn, token)
    if not user:
        raise HTTPException(401, 'Not signed in.')
    return user


def owned_strategy(
    strategy_id: str,
    user: dict = Depends(current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> dict:
    strategy = get_strategy(conn, strategy_id, owner_uid=user["uid"])
    if not strategy:
        raise HTTPException(404, 'strategy not found')
    return strategy
