from __future__ import annotations

import json
import sqlite3

from ..utils import new_id, now_utc_iso

_COLS = (
    "id, owner_uid, title, url, notes, tags_json, strategy_ids_json, asset_ids_json, "
    "created_at_utc, updated_at_utc"
)

_LIST_FIELDS = {"tags": "tags_json", "strategy_ids": "strategy_ids_json", "asset_ids": "asset_ids_json"}
_TEXT_FIELDS = ("title", "url", "notes")


def _str_list(raw: str | None) -> list[str]:
    try:
        data = json.loads(raw or "[]")
    except json.JSONDecodeError:
        return []
    if not isinstance(data, list):
        return []
    return [x for x in data if isinstance(x, str)]


def _row_to_item(row) -> dict:
    return {
        "id": row[0],
        "owner_uid": row[1],
        "title": row[2],
        "url": row[3] or "",
        "notes": row[4] or "",
        "tags": _str_list(row[5]),
        "strategy_ids": _str_list(row[6]),
        "asset_ids": _str_list(row[7]),
        "created_at_utc": row[8],
        "updated_at_utc": row[9],
    }


def list_items(conn: sqlite3.Connection, owner_uid: str) -> list[dict]:
    rows = conn.execute(
        f"SELECT {_COLS} FROM research_items WHERE owner_uid=? ORDER BY updated_at_utc DESC",
        (owner_uid,),
    ).fetchall()
    return [_row_to_item(r) for r in rows]


def get_item(conn: sqlite3.Connection, item_id: str, owner_uid: str) -> dict | None:
    row = conn.execute(
        f"SELECT {_COLS} FROM research_items WHERE id=? AND owner_uid=?",
        (item_id, owner_uid),
    ).fetchone()
    return _row_to_item(row) if row else None


def create_item(conn: sqlite3.Connection, owner_uid: str, data: dict) -> dict:
    title = (data.get("title") or "").strip()
    if not title:
        raise ValueError("Title is required.")
    item_id = new_id()
    now = now_utc_iso()
    conn.execute(
        f"INSERT INTO research_items({_COLS}) VALUES(?,?,?,?,?,?,?,?,?,?)",
        (
            item_id, owner_uid, title, data.get("url") or "", data.get("notes") or "",
            json.dumps(list(data.get("tags") or [])),
            json.dumps(list(data.get("strategy_ids") or [])),
            json.dumps(list(data.get("asset_ids") or [])),
            now, now,
        ),
    )
    return get_item(conn, item_id, owner_uid)


def update_item(conn: sqlite3.Connection, item_id: str, owner_uid: str, update: dict) -> dict | None:
    if not get_item(conn, item_id, owner_uid):
        return None
    sets, params = [], []
    for key in _TEXT_FIELDS:
        if update.get(key) is None:
            continue
        value = update[key]
        if key == "title":
            value = value.strip()
            if not value:
                raise ValueError("Title is required.")
        sets.append(f"{key}=?")
        params.append(value)
    for key, column in _LIST_FIELDS.items():
        if update.get(key) is None:
            continue
        sets.append(f"{column}=?")
        params.append(json.dumps(list(update[key])))
    sets.append("updated_at_utc=?")
    params.append(now_utc_iso())
    conn.execute(
        f"UPDATE research_items SET {', '.join(sets)} WHERE id=? AND owner_uid=?",
        (*params, item_id, owner_uid),
    )
    return get_item(conn, item_id, owner_uid)


def delete_item(conn: sqlite3.Connection, item_id: str, owner_uid: str) -> bool:
    cur = conn.execute("DELETE FROM research_items WHERE id=? AND owner_uid=?", (item_id, owner_uid))
    return cur.rowcount > 0
