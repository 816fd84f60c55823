"""Parser for the portfolio CSV export (``name,category,value[,asof]``)."""

from __future__ import annotations

import math

from .models import CATEGORIES, PortfolioRow

REQUIRED_HEADERS = ("name", "category", "value")
HEADER_ERROR = "CSV headers missing. Expected: name, category, value (optional: asOf)."


class CsvHeaderError(ValueError):
    """The header row lacks one of the required columns."""


def split_csv_line(line: str) -> list[str]:
    out: list[str] = []
    cur: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                cur.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            out.append("".join(cur))
            cur = []
        else:
            cur.append(ch)
        i += 1
    out.append("".join(cur))
    return out


def normalize_category(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    return value if value in CATEGORIES else "other"


def parse_value(raw: str) -> float | None:
    """Number from a value cell, or None when the cell is not a finite number.

    Thousand separators are dropped; a blank cell reads as 0.
    """
    text = raw.strip().replace(",", "")
    if not text:
        return 0.0
    if "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _index(header: list[str], name: str) -> int:
    try:
        return header.index(name)
    except ValueError:
        return -1


def _cell(cols: list[str], idx: int) -> str:
    if idx < 0 or idx >= len(cols):
        return ""
    return cols[idx]


def parse_portfolio_csv(text: str, default_as_of: str) -> list[PortfolioRow]:
    lines = [line for line in (text or "").replace("\r", "").split("\n") if line.strip()]
    if not lines:
        return []

    header = [h.strip().lower() for h in split_csv_line(lines[0])]
    idx = {key: _index(header, key) for key in (*REQUIRED_HEADERS, "asof")}
    if any(idx[key] < 0 for key in REQUIRED_HEADERS):
        raise CsvHeaderError(HEADER_ERROR)

    rows: list[PortfolioRow] = []
    for line in lines[1:]:
        cols = split_csv_line(line)
        name = _cell(cols, idx["name"]).strip()
        if not name:
            continue
        value = parse_value(_cell(cols, idx["value"]))
        if value is None:
            continue
        as_of = _cell(cols, idx["asof"]).strip() or default_as_of
        rows.append(
            PortfolioRow(
                name=name,
                category=normalize_category(_cell(cols, idx["category"])),
                value=value,
                as_of=as_of,
            )
        )
    return rows
