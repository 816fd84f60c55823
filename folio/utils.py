import uuid
from datetime import date, datetime, timedelta, timezone
from dateutil import tz

def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def utc_in(hours: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()

def parse_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None

def today_local_iso(local_tz: str) -> str:
    tzinfo = tz.gettz(local_tz) or timezone.utc
    return datetime.now(timezone.utc).astimezone(tzinfo).date().isoformat()

def is_iso_date(value: str | None) -> bool:
    if not value or len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True

def new_id() -> str:
    return uuid.uuid4().hex
