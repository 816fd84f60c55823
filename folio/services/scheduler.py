from __future__ import annotations
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import structlog

from ..config import Settings
from ..db import Database
from .reporting import generate_all_reports

_log = structlog.get_logger()


def build_scheduler(db: Database, settings: Settings) -> AsyncIOScheduler:
    tz = ZoneInfo(settings.local_tz)
    sched = AsyncIOScheduler(timezone=tz)

    async def run_weekly():
        conn = db.connect()
        try:
            count = generate_all_reports(conn, settings=settings)
        finally:
            conn.close()
        _log.info("weekly_reports_done", reports=count)

    sched.add_job(
        run_weekly,
        CronTrigger(
            day_of_week=settings.reports_weekday,
            hour=settings.reports_hour,
            minute=settings.reports_minute,
            timezone=tz,
        ),
        id="weekly_reports",
        replace_existing=True,
    )
    return sched
