from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from .config import Settings, settings as default_settings
from .db import Database
from .logging import setup_logging
from .api.routes import router as api_router
from .api.auth import router as auth_router
from .api.strategies import router as strategies_router
from .api.portfolio import router as portfolio_router
from .api.research import router as research_router
from .services.scheduler import build_scheduler

log = structlog.get_logger()

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings)
    db = Database(settings.db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sched = None
        if settings.reports_schedule_enabled:
            sched = build_scheduler(db, settings)
            sched.start()
            log.info("scheduler_started", weekday=settings.reports_weekday, hour=settings.reports_hour)
        try:
            yield
        finally:
            if sched is not None:
                sched.shutdown(wait=False)

    app = FastAPI(title="folio", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.include_router(api_router)
    app.include_router(auth_router)
    app.include_router(strategies_router)
    app.include_router(portfolio_router)
    app.include_router(research_router)
    return app

app = create_app()
