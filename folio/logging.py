import logging
import sys
from pathlib import Path

import structlog

from .config import Settings, settings as default_settings

# Third-party loggers that follow LOG_LEVEL instead of the DEBUG root.
_LIBRARY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "apscheduler")

def _error_file_handler(path: str, formatter: logging.Formatter) -> logging.Handler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.ERROR)
    handler.setFormatter(formatter)
    return handler

def setup_logging(settings: Settings | None = None):
    """JSON logs to stdout; ERROR and above also go to LOG_ERROR_FILE when set."""
    settings = settings or default_settings
    log_level = getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO)
    formatter = logging.Formatter("%(message)s")

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setLevel(log_level)
    stdout.setFormatter(formatter)
    root.addHandler(stdout)

    error_file = (settings.log_error_file or "").strip()
    if error_file:
        root.addHandler(_error_file_handler(error_file, formatter))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        cache_logger_on_first_use=False,
    )
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
