# aetherchat/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from contextvars import ContextVar

from aetherchat.config.settings import get_settings

# Set per request by the correlation middleware, "-" outside requests
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "celery",
    "openai",
    "httpx",
    "uvicorn.access",
)


class CorrelationIdFilter(logging.Filter):
    """Stamp every record with the current request's correlation id"""

    def filter(self, record):
        record.correlation_id = correlation_id_var.get()
        return True


def setup_logging(verbose=True):
    """Configure root logging once per process; safe to call again"""
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO) if verbose else logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_aetherchat", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        handler._aetherchat = True
        root.addHandler(handler)

    if not verbose:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.ERROR)
