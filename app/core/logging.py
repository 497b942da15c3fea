"""
Logging configuration for the HR ID Admin backend

Every record carries the client address and acting user of the request it was
emitted in, so service logs line up with activity log entries.
"""
import logging
import sys
from app.core.config import settings
from app.core.request_context import get_request_context

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(client_ip)s user=%(user_id)s] %(message)s"


class RequestContextFilter(logging.Filter):
    """Copy the current RequestContext onto log records ('-' outside a request)"""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_request_context()
        record.client_ip = (ctx.ip_address if ctx else None) or "-"
        record.user_id = ctx.user_id if ctx and ctx.user_id is not None else "-"
        return True


def setup_logging() -> None:
    """
    Configure console logging from settings.LOG_LEVEL

    Uvicorn access logs, SQLAlchemy and multipart parsing are kept at WARNING.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler]
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, env=%s", settings.LOG_LEVEL, settings.APP_ENV
    )
