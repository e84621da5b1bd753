import logging
import sys

from pythonjsonlogger import jsonlogger

from roadworks.core.config import Settings
from roadworks.core.middleware import request_id_ctx


class RequestContextFilter(logging.Filter):
    """Stamps records with the current request id and the deployment environment."""

    def __init__(self, environment: str):
        super().__init__()
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_ctx.get() or None
        record.environment = self.environment
        return True


class _StdoutJsonHandler(logging.StreamHandler):
    pass


def configure_logging(settings: Settings) -> None:
    """
    JSON lines on stdout. Safe to call more than once (handlers are replaced).
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    for h in [h for h in root.handlers if isinstance(h, _StdoutJsonHandler)]:
        root.removeHandler(h)

    handler = _StdoutJsonHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s %(environment)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
    )
    handler.addFilter(RequestContextFilter(settings.environment))
    root.addHandler(handler)

    for name in ("uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(level)
    # per-query SQL logging only when explicitly debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING if level > logging.DEBUG else logging.INFO)
