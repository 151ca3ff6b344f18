"""
Logging setup

local - DEBUG, human-readable text
dev   - DEBUG, key=value text
prod  - INFO, one JSON object per line
"""
import contextvars
import datetime
import json
import logging
import traceback
from typing import Any


# Request id of the request being served (set by RequestLoggingMiddleware)
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

_RECORD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extra fields included"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "time": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            exc_type = record.exc_info[0]
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else "None",
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }
        return json.dumps(log_data, default=str, ensure_ascii=False)


_TEXT_FORMATS = {
    "local": "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s",
    "dev": "time=%(asctime)s level=%(levelname)s request_id=%(request_id)s logger=%(name)s msg=%(message)s",
}


def setup_logging(env: str) -> None:
    """
    Configure the root logger for the given environment

    Args:
        env: local | dev | prod

    Usage:
        setup_logging(get_settings().ENV)
    """
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())

    if env == "prod":
        handler.setFormatter(JsonFormatter())
        level = logging.INFO
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMATS.get(env, _TEXT_FORMATS["local"])))
        level = logging.DEBUG

    logging.basicConfig(level=level, handlers=[handler], force=True)
    # SQL echo stays off unless asked for explicitly
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
