import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Optional

from app.core.context import current
from app.core.settings import settings

AUDIT_LOGGER_NAME = "app.audit"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "actor",
    "request_id",
    "http_method",
    "http_path",
}


class RequestContextFilter(logging.Filter):
    """Copy the current request id, actor, method and path onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = current()
        record.request_id = ctx.request_id
        record.actor = ctx.actor
        record.http_method = ctx.method
        record.http_path = ctx.path
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields are emitted under ``fields``."""

    def __init__(self, stream_label: str = "transactional") -> None:
        super().__init__()
        self.stream_label = stream_label

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stream": self.stream_label,
            "request_id": getattr(record, "request_id", "-"),
            "actor": getattr(record, "actor", "-"),
        }
        method = getattr(record, "http_method", "-")
        if method != "-":
            payload["http"] = {"method": method, "path": getattr(record, "http_path", "-")}
        fields = {key: value for key, value in vars(record).items() if key not in _RESERVED}
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or settings.log_level).upper()
    library_level = "INFO" if log_level == "DEBUG" else "WARNING"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_context": {"()": RequestContextFilter}},
            "formatters": {
                "json": {"()": JsonFormatter, "stream_label": "transactional"},
                "audit_json": {"()": JsonFormatter, "stream_label": "audit"},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "filters": ["request_context"],
                    "stream": "ext://sys.stdout",
                },
                "audit": {
                    "class": "logging.StreamHandler",
                    "formatter": "audit_json",
                    "filters": ["request_context"],
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"handlers": ["default"], "level": log_level},
            "loggers": {
                AUDIT_LOGGER_NAME: {"handlers": ["audit"], "level": "INFO", "propagate": False},
                "uvicorn": {"handlers": ["default"], "level": log_level, "propagate": False},
                "uvicorn.access": {"handlers": [], "level": "WARNING", "propagate": False},
                "sqlalchemy.engine": {"level": library_level},
                "stripe": {"level": library_level},
            },
        }
    )
    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"environment": settings.environment, "identity_provider": settings.identity_provider},
    )


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER_NAME)
