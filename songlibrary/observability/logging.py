import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from flask import g, has_request_context, request

# Optional structured fields callers pass through ``extra=``
_EXTRA_FIELDS = ("operation", "kind", "state")

_LEVEL_BY_ENV = {
    "local": logging.DEBUG,
    "dev": logging.DEBUG,
    "prod": logging.INFO,
}


class RequestContextFilter(logging.Filter):
    """Attach request-scoped metadata to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = getattr(g, "request_id", None)
            record.path = request.path
            record.method = request.method
            record.remote_addr = request.headers.get("X-Forwarded-For", request.remote_addr)
        else:
            record.request_id = None
            record.path = None
            record.method = None
            record.remote_addr = None
        return True


class JsonFormatter(logging.Formatter):
    """Render log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
            "path": getattr(record, "path", None),
            "method": getattr(record, "method", None),
            "remote_addr": getattr(record, "remote_addr", None),
        }
        for field in _EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def level_for_env(env: str) -> int:
    return _LEVEL_BY_ENV.get((env or "").lower(), logging.INFO)


def configure_structured_logging(app) -> None:
    """Attach structured stdout logging to the root logger.

    ``local`` uses a plain text format, ``dev`` and ``prod`` emit JSON;
    ``local`` and ``dev`` log at DEBUG, ``prod`` at INFO.
    """
    root = logging.getLogger()
    env = app.config.get("APP_ENV", "local")
    root.setLevel(level_for_env(env))

    if not app.config.get("ENABLE_CONSOLE_LOGS", True):
        return

    has_stdout_handler = any(
        getattr(handler, "_songlibrary_stdout", False) for handler in root.handlers
    )
    if has_stdout_handler:
        return

    if env == "local":
        formatter: logging.Formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        )
    else:
        formatter = JsonFormatter()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(RequestContextFilter())
    stream_handler._songlibrary_stdout = True  # type: ignore[attr-defined]
    root.addHandler(stream_handler)
