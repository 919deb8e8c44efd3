"""Structured JSON logging with secret redaction.

Every module logs through the standard ``logging`` module; this file only
configures the root handler once so records come out as JSON lines that
carry the service name, environment and the current request id.
"""

import logging
import re
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from .config import settings

# Set by the request middleware for the lifetime of one request
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

REDACTED = "***REDACTED***"

# Credentials, and inline base64 images which would flood the log sink
_SECRET_PATTERNS = (
    re.compile(r'(api[_-]?key["\s:=]+["\']?)([\w-]{20,})', re.IGNORECASE),
    re.compile(r'(bearer\s+)([\w.-]{20,})', re.IGNORECASE),
    re.compile(r'(data:image/[a-z0-9.+-]+;base64,)([A-Za-z0-9+/=]{32,})', re.IGNORECASE),
)

_SECRET_KEYS = ('secret', 'token', 'api_key', 'authorization')

_MAX_ITEMS = 10

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'taskName'}


def redact(value: Any, depth: int = 3) -> Any:
    """Return ``value`` with secrets masked, recursing into dicts and lists."""
    if isinstance(value, str):
        for pattern in _SECRET_PATTERNS:
            value = pattern.sub(r'\1' + REDACTED, value)
        return value
    if depth <= 0 and isinstance(value, (dict, list, tuple)):
        return "<max depth>"
    if isinstance(value, dict):
        return {
            k: REDACTED if any(s in str(k).lower() for s in _SECRET_KEYS) else redact(v, depth - 1)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        out = [redact(v, depth - 1) for v in value[:_MAX_ITEMS]]
        if len(value) > _MAX_ITEMS:
            out.append(f"... {len(value) - _MAX_ITEMS} more")
        return out
    return value


class StructuredFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service, request and exception fields."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record.update(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            location=f"{record.module}.{record.funcName}:{record.lineno}",
            service=settings.service_name,
            environment=settings.service_env,
        )
        request_id = request_id_var.get()
        if request_id:
            log_record['request_id'] = request_id

        if isinstance(log_record.get('message'), str):
            log_record['message'] = redact(log_record['message'])

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            error: Dict[str, Any] = {'type': exc_type.__name__, 'message': redact(str(exc))}
            # No tracebacks in production logs
            if settings.service_env not in ("prod", "production"):
                error['traceback'] = traceback.format_exception(exc_type, exc, tb)
            log_record['error'] = error
            log_record.pop('exc_info', None)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith('_'):
                log_record[key] = redact(value)


def setup_logging(level: str = "INFO") -> None:
    """Install the JSON handler on the root logger. Safe to call twice."""
    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, "_prompt_creator", False)]

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter('%(timestamp)s %(level)s %(name)s %(message)s'))
    handler._prompt_creator = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    if root.level > logging.DEBUG:
        for noisy in ('httpx', 'httpcore'):
            logging.getLogger(noisy).setLevel(logging.WARNING)
