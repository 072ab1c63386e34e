"""Structured logging configuration.

Modules log through ``logging.getLogger(__name__)``. ``configure_logging`` is
called once by the application factory and installs a single stream handler
whose records are enriched with the per-request context (correlator,
transaction id and operation type) held in a ``ContextVar``.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass

from pythonjsonlogger.json import JsonFormatter

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

NOT_AVAILABLE = "NA"
OPERATION_TYPE_PREFIX = "OP_CA_"

LOG_FIELDS = ("asctime", "levelname", "name", "message", "corr", "trans", "op", "service")
FIELD_RENAME_MAP = {"levelname": "level", "name": "logger"}
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [corr=%(corr)s trans=%(trans)s op=%(op)s] %(message)s"


@dataclass(frozen=True)
class LogContext:
    corr: str = NOT_AVAILABLE
    trans: str = NOT_AVAILABLE
    op: str = NOT_AVAILABLE


_log_context: ContextVar[LogContext] = ContextVar("context_adapter_log_context", default=LogContext())


def get_log_context() -> LogContext:
    return _log_context.get()


def bind_log_context(
    corr: str | None = None,
    method: str | None = None,
) -> Token[LogContext]:
    """Bind a fresh logging context for the current request."""
    op = f"{OPERATION_TYPE_PREFIX}{method.upper()}" if method else NOT_AVAILABLE
    context = LogContext(
        corr=corr or NOT_AVAILABLE,
        trans=uuid.uuid4().hex,
        op=op,
    )
    return _log_context.set(context)


def reset_log_context(token: Token[LogContext]) -> None:
    _log_context.reset(token)


class LogContextFilter(logging.Filter):
    """Injects the request logging context and service name into records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get()
        for field in ("corr", "trans", "op"):
            if not getattr(record, field, None):
                setattr(record, field, getattr(context, field))
        record.service = self._service_name
        return True


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
    service_name: str = "context-adapter",
) -> None:
    """Install the root handler. Replaces any handler already installed."""
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level {level!r}. "
            f"Valid: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter(
            " ".join(f"%({field})s" for field in LOG_FIELDS),
            rename_fields=FIELD_RENAME_MAP,
        )
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(formatter)
    handler.addFilter(LogContextFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level_upper)
    root.handlers = [handler]
