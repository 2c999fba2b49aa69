"""Structured logging for llm-xlsx-parser.

Log lines carry ``key=value`` fields after a ``|`` and are prefixed with the
ids of the conversion they belong to:

    [request_id=cli-1 conversion_id=9f2c1e file=LOS.xlsx] Read spreadsheet | rows=50

The ids live in a single ContextVar snapshot so nested ``LogContext`` blocks
restore exactly what was there before.

Usage:
    logger = get_logger(__name__)

    with LogContext(conversion_id="9f2c1e", file="LOS.xlsx"):
        with timed_operation(logger, "render_styled_table") as metrics:
            metrics.rows_processed = 50
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


@dataclass(frozen=True)
class _LogScope:
    request_id: str | None = None
    conversion_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


_scope_var: ContextVar[_LogScope] = ContextVar("lxp_log_scope", default=_LogScope())


def _update_scope(**changes: Any) -> Token[_LogScope]:
    return _scope_var.set(replace(_scope_var.get(), **changes))


def get_request_id() -> str | None:
    """Id of the outer request (one CLI invocation or API caller)."""
    return _scope_var.get().request_id


def set_request_id(request_id: str | None) -> None:
    _update_scope(request_id=request_id)


def clear_context() -> None:
    _scope_var.set(_LogScope())


def context_prefix() -> str:
    """Render the current ids and extra fields as a ``[k=v ...] `` prefix."""
    scope = _scope_var.get()
    parts = []
    if scope.request_id:
        parts.append(f"request_id={scope.request_id}")
    if scope.conversion_id:
        parts.append(f"conversion_id={scope.conversion_id}")
    parts.extend(f"{key}={value}" for key, value in scope.extra.items())
    return f"[{' '.join(parts)}] " if parts else ""


_COUNTERS = ("tokens_used", "rows_processed", "cells_styled", "api_calls")


@dataclass
class PerformanceMetrics:
    """Timing and counters collected while one operation runs.

    Only non-zero counters are reported by ``to_dict``.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    tokens_used: int = 0
    rows_processed: int = 0
    cells_styled: int = 0
    api_calls: int = 0
    custom_metrics: dict[str, Any] = field(default_factory=dict)
    _started: float = field(default_factory=time.perf_counter, repr=False)

    def finish(self) -> None:
        self.end_time = datetime.now(UTC)
        self.duration_seconds = time.perf_counter() - self._started

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": self.duration_seconds,
        }
        for name in _COUNTERS:
            value = getattr(self, name)
            if value > 0:
                result[name] = value
        if self.custom_metrics:
            result["custom_metrics"] = self.custom_metrics
        return result


class StructuredLogFormatter(logging.Formatter):
    """Formatter that prefixes each message with the current log scope."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = context_prefix()
        if not prefix:
            return super().format(record)
        scoped = logging.makeLogRecord(record.__dict__)
        scoped.msg = f"{prefix}{record.msg}"
        return super().format(scoped)


class StructuredLogger:
    """Thin wrapper over ``logging.Logger`` taking fields as keyword args.

    ``logger.info("Read spreadsheet", rows=50)`` logs
    ``Read spreadsheet | rows=50``.
    """

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @staticmethod
    def _build_message(message: str, **fields: Any) -> str:
        if not fields:
            return message
        rendered = ", ".join(f"{key}={value}" for key, value in fields.items())
        return f"{message} | {rendered}"

    def _emit(
        self, level_name: str, message: str, fields: dict[str, Any], **kwargs: Any
    ) -> None:
        getattr(self._logger, level_name)(
            self._build_message(message, **fields), **kwargs
        )

    def debug(self, message: str, **fields: Any) -> None:
        self._emit("debug", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit("info", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("warning", message, fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._emit("error", message, fields, exc_info=exc_info)

    def exception(self, message: str, **fields: Any) -> None:
        self._emit("exception", message, fields)

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        self.info(f"Performance: {metrics.operation}", **metrics.to_dict())

    def log_api_call(
        self,
        service: str,
        operation: str,
        duration_seconds: float,
        tokens_used: int | None = None,
        success: bool = True,
        error_message: str | None = None,
    ) -> None:
        """Record one call to an external service (model API, browser).

        Failed calls are logged at ERROR, successful ones at INFO.
        """
        fields: dict[str, Any] = {
            "service": service,
            "operation": operation,
            "duration_seconds": f"{duration_seconds:.3f}",
            "success": success,
        }
        if tokens_used is not None:
            fields["tokens_used"] = tokens_used
        if error_message:
            fields["error"] = error_message

        level = logging.INFO if success else logging.ERROR
        self._logger.log(level, self._build_message("API call", **fields))


class LogContext:
    """Scope ids and extra fields to a ``with`` block.

    ``request_id`` and ``conversion_id`` replace the current ids; any other
    keyword is merged into the extra fields. Everything is restored on exit.
    """

    def __init__(self, **fields: Any) -> None:
        self._fields = fields
        self._token: Token[_LogScope] | None = None

    def __enter__(self) -> "LogContext":
        fields = dict(self._fields)
        current = _scope_var.get()
        ids: dict[str, str] = {}
        for key in ("request_id", "conversion_id"):
            value = fields.pop(key, None)
            if value is not None:
                ids[key] = value
        self._token = _scope_var.set(
            replace(current, extra={**current.extra, **fields}, **ids)
        )
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _scope_var.reset(self._token)
            self._token = None


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Time the enclosed block and log its metrics, even when it raises."""
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Log level as an int or a name such as ``"DEBUG"``.
        format_string: Record format; ``DEFAULT_FORMAT`` when omitted.
        use_structured_formatter: Prefix messages with the log scope.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    fmt = format_string or DEFAULT_FORMAT
    formatter_cls = (
        StructuredLogFormatter if use_structured_formatter else logging.Formatter
    )
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter_cls(fmt))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)
