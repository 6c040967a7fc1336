"""Structured logging utilities with trace propagation."""

from __future__ import annotations

import json
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger

from quotefit.core.logging.config import LogConfig

_TRACE_ID_VAR: ContextVar[str | None] = ContextVar("quotefit_trace_id", default=None)
_CONTEXT_VAR: ContextVar[dict[str, Any]] = ContextVar("quotefit_log_context", default={})

# Promoted to top-level keys of every JSON record.
_PROMOTED_KEYS = ("symbol", "stage")


def _ensure_trace_id() -> str:
    trace_id = _TRACE_ID_VAR.get()
    if trace_id is None:
        trace_id = uuid4().hex
        _TRACE_ID_VAR.set(trace_id)
    return trace_id


def _patch_record(record: dict[str, Any]) -> None:
    extra = record["extra"]
    trace_id = extra.get("trace_id")
    if trace_id:
        _TRACE_ID_VAR.set(trace_id)
    else:
        extra["trace_id"] = _ensure_trace_id()

    for key, value in _CONTEXT_VAR.get().items():
        if extra.get(key) is None:
            extra[key] = value

    for key in _PROMOTED_KEYS:
        extra.setdefault(key, None)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _format_payload(record: dict[str, Any]) -> dict[str, Any]:
    extra = record["extra"]
    context = {k: v for k, v in extra.items() if k not in {"trace_id", *_PROMOTED_KEYS}}
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "trace_id": extra.get("trace_id"),
    }
    for key in _PROMOTED_KEYS:
        payload[key] = extra.get(key)
    if context:
        payload["context"] = context
    exception = record.get("exception")
    if exception:
        payload["exception"] = f"{exception.type.__name__}: {exception.value}" if exception.type else str(exception)
    return payload


def _plain_line(record: dict[str, Any]) -> str:
    extra = record["extra"]
    stage = f" [{extra['stage']}]" if extra.get("stage") else ""
    return f"{record['time']:%Y-%m-%d %H:%M:%S} {record['level'].name:<8}{stage} {record['message']}"


class _StreamSink:
    """Sink writing log records to a text stream."""

    def __init__(self, stream: IO[str], serialize: bool) -> None:
        self._stream = stream
        self._serialize = serialize

    def __call__(self, message: Any) -> None:
        record = message.record
        if self._serialize:
            self._stream.write(json.dumps(_format_payload(record), default=_json_default))
        else:
            self._stream.write(_plain_line(record))
        self._stream.write("\n")
        self._stream.flush()


class _FileJsonSink:
    """Sink persisting JSON lines to a file path."""

    def __init__(self, path: str) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._path = path

    def __call__(self, message: Any) -> None:
        payload = _format_payload(message.record)
        with open(self._path, "a", encoding="utf-8") as file:
            file.write(json.dumps(payload, default=_json_default))
            file.write("\n")


def _configure_from_config(config: LogConfig) -> None:
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        stream = config.console_stream or sys.stderr
        handlers.append({"sink": _StreamSink(stream, config.serialize), "level": config.level.upper()})
    if config.file_output and config.file_path:
        handlers.append({"sink": _FileJsonSink(config.file_path), "level": config.level.upper()})

    configure_kwargs: dict[str, Any] = {"handlers": handlers, "patcher": _patch_record}
    if config.extra:
        configure_kwargs["extra"] = config.extra
    logger.configure(**configure_kwargs)


def configure_logging(level: str = "INFO", **kwargs: Any) -> None:
    """Configure structured logging with the provided level and options."""

    _configure_from_config(LogConfig(level=level, **kwargs))


@contextmanager
def log_context(*, trace_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Context manager that propagates trace ids and additional metadata."""

    context_token = _CONTEXT_VAR.set({**_CONTEXT_VAR.get(), **extra})
    active_trace = trace_id or uuid4().hex
    trace_token = _TRACE_ID_VAR.set(active_trace)

    try:
        yield active_trace
    finally:
        _TRACE_ID_VAR.reset(trace_token)
        _CONTEXT_VAR.reset(context_token)


__all__ = [
    "configure_logging",
    "log_context",
    "logger",
]
