"""Trace ids and one-line JSON events shared by the API, the services and the CLI.

Every event carries the trace id of the scope it was emitted in, so a single
HTTP request or CLI invocation can be followed across accounts, case storage
and case execution logs.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import datetime, timezone
import json
import logging
from typing import Iterator
import uuid

TRACE_ID_MAX_LENGTH = 128

_trace_id: ContextVar[str | None] = ContextVar("casehub_trace_id", default=None)


def ensure_trace_id(value: str | None) -> str:
    candidate = (value or "").strip()[:TRACE_ID_MAX_LENGTH]
    return candidate or uuid.uuid4().hex


def current_trace_id() -> str | None:
    return _trace_id.get()


def set_current_trace_id(trace_id: str | None) -> Token[str | None]:
    return _trace_id.set(ensure_trace_id(trace_id))


def reset_current_trace_id(token: Token[str | None]) -> None:
    _trace_id.reset(token)


@contextmanager
def trace_scope(trace_id: str | None = None) -> Iterator[str]:
    token = set_current_trace_id(trace_id)
    try:
        yield _trace_id.get()
    finally:
        reset_current_trace_id(token)


def emit_structured_log(
    *,
    component: str,
    event: str,
    level: int = logging.INFO,
    user_id: str | None = None,
    case_id: str | None = None,
    **fields,
) -> None:
    logger = logging.getLogger(component)
    if not logger.isEnabledFor(level):
        return
    record = {
        **fields,
        "at": datetime.now(timezone.utc).isoformat(),
        "component": component,
        "event": event,
        "trace_id": current_trace_id(),
        "user_id": user_id,
        "case_id": case_id,
    }
    logger.log(level, json.dumps(record, sort_keys=True, default=str))
