"""Execute a stored case against its host and record what came back."""
from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from http.client import HTTPException
import logging
import time
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from sqlalchemy.orm import Session

from casehub.core.config import get_settings
from casehub.domain.errors import CaseExecutionError, UnsupportedCaseMethodError
from casehub.models import Case
from casehub.services.case_store import get_case
from casehub.services.observability import emit_structured_log

DEFAULT_METHOD = "GET"
SUPPORTED_METHODS = ("GET", "POST")


@dataclass
class CaseResponse:
    status_code: int
    reason: str
    body: str

    @property
    def status_line(self) -> str:
        reason = self.reason
        if not reason:
            try:
                reason = HTTPStatus(self.status_code).phrase
            except ValueError:
                reason = ""
        return f"{self.status_code} {reason}".strip()


def build_case_url(case: Case) -> str:
    host = case.host.strip()
    if "://" not in host:
        host = f"http://{host}"
    return host + (case.uri or "").strip()


def resolve_method(case: Case) -> str:
    method = (case.method or "").strip().upper() or DEFAULT_METHOD
    if method not in SUPPORTED_METHODS:
        raise UnsupportedCaseMethodError(method)
    return method


def _decode(raw: bytes, charset: str | None) -> str:
    return raw.decode(charset or "utf-8", errors="replace")


def send_case_request(url: str, *, method: str, body: str | None, timeout_seconds: float) -> CaseResponse:
    data = (body or "").encode("utf-8") if method == "POST" else None
    request = Request(url, data=data, method=method)
    try:
        with urlopen(request, timeout=timeout_seconds) as response:
            raw = response.read()
            return CaseResponse(
                status_code=int(response.status),
                reason=response.reason or "",
                body=_decode(raw, response.headers.get_content_charset()),
            )
    except HTTPError as exc:
        # Error statuses are a legitimate outcome for a case, keep them.
        raw = exc.read() if exc.fp is not None else b""
        charset = exc.headers.get_content_charset() if exc.headers is not None else None
        return CaseResponse(status_code=int(exc.code), reason=str(exc.reason or ""), body=_decode(raw, charset))
    except URLError as exc:
        raise CaseExecutionError(f"Request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise CaseExecutionError(f"Request failed: timed out after {timeout_seconds}s") from exc
    except ValueError as exc:
        raise CaseExecutionError(f"Request failed: {exc}") from exc
    except (OSError, HTTPException) as exc:
        # Dropped connections and malformed replies surface from http.client unwrapped.
        raise CaseExecutionError(f"Request failed: {str(exc) or type(exc).__name__}") from exc


def execute_case(db: Session, case_id: str, *, timeout_seconds: float | None = None) -> Case:
    case = get_case(db, case_id)
    method = resolve_method(case)
    url = build_case_url(case)
    timeout = timeout_seconds if timeout_seconds is not None else get_settings().case_request_timeout_seconds

    started = time.perf_counter()
    try:
        response = send_case_request(url, method=method, body=case.request_body, timeout_seconds=timeout)
    except CaseExecutionError as exc:
        emit_structured_log(
            component="case_runner",
            event="case_execution_failed",
            level=logging.WARNING,
            user_id=case.user_id,
            case_id=case.id,
            method=method,
            url=url,
            error=str(exc),
        )
        raise

    case.response_code = response.status_line
    case.response_body = response.body
    db.commit()
    db.refresh(case)

    emit_structured_log(
        component="case_runner",
        event="case_executed",
        user_id=case.user_id,
        case_id=case.id,
        method=method,
        url=url,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return case
