from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from casehub.domain.errors import CaseNotFoundError, CaseTitleConflictError, UserNotFoundError
from casehub.models import Case, User
from casehub.models.common import uuid_str
from casehub.services.observability import emit_structured_log

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MUTABLE_CASE_FIELDS = (
    "user_id",
    "title",
    "host",
    "uri",
    "method",
    "request_body",
    "expected_result",
    "category",
    "response_code",
    "response_body",
    "used",
)


def _title_taken(db: Session, title: str, *, exclude_case_id: str | None = None) -> bool:
    query = db.query(Case.id).filter(Case.title == title)
    if exclude_case_id is not None:
        query = query.filter(Case.id != exclude_case_id)
    return query.first() is not None


def _ensure_user_exists(db: Session, user_id: str) -> None:
    if db.get(User, user_id) is None:
        raise UserNotFoundError(user_id)


def _commit_or_conflict(db: Session, title: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise CaseTitleConflictError(title) from exc


def get_case(db: Session, case_id: str) -> Case:
    case = db.get(Case, case_id)
    if case is None:
        raise CaseNotFoundError(case_id)
    return case


def list_cases(
    db: Session,
    *,
    user_id: str,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> list[Case]:
    limit = min(max(1, limit), MAX_PAGE_SIZE)
    offset = (max(1, page) - 1) * limit
    return (
        db.query(Case)
        .filter(Case.user_id == user_id)
        .order_by(Case.id.asc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def create_case(
    db: Session,
    *,
    user_id: str,
    title: str,
    host: str,
    uri: str,
    method: str | None = None,
    request_body: str | None = None,
    expected_result: str | None = None,
    category: str | None = None,
    used: bool = False,
) -> Case:
    _ensure_user_exists(db, user_id)
    if _title_taken(db, title):
        raise CaseTitleConflictError(title)

    case = Case(
        id=uuid_str(),
        user_id=user_id,
        title=title,
        host=host,
        uri=uri,
        method=method,
        request_body=request_body,
        expected_result=expected_result,
        category=category,
        used=used,
    )
    db.add(case)
    _commit_or_conflict(db, title)
    db.refresh(case)

    emit_structured_log(component="case_store", event="case_created", user_id=user_id, case_id=case.id)
    return case


def update_case(db: Session, case_id: str, **changes: Any) -> Case:
    unknown = sorted(set(changes) - set(MUTABLE_CASE_FIELDS))
    if unknown:
        raise ValueError(f"unsupported case fields: {', '.join(unknown)}")

    case = get_case(db, case_id)
    updates = {field: value for field, value in changes.items() if value is not None}

    if "user_id" in updates and updates["user_id"] != case.user_id:
        _ensure_user_exists(db, updates["user_id"])
    if "title" in updates and _title_taken(db, updates["title"], exclude_case_id=case_id):
        raise CaseTitleConflictError(updates["title"])

    for field, value in updates.items():
        setattr(case, field, value)

    _commit_or_conflict(db, case.title)
    db.refresh(case)
    return case


def delete_case(db: Session, case_id: str) -> None:
    case = get_case(db, case_id)
    owner_id = case.user_id
    db.delete(case)
    db.commit()
    emit_structured_log(component="case_store", event="case_deleted", user_id=owner_id, case_id=case_id)


def to_case_payload(case: Case) -> dict[str, Any]:
    return {
        "id": case.id,
        "user_id": case.user_id,
        "title": case.title,
        "host": case.host,
        "uri": case.uri,
        "method": case.method,
        "request_body": case.request_body,
        "expected_result": case.expected_result,
        "category": case.category,
        "response_code": case.response_code,
        "response_body": case.response_body,
        "used": bool(case.used),
        "created_at": case.created_at,
        "updated_at": case.updated_at,
    }
