from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from casehub.api.deps import get_current_user
from casehub.db.session import get_db_session
from casehub.domain.errors import CaseExecutionError, CaseNotFoundError, UnsupportedCaseMethodError
from casehub.models import User
from casehub.services.case_runner import execute_case
from casehub.services.case_store import get_case, to_case_payload

router = APIRouter(prefix="/api/cases", tags=["cases"])


class CaseResponse(BaseModel):
    id: str
    user_id: str
    title: str
    host: str
    uri: str
    method: str | None
    request_body: str | None
    expected_result: str | None
    category: str | None
    response_code: str | None
    response_body: str | None
    used: bool
    created_at: datetime
    updated_at: datetime


class CaseData(BaseModel):
    case: CaseResponse


class CaseEnvelope(BaseModel):
    status: str = "success"
    data: CaseData


@router.get("/{case_id}/test", response_model=CaseEnvelope)
def run_case(
    case_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db_session),
) -> CaseEnvelope:
    try:
        case = get_case(db, case_id)
    except CaseNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if case.user_id != user.id:
        # Other users' cases are reported as missing.
        raise HTTPException(status_code=404, detail=str(CaseNotFoundError(case_id)))

    try:
        case = execute_case(db, case_id)
    except UnsupportedCaseMethodError as exc:
        raise HTTPException(status_code=405, detail=str(exc)) from exc
    except CaseExecutionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return CaseEnvelope(data=CaseData(case=CaseResponse(**to_case_payload(case))))
