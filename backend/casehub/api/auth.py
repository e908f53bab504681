from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr, Field, StringConstraints
from sqlalchemy.orm import Session

from casehub.api.deps import get_current_user
from casehub.core.config import get_settings
from casehub.core.security import create_access_token
from casehub.db.session import get_db_session
from casehub.domain.errors import EmailAlreadyRegisteredError, InvalidCredentialsError
from casehub.models import User
from casehub.services.accounts import authenticate_user, register_user, to_public_user
from casehub.services.observability import emit_structured_log

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterUserRequest(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class LoginUserRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    photo: str
    role: str
    verified: bool
    created_at: datetime
    updated_at: datetime


class UserData(BaseModel):
    user: UserResponse


class UserEnvelope(BaseModel):
    status: str = "success"
    data: UserData


class LoginResponse(BaseModel):
    status: str = "success"
    token: str


class StatusResponse(BaseModel):
    status: str = "success"


def to_user_envelope(user: User) -> UserEnvelope:
    return UserEnvelope(data=UserData(user=UserResponse(**to_public_user(user))))


@router.post("/register", response_model=UserEnvelope)
def register(payload: RegisterUserRequest, db: Session = Depends(get_db_session)) -> UserEnvelope:
    try:
        user = register_user(db, name=payload.name, email=payload.email, password=payload.password)
    except EmailAlreadyRegisteredError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return to_user_envelope(user)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginUserRequest,
    response: Response,
    db: Session = Depends(get_db_session),
) -> LoginResponse:
    try:
        user = authenticate_user(db, email=payload.email, password=payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    settings = get_settings()
    token = create_access_token(user.id)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_expires_minutes * 60,
        path="/",
        samesite="lax",
        httponly=True,
    )
    emit_structured_log(component="auth", event="user_logged_in", user_id=user.id)
    return LoginResponse(token=token)


@router.get("/logout", response_model=StatusResponse)
def logout(response: Response, user: User = Depends(get_current_user)) -> StatusResponse:
    response.delete_cookie(
        key=get_settings().auth_cookie_name,
        path="/",
        samesite="lax",
        httponly=True,
    )
    emit_structured_log(component="auth", event="user_logged_out", user_id=user.id)
    return StatusResponse()
