from __future__ import annotations

import logging
from typing import Any

import bcrypt
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from casehub.domain.errors import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    UserHasCasesError,
    UserNotFoundError,
)
from casehub.models import Case, User
from casehub.models.common import uuid_str
from casehub.services.observability import emit_structured_log

BCRYPT_MAX_PASSWORD_BYTES = 72
MUTABLE_USER_FIELDS = ("name", "photo", "verified", "role")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        # Malformed stored hash or over-long input.
        return False


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def _get_user_or_raise(db: Session, user_id: str) -> User:
    user = get_user(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def register_user(db: Session, *, name: str, email: str, password: str) -> User:
    clean_name = name.strip()
    if not clean_name:
        raise ValueError("Name must not be blank")
    normalized_email = normalize_email(email)
    if get_user_by_email(db, normalized_email) is not None:
        raise EmailAlreadyRegisteredError(normalized_email)

    user = User(
        id=uuid_str(),
        name=clean_name,
        email=normalized_email,
        password=hash_password(password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise EmailAlreadyRegisteredError(normalized_email) from exc
    db.refresh(user)

    emit_structured_log(component="accounts", event="user_registered", user_id=user.id)
    return user


def authenticate_user(db: Session, *, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password):
        emit_structured_log(
            component="accounts",
            event="login_failed",
            level=logging.WARNING,
            user_id=user.id if user is not None else None,
        )
        raise InvalidCredentialsError()
    return user


def update_user(db: Session, user_id: str, **changes: Any) -> User:
    unknown = sorted(set(changes) - set(MUTABLE_USER_FIELDS))
    if unknown:
        raise ValueError(f"unsupported user fields: {', '.join(unknown)}")

    user = _get_user_or_raise(db, user_id)
    for field, value in changes.items():
        if value is None:
            continue
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: str) -> None:
    user = _get_user_or_raise(db, user_id)
    case_count = db.query(func.count(Case.id)).filter(Case.user_id == user_id).scalar() or 0
    if case_count:
        raise UserHasCasesError(user_id, case_count)

    db.delete(user)
    db.commit()
    emit_structured_log(component="accounts", event="user_deleted", user_id=user_id)


def to_public_user(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "photo": user.photo,
        "role": user.role,
        "verified": bool(user.verified),
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }
