from __future__ import annotations

from fastapi import APIRouter, Depends

from casehub.api.auth import UserEnvelope, to_user_envelope
from casehub.api.deps import get_current_user
from casehub.models import User

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=UserEnvelope)
def get_me(user: User = Depends(get_current_user)) -> UserEnvelope:
    return to_user_envelope(user)
