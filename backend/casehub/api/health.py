from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["health"])

HEALTH_MESSAGE = "CaseHub API using FastAPI, SQLAlchemy and Alembic"


@router.get("/healthchecker")
def health_checker() -> dict[str, str]:
    return {"status": "success", "message": HEALTH_MESSAGE}
