"""SQLAlchemy model package for the CaseHub backend."""

from casehub.models.case import Case
from casehub.models.user import User

__all__ = [
    "Case",
    "User",
]
