from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint, false, func, text
from sqlalchemy.orm import Mapped, mapped_column

from casehub.db.base import Base
from casehub.models.common import ON_UPDATE_NOW, TABLE_OPTIONS, utcnow, uuid_str

DEFAULT_PHOTO = "default.png"
DEFAULT_ROLE = "user"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    photo: Mapped[str] = mapped_column(
        String(255), nullable=False, default=DEFAULT_PHOTO, server_default=DEFAULT_PHOTO
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    password: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_ROLE, server_default=DEFAULT_ROLE)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        info={ON_UPDATE_NOW: True},
    )

    # users_email_idx duplicates the unique constraint's index; deployed schemas carry both.
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("users_email_idx", "email"),
        TABLE_OPTIONS,
    )
