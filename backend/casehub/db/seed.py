from __future__ import annotations

from casehub.db.session import SessionLocal
from casehub.models import Case, User
from casehub.services.accounts import get_user_by_email, hash_password

DEV_EMAIL = "dev@casehub.local"
DEV_PASSWORD = "casehub-dev"


def seed_local_data() -> None:
    db = SessionLocal()
    try:
        existing = get_user_by_email(db, DEV_EMAIL)
        if existing:
            return

        user = User(name="Local Developer", email=DEV_EMAIL, password=hash_password(DEV_PASSWORD))
        db.add(user)
        db.flush()

        db.add(
            Case(
                user_id=user.id,
                title="Local health check",
                host="http://127.0.0.1:8000",
                uri="/api/healthchecker",
                method="GET",
                expected_result='{"status": "success"}',
                category="smoke",
            )
        )

        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_local_data()
