from __future__ import annotations

import os
from pathlib import Path
import sys
import time
import unittest
import uuid

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.dialects import mysql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.schema import CreateTable

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from casehub.db.base import Base
from casehub.db.session import enable_sqlite_foreign_keys
from casehub.models import Case, User
from casehub.models.common import uuid_str


class SchemaConstraintTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:")
        enable_sqlite_foreign_keys(self.engine)
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def tearDown(self) -> None:
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def _create_user(self, *, email: str = "owner@example.com", **overrides) -> str:
        with self.session_factory() as db:
            user = User(name="Owner", email=email, password="hashed", **overrides)
            db.add(user)
            db.commit()
            return user.id

    def _create_case(self, *, user_id: str, title: str = "List users") -> str:
        with self.session_factory() as db:
            case = Case(user_id=user_id, title=title, host="http://api.local", uri="/users")
            db.add(case)
            db.commit()
            return case.id

    def test_generated_ids_are_canonical_uuid_strings(self) -> None:
        user_id = self._create_user()
        case_id = self._create_case(user_id=user_id)

        for value in (user_id, case_id, uuid_str()):
            self.assertEqual(len(value), 36)
            self.assertEqual(str(uuid.UUID(value)), value)

    def test_user_defaults_apply_when_columns_are_omitted(self) -> None:
        user_id = self._create_user()

        with self.session_factory() as db:
            user = db.get(User, user_id)
            self.assertEqual(user.photo, "default.png")
            self.assertFalse(user.verified)
            self.assertEqual(user.role, "user")
            self.assertIsNotNone(user.created_at)
            self.assertIsNotNone(user.updated_at)

    def test_server_defaults_cover_plain_sql_inserts(self) -> None:
        user_id = uuid_str()
        with self.engine.begin() as connection:
            connection.execute(
                text("INSERT INTO users (id, name, email, password) VALUES (:id, :name, :email, :password)"),
                {"id": user_id, "name": "Raw", "email": "raw@example.com", "password": "hashed"},
            )
            row = connection.execute(
                text("SELECT photo, verified, role, created_at, updated_at FROM users WHERE id = :id"),
                {"id": user_id},
            ).one()

        self.assertEqual(row.photo, "default.png")
        self.assertEqual(row.verified, 0)
        self.assertEqual(row.role, "user")
        self.assertIsNotNone(row.created_at)
        self.assertIsNotNone(row.updated_at)

    def test_duplicate_email_is_rejected(self) -> None:
        self._create_user(email="dup@example.com")
        with self.assertRaises(IntegrityError):
            self._create_user(email="dup@example.com")

    def test_required_user_columns_reject_nulls(self) -> None:
        incomplete = [
            {"email": "a@example.com", "password": "hashed"},
            {"name": "No Email", "password": "hashed"},
            {"name": "No Password", "email": "b@example.com"},
        ]
        for fields in incomplete:
            with self.subTest(fields=sorted(fields)):
                with self.session_factory() as db:
                    db.add(User(**fields))
                    with self.assertRaises(IntegrityError):
                        db.commit()

    def test_duplicate_user_id_is_rejected(self) -> None:
        user_id = self._create_user(email="first@example.com")
        with self.assertRaises(IntegrityError):
            self._create_user(email="second@example.com", id=user_id)

    def test_case_requires_existing_user(self) -> None:
        with self.assertRaises(IntegrityError):
            self._create_case(user_id=uuid_str())

    def test_duplicate_case_title_is_rejected(self) -> None:
        user_id = self._create_user()
        self._create_case(user_id=user_id, title="Same title")
        with self.assertRaises(IntegrityError):
            self._create_case(user_id=user_id, title="Same title")

    def test_case_used_defaults_to_false(self) -> None:
        user_id = self._create_user()
        case_id = self._create_case(user_id=user_id)
        with self.session_factory() as db:
            case = db.get(Case, case_id)
            self.assertFalse(case.used)
            self.assertIsNone(case.response_code)
            self.assertIsNone(case.method)

    def test_deleting_user_with_cases_is_restricted(self) -> None:
        user_id = self._create_user()
        self._create_case(user_id=user_id)

        with self.session_factory() as db:
            db.delete(db.get(User, user_id))
            with self.assertRaises(IntegrityError):
                db.commit()

    def test_updates_advance_updated_at_and_keep_created_at(self) -> None:
        user_id = self._create_user()
        case_id = self._create_case(user_id=user_id)

        with self.session_factory() as db:
            user = db.get(User, user_id)
            case = db.get(Case, case_id)
            user_created, user_updated = user.created_at, user.updated_at
            case_created, case_updated = case.created_at, case.updated_at

            time.sleep(0.01)
            user.name = "Renamed"
            case.used = True
            db.commit()
            db.refresh(user)
            db.refresh(case)

            self.assertEqual(user.created_at, user_created)
            self.assertGreater(user.updated_at, user_updated)
            self.assertEqual(case.created_at, case_created)
            self.assertGreater(case.updated_at, case_updated)

    def test_users_table_keeps_named_email_index(self) -> None:
        inspector = inspect(self.engine)
        indexes = {index["name"]: index for index in inspector.get_indexes("users")}
        self.assertIn("users_email_idx", indexes)
        self.assertEqual(indexes["users_email_idx"]["column_names"], ["email"])
        self.assertFalse(indexes["users_email_idx"]["unique"])

        unique_constraints = {item["name"]: item["column_names"] for item in inspector.get_unique_constraints("users")}
        self.assertEqual(unique_constraints.get("uq_users_email"), ["email"])

    def test_cases_foreign_key_targets_users(self) -> None:
        foreign_keys = inspect(self.engine).get_foreign_keys("cases")
        self.assertEqual(len(foreign_keys), 1)
        self.assertEqual(foreign_keys[0]["referred_table"], "users")
        self.assertEqual(foreign_keys[0]["constrained_columns"], ["user_id"])
        self.assertEqual(foreign_keys[0]["referred_columns"], ["id"])


class UpdatedAtDdlTests(unittest.TestCase):
    def _column_lines(self, table, dialect) -> dict[str, str]:
        ddl = str(CreateTable(table).compile(dialect=dialect))
        return {line.strip().split(" ")[0]: line.strip() for line in ddl.splitlines() if line.strip()}

    def test_mysql_refreshes_updated_at_on_every_update(self) -> None:
        for table in (User.__table__, Case.__table__):
            with self.subTest(table=table.name):
                lines = self._column_lines(table, mysql.dialect())
                self.assertIn("DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP", lines["updated_at"])
                self.assertNotIn("ON UPDATE", lines["created_at"])

    def test_other_dialects_leave_the_clause_out(self) -> None:
        lines = self._column_lines(User.__table__, sqlite.dialect())
        self.assertIn("DEFAULT CURRENT_TIMESTAMP", lines["updated_at"])
        self.assertNotIn("ON UPDATE", lines["updated_at"])


if __name__ == "__main__":
    unittest.main()
