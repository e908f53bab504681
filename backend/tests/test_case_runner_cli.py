from __future__ import annotations

from contextlib import redirect_stdout
import io
import json
import os
from pathlib import Path
import sys
import unittest
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from casehub.db.base import Base
from casehub.db.session import enable_sqlite_foreign_keys
from casehub.domain.errors import CaseExecutionError
from casehub.models import Case, User
from casehub.services import case_runner_cli


class CaseRunnerCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:")
        enable_sqlite_foreign_keys(self.engine)
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)
        self.session_patch = patch.object(case_runner_cli, "SessionLocal", self.session_factory)
        self.session_patch.start()

        with self.session_factory() as db:
            user = User(name="Cli", email="cli@example.com", password="hashed")
            db.add(user)
            db.flush()
            case = Case(user_id=user.id, title="Cli case", host="http://api.local", uri="/status")
            db.add(case)
            db.commit()
            self.case_id = case.id

    def tearDown(self) -> None:
        self.session_patch.stop()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def _run(self, *argv: str) -> tuple[int, object]:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            exit_code = case_runner_cli.main(list(argv))
        return exit_code, json.loads(buffer.getvalue())

    def test_show_prints_case_json(self) -> None:
        exit_code, payload = self._run("show", "--case-id", self.case_id)
        self.assertEqual(exit_code, 0)
        self.assertEqual(payload["title"], "Cli case")
        self.assertIsInstance(payload["created_at"], str)

    def test_show_unknown_case_exits_with_2(self) -> None:
        exit_code, payload = self._run("show", "--case-id", "missing")
        self.assertEqual(exit_code, 2)
        self.assertEqual(payload["error"], "case_not_found")

    def test_list_by_owner_email(self) -> None:
        exit_code, payload = self._run("list", "--email", "CLI@example.com")
        self.assertEqual(exit_code, 0)
        self.assertEqual([item["id"] for item in payload], [self.case_id])

        exit_code, payload = self._run("list", "--email", "nobody@example.com")
        self.assertEqual(exit_code, 2)
        self.assertEqual(payload["error"], "user_not_found")

    def test_run_reports_execution_failures(self) -> None:
        with patch.object(
            case_runner_cli,
            "execute_case",
            side_effect=CaseExecutionError("Request failed: refused"),
        ):
            exit_code, payload = self._run("run", "--case-id", self.case_id)
        self.assertEqual(exit_code, 1)
        self.assertEqual(payload["error"], "case_execution_failed")
        self.assertIn("refused", payload["message"])

    def test_run_prints_updated_case(self) -> None:
        def fake_execute(db, case_id, *, timeout_seconds=None):
            case = db.get(Case, case_id)
            case.response_code = "200 OK"
            case.response_body = "up"
            db.commit()
            return case

        with patch.object(case_runner_cli, "execute_case", side_effect=fake_execute) as mocked:
            exit_code, payload = self._run("run", "--case-id", self.case_id, "--timeout", "2.5")
        self.assertEqual(exit_code, 0)
        self.assertEqual(payload["response_code"], "200 OK")
        self.assertEqual(mocked.call_args.kwargs["timeout_seconds"], 2.5)


if __name__ == "__main__":
    unittest.main()
