from __future__ import annotations

import argparse
import json
from typing import Any

from casehub.db.session import SessionLocal
from casehub.domain.errors import CaseExecutionError, CaseNotFoundError, UnsupportedCaseMethodError
from casehub.services.accounts import get_user_by_email
from casehub.services.case_runner import execute_case
from casehub.services.case_store import DEFAULT_PAGE_SIZE, get_case, list_cases, to_case_payload
from casehub.services.observability import trace_scope


def _to_payload(case) -> dict[str, Any]:
    payload = to_case_payload(case)
    for key in ("created_at", "updated_at"):
        value = payload.get(key)
        payload[key] = value.isoformat() if value else None
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and execute stored HTTP test cases")
    parser.add_argument("--trace-id", default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run")
    run_parser.add_argument("--case-id", required=True)
    run_parser.add_argument("--timeout", type=float, default=None)

    show_parser = subparsers.add_parser("show")
    show_parser.add_argument("--case-id", required=True)

    list_parser = subparsers.add_parser("list")
    list_parser.add_argument("--email", required=True)
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--limit", type=int, default=DEFAULT_PAGE_SIZE)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    with trace_scope(args.trace_id):
        return _dispatch(args)


def _dispatch(args: argparse.Namespace) -> int:
    db = SessionLocal()
    try:
        if args.command == "run":
            try:
                case = execute_case(db, args.case_id, timeout_seconds=args.timeout)
            except CaseNotFoundError:
                print(json.dumps({"error": "case_not_found", "case_id": args.case_id}))
                return 2
            except (UnsupportedCaseMethodError, CaseExecutionError) as exc:
                print(json.dumps({"error": "case_execution_failed", "case_id": args.case_id, "message": str(exc)}))
                return 1
            print(json.dumps(_to_payload(case)))
            return 0

        if args.command == "show":
            try:
                case = get_case(db, args.case_id)
            except CaseNotFoundError:
                print(json.dumps({"error": "case_not_found", "case_id": args.case_id}))
                return 2
            print(json.dumps(_to_payload(case)))
            return 0

        if args.command == "list":
            user = get_user_by_email(db, args.email)
            if user is None:
                print(json.dumps({"error": "user_not_found", "email": args.email}))
                return 2
            records = list_cases(db, user_id=user.id, page=args.page, limit=args.limit)
            print(json.dumps([_to_payload(item) for item in records]))
            return 0

        print(json.dumps({"error": "unsupported_command"}))
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
