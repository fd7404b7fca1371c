#!/usr/bin/env python3
"""
Promote an existing account to ADMIN directly in the database.

Seeds the first administrator, since approvals and role changes through the
API already require one.

Usage:
  python scripts/promote_admin.py --username alice [--approve]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Make the quicktweet package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from quicktweet.db.session import transaction  # noqa: E402
from quicktweet.domain.accounts import Role, clean_identifier  # noqa: E402
from quicktweet.repositories.sql_repository import SQLRepository  # noqa: E402
from quicktweet.services.ledger_service import AuthorizationLedger  # noqa: E402
from quicktweet.services.lifecycle_service import AccountLifecycle  # noqa: E402


def _is_pending(username: str) -> bool:
    with transaction() as session:
        user = SQLRepository(session).find_by_username(username)
        return user is not None and bool(user.pending_request)


def promote(username: str, *, approve: bool = False) -> str:
    username = clean_identifier(username)
    if not username:
        raise SystemExit("Invalid username")
    if approve and _is_pending(username):
        ledger = AuthorizationLedger()
        ledger.bootstrap()
        AccountLifecycle(ledger).approve(username)
    with transaction() as session:
        repo = SQLRepository(session)
        user = repo.find_by_username(username, for_update=True)
        if user is None:
            raise SystemExit(f"User '{username}' does not exist")
        if user.pending_request:
            raise SystemExit(f"User '{username}' is still awaiting approval (use --approve)")
        user.role = Role.ADMIN.value
        repo.save(user)
    return username


def main() -> None:
    ap = argparse.ArgumentParser(description="Promote a user to ADMIN")
    ap.add_argument("--username", required=True, help="Username to promote")
    ap.add_argument("--approve", action="store_true", help="Approve the account first if it is pending")
    args = ap.parse_args()
    name = promote(args.username, approve=args.approve)
    print(f"OK: {name} is now ADMIN")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
