# src/campus_share/scripts/seed_admin.py
"""Create or refresh the administrator account.

Safe to run repeatedly: an existing account with the admin email is promoted
and its name, department and password are reset.
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.orm import Session

from campus_share.core.errors import InvalidArgumentError
from campus_share.core.settings import settings
from campus_share.db.session import SessionLocal, create_tables
from campus_share.models.user import ROLE_ADMIN, User
from campus_share.repositories import user_repo

ADMIN_DEPARTMENT = "Administration"


def seed_admin(
    db: Session,
    *,
    email: str,
    password: str,
    name: str,
    department: str = ADMIN_DEPARTMENT,
) -> tuple[User, bool]:
    """Upsert the admin account; return it and whether it was created."""
    candidate = user_repo.new_user(
        name=name,
        email=email,
        password=password,
        department=department,
        role=ROLE_ADMIN,
    )
    existing = user_repo.get_user_by_email(db, candidate.email)
    if existing is None:
        db.add(candidate)
        db.commit()
        db.refresh(candidate)
        return candidate, True

    existing.name = candidate.name
    existing.department = candidate.department
    existing.password_hash = candidate.password_hash
    existing.role = ROLE_ADMIN
    db.commit()
    db.refresh(existing)
    return existing, False


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or refresh the admin account")
    parser.add_argument("--email", default=settings.admin_email)
    parser.add_argument("--name", default=settings.admin_name)
    parser.add_argument(
        "--password",
        default=settings.admin_password,
        help="Admin password (defaults to ADMIN_PASSWORD)",
    )
    args = parser.parse_args()

    if not args.password:
        print("[seed_admin] ERROR: set ADMIN_PASSWORD or pass --password", file=sys.stderr)
        sys.exit(1)

    create_tables()
    db = SessionLocal()
    try:
        user, created = seed_admin(db, email=args.email, password=args.password, name=args.name)
    except InvalidArgumentError as exc:
        print(f"[seed_admin] ERROR: {exc.message}: {exc.details}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()

    action = "created" if created else "updated"
    print(f"[seed_admin] admin user {action}: {user.email} (id={user.id})")


if __name__ == "__main__":
    main()
