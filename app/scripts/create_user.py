"""
Create a user (e.g. the first admin; registration only creates role 'user'). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD NAME [role]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password "Site Admin" admin
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.schemas.auth import normalize_email
from app.services.auth import AuthServiceError, register_user
from app.services.credential_store import UserStore

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Moviedex user.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help="Password (1-128 chars)")
    parser.add_argument("name", help="Display name")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    try:
        email = normalize_email(args.email)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    if not args.password or len(args.password) > 128:
        print("Password must be 1-128 characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = UserStore(db)
        try:
            user = register_user(
                store,
                name=args.name.strip(),
                email=email,
                password=args.password,
                bcrypt_rounds=settings.BCRYPT_ROUNDS,
            )
        except AuthServiceError as e:
            print(f"Cannot create '{email}': {e.message}", file=sys.stderr)
            return 1
        if args.role != user.role:
            user.role = args.role
            store.save(user)
        print(f"Created user '{email}' with role '{user.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
