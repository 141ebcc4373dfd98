"""
Create a user (e.g. the first admin). Run from project root:
  python -m storerate.scripts.create_user NAME EMAIL PASSWORD [role] [--address ADDRESS]
Example:
  python -m storerate.scripts.create_user "Platform Administrator Account" admin@example.com 'Secret#123' SYSTEM_ADMIN
"""
import argparse
import sys

from storerate.core.config import get_settings
from storerate.core.database import Database
from storerate.core.errors import ConflictError
from storerate.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    is_valid_email,
    password_problems,
)
from storerate.models import Role
from storerate.services.users import create_user


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a StoreRate user.")
    parser.add_argument("name", help=f"Full name ({NAME_MIN_LEN}-{NAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("password", help="8-16 chars, one uppercase, one special character")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.NORMAL_USER.value,
        choices=[role.value for role in Role],
    )
    parser.add_argument("--address", default="N/A", help="Postal address (max 400 chars)")
    args = parser.parse_args()

    name = args.name.strip()
    if not (NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN):
        print(f"Name must be {NAME_MIN_LEN}-{NAME_MAX_LEN} characters.", file=sys.stderr)
        return 1
    email = args.email.strip().lower()
    if not is_valid_email(email):
        print("Invalid email address.", file=sys.stderr)
        return 1
    problems = password_problems(args.password)
    if problems:
        print("; ".join(problems), file=sys.stderr)
        return 1

    settings = get_settings()
    database = Database(settings.DATABASE_URL)
    db = database.session()
    try:
        create_user(
            db,
            name=name,
            email=email,
            password=args.password,
            address=args.address,
            role=Role(args.role),
        )
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    except ConflictError as e:
        print(f"{e.message}: {email}", file=sys.stderr)
        return 1
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
