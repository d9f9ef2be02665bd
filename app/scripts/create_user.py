"""
Create an account directly, bypassing invitation checks (e.g. the first admin
or a moderator). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [level]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    hash_password,
)
from app.models.user import User
from app.services.levels import LEVEL_RANK
from app.services.registration import AVATAR_URL_TEMPLATE


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a TruthCircle account (no invitation needed).")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("level", nargs="?", default="trainee", choices=list(LEVEL_RANK))
    args = parser.parse_args()

    username = args.username.strip()
    email = args.email.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = (
            db.query(User)
            .filter((User.username == username) | (User.email == email))
            .first()
        )
        if existing:
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(args.password),
            avatar_url=AVATAR_URL_TEMPLATE.format(username=username),
            level=args.level,
        )
        db.add(user)
        db.commit()
        print(f"Created user '{username}' with level '{args.level}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
