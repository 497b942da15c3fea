"""
Create the database tables and an Admin account

Usage:
    python init_admin.py                      # uses INITIAL_ADMIN_* settings
    python init_admin.py --email a@b.com --password 'Secret123' --name "Jane Admin"
"""
import argparse

from app.core.security import hash_password, validate_password
from app.db.init_db import create_tables, init_db
from app.db.session import SessionLocal
from app.models.user import Role, User


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or reset an Admin account")
    parser.add_argument("--email", help="Admin e-mail (defaults to INITIAL_ADMIN_EMAIL)")
    parser.add_argument("--password", help="Admin password (defaults to INITIAL_ADMIN_PASSWORD)")
    parser.add_argument("--name", default="Administrator", help="Display name")
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        if not args.email:
            created = init_db(db)
            print("Initial admin created" if created else "Admin already exists, nothing to do")
            return

        password = validate_password(args.password)
        user = db.query(User).filter(User.email == args.email).first()
        if user is None:
            user = User(name=args.name, email=args.email, role=Role.ADMIN.value, password=hash_password(password))
            db.add(user)
            print(f"Created Admin {args.email}")
        else:
            user.role = Role.ADMIN.value
            user.password = hash_password(password)
            print(f"Reset password and Admin role for {args.email}")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    main()
