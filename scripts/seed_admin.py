"""Create an admin account if one with the given email does not exist.

Usage: python scripts/seed_admin.py [email] [password]
"""
import os
import sys

from storefront.domain.models import UserRole
from storefront.infrastructure.db import SessionLocal, init_models
from storefront.application.users import UserService

DEFAULT_EMAIL = "admin@example.com"

def seed_admin(email: str, password: str) -> bool:
    """Returns True when a user was created."""
    init_models()
    with SessionLocal() as db:
        service = UserService(db)
        if service.get_by_email(email):
            print(f'Admin user "{email}" already exists.')
            return False
        user = service.upsert(email, password, name="Admin", role=UserRole.ADMIN)
        print(f'Admin user "{user.email}" created (id {user.id}).')
        return True

def main(argv: list[str]) -> int:
    email = argv[1] if len(argv) > 1 else os.getenv("ADMIN_EMAIL", DEFAULT_EMAIL)
    password = argv[2] if len(argv) > 2 else os.getenv("ADMIN_PASSWORD")
    if not password:
        print("Password required: pass it as the second argument or set ADMIN_PASSWORD.")
        return 1
    seed_admin(email, password)
    return 0

if __name__ == "__main__":
    sys.exit(main(sys.argv))
