#!/usr/bin/env python3
"""
Script to register the first admin email in account_roles.
Run this after the database migration has been completed.

Later accounts can be managed from the admin screen (POST /admin/accounts).

Usage:
    python create_admin_account.py <email> [role]

Example:
    python create_admin_account.py ops@example.com
    python create_admin_account.py instructor@example.com instructor
"""

import sys
from pathlib import Path

# Add the apps/api directory to the path so we can import from app
api_dir = Path(__file__).parent / "apps" / "api"
sys.path.insert(0, str(api_dir))

from app.core.database import SessionLocal
from app.services.accounts import add_account
from app.services.errors import AccountError


def create_admin_account(email: str, role: str = "admin") -> bool:
    """Insert one account_roles row."""
    db = SessionLocal()

    try:
        row = add_account(db, email, role)
        print("✅ Account registered!")
        print(f"   Email: {row.email}")
        print(f"   Role: {row.role.value}")
        return True
    except AccountError as e:
        print(f"❌ {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) not in (2, 3):
        print("Usage: python create_admin_account.py <email> [role]")
        print("Example: python create_admin_account.py ops@example.com")
        sys.exit(1)

    email = sys.argv[1]
    role = sys.argv[2] if len(sys.argv) == 3 else "admin"

    success = create_admin_account(email, role)
    sys.exit(0 if success else 1)
