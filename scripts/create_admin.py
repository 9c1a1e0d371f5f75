#!/usr/bin/env python3
"""
Create the admin account used to log in to the dashboard.

Usage:
    python scripts/create_admin.py
    python scripts/create_admin.py --email owner@example.com --password s3cret --name "Shop Owner"

Running it twice is harmless: an existing account with the same email is
left untouched.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from qyra.core.config import settings  # noqa: E402
from qyra.db.base import Base  # noqa: E402
from qyra.db.session import SessionLocal, engine  # noqa: E402
from qyra.services.admin_accounts import (  # noqa: E402
    DEMO_ADMIN_EMAIL,
    DEMO_ADMIN_NAME,
    DEMO_ADMIN_PASSWORD,
    create_admin,
)
import qyra.models  # noqa: E402,F401


def main():
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--email", default=DEMO_ADMIN_EMAIL)
    parser.add_argument("--password", default=DEMO_ADMIN_PASSWORD)
    parser.add_argument("--name", default=DEMO_ADMIN_NAME)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if settings.database_url.startswith("sqlite"):
        db_file = settings.database_url.replace("sqlite:///", "", 1)
        if db_file and ":memory:" not in db_file:
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        user, created = create_admin(db, args.email, args.password, args.name)
    except Exception as e:
        db.rollback()
        print(f"Error creating admin: {e}")
        return 1
    finally:
        db.close()

    if created:
        print(f"Admin created: {user.email}")
    else:
        print(f"Admin already exists: {user.email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
