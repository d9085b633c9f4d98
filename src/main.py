"""Command-line setup for the School Portal backend.

Creates the database tables and the first super admin account. Credentials
come from the ADMIN_USERNAME / ADMIN_PASSWORD environment variables (a .env
file works too) unless given on the command line.
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from config import ADMIN_NAME, ADMIN_PASSWORD, ADMIN_USERNAME, DATABASE_URL
from core.database import Database
from core.exceptions import SchoolPortalError
from core.logging_config import setup_logging
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the first super admin.")
    parser.add_argument("--username", default=ADMIN_USERNAME)
    parser.add_argument("--name", default=ADMIN_NAME)
    parser.add_argument("--database-url", default=DATABASE_URL)
    return parser.parse_args(argv)


def create_initial_admin(
    database: Database, username: str, password: str, name: str
) -> bool:
    """Create the super admin unless the username exists.

    Returns:
        True if an account was created, False if it already existed.
    """
    database.init_db()
    db = database.session()
    try:
        user = UserManager(db).bootstrap_admin(username, password, name)
    finally:
        db.close()
    return user is not None


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = parse_args(argv)

    password = ADMIN_PASSWORD or getpass.getpass(f"Password for '{args.username}': ")
    if not password:
        print("❌ A password is required (set ADMIN_PASSWORD or type one).")
        return 1

    database = Database(args.database_url)
    try:
        created = create_initial_admin(database, args.username, password, args.name)
    except SchoolPortalError as e:
        print(f"❌ Could not create admin: {e.message}")
        return 1
    finally:
        database.dispose()

    if created:
        print(f"✅ Super admin '{args.username}' created")
    else:
        print(f"ℹ️  User '{args.username}' already exists, nothing to do")
    return 0


if __name__ == "__main__":
    sys.exit(main())
