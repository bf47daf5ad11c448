"""Create an administrator account, or promote an existing user to admin.

Usage (from backend/):
    python -m scripts.create_admin --username admin --email admin@elexandria.com [--name "Administrador"] [--password ...]

Without --password the password is read interactively. The schema is created
if it does not exist yet.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from db import Database
from domain.errors import CatalogError
from domain.models import Role
from repositories import UsersRepository
from services.passwords import hash_password
from settings import Settings

logger = logging.getLogger("create_admin")

MIN_PASSWORD_LENGTH = 6


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Create or promote an administrator account.")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", default=None, help="Required when the user does not exist yet.")
    parser.add_argument("--name", default="Administrador")
    parser.add_argument("--password", default=None, help="Prompted for when omitted.")
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL.")
    args = parser.parse_args(argv)

    settings = settings or Settings()
    if args.database_url:
        settings.DATABASE_URL = args.database_url
    database = Database(settings)
    users = UsersRepository()
    try:
        database.connect()
        database.init_schema()
        with database.session() as session:
            existing = users.get_user_by_username(session, args.username)
            if existing:
                if existing.is_admin:
                    logger.info("User %r is already an administrator", args.username)
                else:
                    users.set_role(session, existing.id, Role.ADMIN)
                    logger.info("Promoted %r to administrator", args.username)
                return 0

            if not args.email:
                parser.error("--email is required to create a new user")
            password = args.password or getpass.getpass("Password: ")
            if len(password) < MIN_PASSWORD_LENGTH:
                logger.error("Password must be at least %d characters", MIN_PASSWORD_LENGTH)
                return 1
            user = users.create_user(
                session,
                username=args.username,
                password_hash=hash_password(password),
                email=args.email,
                name=args.name,
                role=Role.ADMIN,
            )
            logger.info("Created administrator %r (id=%s)", user.username, user.id)
            return 0
    except CatalogError as exc:
        logger.error("Failed: %s", exc.message)
        return 1
    finally:
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
