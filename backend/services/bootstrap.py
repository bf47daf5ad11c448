"""
First-run data: the site settings row and a bootstrap administrator.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from domain.models import Role, User
from repositories import SiteSettingsRepository, UsersRepository
from services.passwords import hash_password
from settings import Settings

logger = logging.getLogger(__name__)


def ensure_admin(session: Session, settings: Settings, users: Optional[UsersRepository] = None) -> Optional[User]:
    """Create the configured admin account when no admin exists yet.

    Nothing is created without ``ADMIN_PASSWORD``; scripts/create_admin.py
    covers that case.
    """
    users = users or UsersRepository()
    if users.count_admins(session) > 0:
        return None
    if not settings.ADMIN_PASSWORD:
        logger.warning("No administrator exists and ADMIN_PASSWORD is not set; skipping admin seed")
        return None
    user = users.create_user(
        session,
        username=settings.ADMIN_USERNAME,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        email=settings.ADMIN_EMAIL,
        name=settings.ADMIN_NAME,
        role=Role.ADMIN,
    )
    logger.info("Created bootstrap admin %r", user.username)
    return user


def seed(session: Session, settings: Settings) -> None:
    SiteSettingsRepository().get_settings(session)
    ensure_admin(session, settings)
