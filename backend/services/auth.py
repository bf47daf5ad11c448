"""
Authentication: credential checks, session issuance and identity resolution.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from domain.errors import ForbiddenError, UnauthorizedError, ValidationError
from domain.models import Role, SessionUser, User
from repositories import SiteSettingsRepository, UsersRepository
from services.passwords import hash_password, verify_password
from services.sessions import SessionStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    def __init__(
        self,
        sessions: SessionStore,
        users: Optional[UsersRepository] = None,
        site_settings: Optional[SiteSettingsRepository] = None,
    ):
        self.sessions = sessions
        self.users = users or UsersRepository()
        self.site_settings = site_settings or SiteSettingsRepository()

    def login(self, session: Session, username: str, password: str) -> Tuple[str, User]:
        """Verify credentials and open a session.

        Unknown usernames and wrong passwords fail identically.
        """
        found = self.users.get_credentials(session, username)
        if found is None or not verify_password(password, found[1]):
            logger.info("Failed login for username=%r", username)
            raise UnauthorizedError(INVALID_CREDENTIALS)
        user = found[0]
        session_id = self.sessions.create(SessionUser.from_user(user))
        logger.info("User %s logged in", user.id)
        return session_id, user

    def logout(self, session_id: Optional[str]) -> None:
        self.sessions.destroy(session_id)

    def current_user(self, session: Session, session_id: Optional[str]) -> Optional[User]:
        """Resolve a session id to a fresh user row, or None.

        A session whose user no longer exists is destroyed.
        """
        identity = self.sessions.get(session_id)
        if identity is None:
            return None
        user = self.users.get_user(session, identity.id)
        if user is None:
            self.sessions.destroy(session_id)
            return None
        fresh = SessionUser.from_user(user)
        if fresh != identity:
            self.sessions.update(session_id, fresh)
        return user

    def register(
        self, session: Session, username: str, password: str, email: str, name: str
    ) -> Tuple[str, User]:
        """Create a plain user account and log it in."""
        if not self.site_settings.get_settings(session).allow_registration:
            raise ForbiddenError("Registration is disabled")
        user = self.users.create_user(
            session,
            username=username,
            password_hash=hash_password(password),
            email=email,
            name=name,
            role=Role.USER,
        )
        logger.info("Registered user %s (%s)", user.id, user.username)
        session_id = self.sessions.create(SessionUser.from_user(user))
        return session_id, user

    def change_password(self, session: Session, user_id: int, current: str, new: str) -> None:
        stored = self.users.get_password_hash(session, user_id)
        if stored is None or not verify_password(current, stored):
            raise ValidationError.for_field("currentPassword", "Current password is incorrect")
        self.users.set_password(session, user_id, hash_password(new))
        logger.info("Password changed for user %s", user_id)
