"""
Request dependencies: database sessions and the authentication gates.
"""
from typing import Iterator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from db import Database
from domain.errors import ForbiddenError, UnauthorizedError
from domain.models import User
from services.auth import AuthService
from settings import Settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth(request: Request) -> AuthService:
    return request.app.state.auth


def get_db_session(database: Database = Depends(get_database)) -> Iterator[Session]:
    with database.session() as session:
        yield session


def session_id_from(request: Request) -> Optional[str]:
    return request.cookies.get(request.app.state.settings.SESSION_COOKIE_NAME)


def current_user_optional(
    request: Request,
    session: Session = Depends(get_db_session),
    auth: AuthService = Depends(get_auth),
) -> Optional[User]:
    return auth.current_user(session, session_id_from(request))


def require_authenticated(user: Optional[User] = Depends(current_user_optional)) -> User:
    if user is None:
        raise UnauthorizedError()
    return user


def require_admin(user: User = Depends(require_authenticated)) -> User:
    if not user.is_admin:
        raise ForbiddenError("Administrator access required")
    return user
