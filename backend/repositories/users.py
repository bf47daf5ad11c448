"""
User repository backed by SQLAlchemy.

Password hashes never leave this module except through ``get_credentials``,
which the authentication service uses for verification.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, aliased

from domain.errors import LastAdminError, NotFoundError, SelfDeleteError
from domain.models import Role, User
from repositories import aggregates
from repositories.common import column_values, commit, ensure_unique
from repositories.models import CommentORM, FavoriteORM, ReadingHistoryORM, UserORM

USERNAME_TAKEN = "Username is already in use"
EMAIL_TAKEN = "Email is already in use"


def _user_from_orm(orm: UserORM) -> User:
    return User(
        id=orm.id,
        username=orm.username,
        email=orm.email,
        name=orm.name,
        role=Role(orm.role),
        avatar_url=orm.avatar_url,
        created_at=orm.created_at,
    )


def _leaves_an_admin():
    """Row filter that only matches when removing the row keeps at least one admin."""
    admins = aliased(UserORM)
    admin_count = select(func.count(admins.id)).where(admins.role == Role.ADMIN.value).scalar_subquery()
    return or_(UserORM.role != Role.ADMIN.value, admin_count > 1)


class UsersRepository:
    """CRUD operations for user accounts."""

    def list_users(self, session: Session) -> List[User]:
        rows = session.query(UserORM).order_by(UserORM.id.asc()).all()
        return [_user_from_orm(u) for u in rows]

    def get_user(self, session: Session, user_id: int) -> Optional[User]:
        orm = session.get(UserORM, user_id)
        return _user_from_orm(orm) if orm else None

    def get_user_by_username(self, session: Session, username: str) -> Optional[User]:
        orm = session.query(UserORM).filter(UserORM.username == username).first()
        return _user_from_orm(orm) if orm else None

    def get_credentials(self, session: Session, username: str) -> Optional[Tuple[User, str]]:
        orm = session.query(UserORM).filter(UserORM.username == username).first()
        if not orm:
            return None
        return _user_from_orm(orm), orm.password

    def get_password_hash(self, session: Session, user_id: int) -> Optional[str]:
        orm = session.get(UserORM, user_id)
        return orm.password if orm else None

    def count_admins(self, session: Session) -> int:
        return session.query(func.count(UserORM.id)).filter(UserORM.role == Role.ADMIN.value).scalar() or 0

    def create_user(
        self,
        session: Session,
        username: str,
        password_hash: str,
        email: str,
        name: str,
        role: Role = Role.USER,
        avatar_url: Optional[str] = None,
    ) -> User:
        ensure_unique(session, UserORM, "username", username, USERNAME_TAKEN)
        ensure_unique(session, UserORM, "email", email, EMAIL_TAKEN)
        orm = UserORM(
            username=username,
            password=password_hash,
            email=email,
            name=name,
            role=role.value,
            avatar_url=avatar_url,
            created_at=datetime.utcnow(),
        )
        session.add(orm)
        commit(session, "Username or email is already in use")
        session.refresh(orm)
        return _user_from_orm(orm)

    def _load(self, session: Session, user_id: int) -> UserORM:
        orm = session.get(UserORM, user_id)
        if not orm:
            raise NotFoundError("User not found")
        return orm

    def _lock_admins(self, session: Session) -> None:
        # FOR UPDATE is not rendered on SQLite, where writers are already serialised
        session.query(UserORM.id).filter(UserORM.role == Role.ADMIN.value).with_for_update().all()

    def update_profile(self, session: Session, user_id: int, changes: Dict[str, Any]) -> User:
        orm = self._load(session, user_id)
        if "email" in changes and changes["email"] != orm.email:
            ensure_unique(session, UserORM, "email", changes["email"], EMAIL_TAKEN, exclude_id=user_id)
        for key, value in column_values(changes).items():
            setattr(orm, key, value)
        commit(session, EMAIL_TAKEN)
        session.refresh(orm)
        return _user_from_orm(orm)

    def set_password(self, session: Session, user_id: int, password_hash: str) -> None:
        orm = self._load(session, user_id)
        orm.password = password_hash
        commit(session)

    def set_role(self, session: Session, user_id: int, role: Role) -> User:
        orm = self._load(session, user_id)
        if orm.role == Role.ADMIN.value and role != Role.ADMIN:
            self._lock_admins(session)
            demoted = (
                session.query(UserORM)
                .filter(UserORM.id == user_id, _leaves_an_admin())
                .update({UserORM.role: role.value}, synchronize_session=False)
            )
            if not demoted:
                session.rollback()
                self._load(session, user_id)
                raise LastAdminError()
        else:
            orm.role = role.value
        commit(session)
        session.refresh(orm)
        return _user_from_orm(orm)

    def delete_user(self, session: Session, user_id: int, acting_user_id: Optional[int] = None) -> None:
        """Delete a user and everything they own.

        The last-admin check is part of the DELETE statement, so two admins
        removing each other at the same time cannot both succeed. Ratings of
        books that lose an approved, rated comment are recomputed in the same
        transaction.
        """
        if acting_user_id is not None and acting_user_id == user_id:
            raise SelfDeleteError()
        self._load(session, user_id)

        rated_books = [
            book_id
            for (book_id,) in session.query(CommentORM.book_id)
            .filter(
                CommentORM.user_id == user_id,
                CommentORM.is_approved.is_(True),
                CommentORM.rating.isnot(None),
            )
            .distinct()
            .all()
        ]
        self._lock_admins(session)
        for dependent in (FavoriteORM, ReadingHistoryORM, CommentORM):
            session.query(dependent).filter(dependent.user_id == user_id).delete(synchronize_session=False)
        deleted = (
            session.query(UserORM)
            .filter(UserORM.id == user_id, _leaves_an_admin())
            .delete(synchronize_session=False)
        )
        if not deleted:
            session.rollback()
            self._load(session, user_id)
            raise LastAdminError()
        aggregates.refresh_book_ratings(session, rated_books)
        commit(session)
