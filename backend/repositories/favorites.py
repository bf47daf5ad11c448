"""
Favorites repository backed by SQLAlchemy.
"""
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from domain.errors import ConflictError, NotFoundError
from domain.models import Favorite, FavoriteBook
from repositories.books import book_from_row, enriched_query
from repositories.common import commit, exists
from repositories.models import BookORM, FavoriteORM

ALREADY_FAVORITE = "Book is already in favorites"


def _favorite_from_orm(orm: FavoriteORM) -> Favorite:
    return Favorite(id=orm.id, user_id=orm.user_id, book_id=orm.book_id, created_at=orm.created_at)


class FavoritesRepository:
    """A user's set of favorited books."""

    def list_favorite_books(self, session: Session, user_id: int) -> List[FavoriteBook]:
        rows = (
            enriched_query(session)
            .add_entity(FavoriteORM)
            .join(FavoriteORM, FavoriteORM.book_id == BookORM.id)
            .filter(FavoriteORM.user_id == user_id)
            .order_by(FavoriteORM.created_at.desc(), FavoriteORM.id.desc())
            .all()
        )
        return [
            FavoriteBook(favorite_id=row[4].id, added_at=row[4].created_at, book=book_from_row(row))
            for row in rows
        ]

    def is_favorite(self, session: Session, user_id: int, book_id: int) -> bool:
        return (
            session.query(FavoriteORM.id)
            .filter(FavoriteORM.user_id == user_id, FavoriteORM.book_id == book_id)
            .first()
            is not None
        )

    def add_favorite(self, session: Session, user_id: int, book_id: int) -> Favorite:
        if not exists(session, BookORM, book_id):
            raise NotFoundError("Book not found")
        if self.is_favorite(session, user_id, book_id):
            raise ConflictError(ALREADY_FAVORITE, field="bookId")
        orm = FavoriteORM(user_id=user_id, book_id=book_id, created_at=datetime.utcnow())
        session.add(orm)
        commit(session, ALREADY_FAVORITE)
        session.refresh(orm)
        return _favorite_from_orm(orm)

    def remove_favorite(self, session: Session, user_id: int, book_id: int) -> None:
        deleted = (
            session.query(FavoriteORM)
            .filter(FavoriteORM.user_id == user_id, FavoriteORM.book_id == book_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            session.rollback()
            raise NotFoundError("Favorite not found")
        commit(session)
