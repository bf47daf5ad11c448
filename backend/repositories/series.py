"""
Series repository backed by SQLAlchemy.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from domain.errors import NotFoundError
from domain.models import Series, Summary
from repositories.common import commit, ensure_unique, exists
from repositories.models import AuthorORM, BookORM, SeriesORM

SLUG_TAKEN = "A series with this slug already exists"


def _series_from_orm(orm: SeriesORM, author: Optional[AuthorORM] = None) -> Series:
    return Series(
        id=orm.id,
        name=orm.name,
        slug=orm.slug,
        author_id=orm.author_id,
        description=orm.description,
        cover_url=orm.cover_url,
        total_books=orm.total_books or 0,
        author=Summary(id=author.id, name=author.name, slug=author.slug) if author else None,
    )


class SeriesRepository:
    """CRUD operations for series; deleting a series detaches its books."""

    def _query(self, session: Session):
        return session.query(SeriesORM, AuthorORM).outerjoin(AuthorORM, AuthorORM.id == SeriesORM.author_id)

    def list_series(self, session: Session) -> List[Series]:
        rows = self._query(session).order_by(SeriesORM.name.asc()).all()
        return [_series_from_orm(s, a) for s, a in rows]

    def list_by_author(self, session: Session, author_id: int) -> List[Series]:
        rows = self._query(session).filter(SeriesORM.author_id == author_id).order_by(SeriesORM.name.asc()).all()
        return [_series_from_orm(s, a) for s, a in rows]

    def get_series(self, session: Session, series_id: int) -> Optional[Series]:
        row = self._query(session).filter(SeriesORM.id == series_id).first()
        return _series_from_orm(*row) if row else None

    def get_series_by_slug(self, session: Session, slug: str) -> Optional[Series]:
        row = self._query(session).filter(SeriesORM.slug == slug).first()
        return _series_from_orm(*row) if row else None

    def create_series(self, session: Session, fields: Dict[str, Any]) -> Series:
        if not exists(session, AuthorORM, fields["author_id"]):
            raise NotFoundError("Author not found")
        ensure_unique(session, SeriesORM, "slug", fields["slug"], SLUG_TAKEN)
        orm = SeriesORM(**fields, total_books=0)
        session.add(orm)
        commit(session, SLUG_TAKEN)
        return self.get_series(session, orm.id)

    def update_series(self, session: Session, series_id: int, changes: Dict[str, Any]) -> Series:
        orm = session.get(SeriesORM, series_id)
        if not orm:
            raise NotFoundError("Series not found")
        if "author_id" in changes and not exists(session, AuthorORM, changes["author_id"]):
            raise NotFoundError("Author not found")
        if "slug" in changes and changes["slug"] != orm.slug:
            ensure_unique(session, SeriesORM, "slug", changes["slug"], SLUG_TAKEN, exclude_id=series_id)
        for key, value in changes.items():
            setattr(orm, key, value)
        commit(session, SLUG_TAKEN)
        return self.get_series(session, series_id)

    def delete_series(self, session: Session, series_id: int) -> int:
        """Detach member books and delete the series in one transaction.

        Returns the number of books that were detached.
        """
        orm = session.get(SeriesORM, series_id)
        if not orm:
            raise NotFoundError("Series not found")
        result = session.execute(
            update(BookORM)
            .where(BookORM.series_id == series_id)
            .values(series_id=None, volume_number=None)
            .execution_options(synchronize_session=False)
        )
        session.delete(orm)
        commit(session)
        return result.rowcount or 0
