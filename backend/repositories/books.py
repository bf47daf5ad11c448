"""
Book repository backed by SQLAlchemy.

Reads join author, category and series in a single query so listings never
refetch related rows one book at a time.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Query, Session

from domain.errors import NotFoundError
from domain.models import Book, BookFilters, BookFormat, Language, Summary
from repositories import aggregates
from repositories.common import column_values, commit, ensure_unique, exists
from repositories.models import (
    AuthorORM,
    BookORM,
    CategoryORM,
    CommentORM,
    FavoriteORM,
    ReadingHistoryORM,
    SeriesORM,
)


def _summary(orm) -> Optional[Summary]:
    if orm is None:
        return None
    return Summary(id=orm.id, name=orm.name, slug=orm.slug)


def _book_from_orm(
    orm: BookORM,
    author: Optional[AuthorORM] = None,
    category: Optional[CategoryORM] = None,
    series: Optional[SeriesORM] = None,
) -> Book:
    return Book(
        id=orm.id,
        title=orm.title,
        slug=orm.slug,
        author_id=orm.author_id,
        category_id=orm.category_id,
        description=orm.description or "",
        cover_url=orm.cover_url,
        epub_url=orm.epub_url,
        pdf_url=orm.pdf_url,
        amazon_url=orm.amazon_url,
        format=BookFormat(orm.format),
        page_count=orm.page_count,
        isbn=orm.isbn,
        publish_year=orm.publish_year,
        publisher=orm.publisher,
        language=Language(orm.language),
        is_featured=bool(orm.is_featured),
        is_new=bool(orm.is_new),
        is_free=bool(orm.is_free),
        download_count=orm.download_count or 0,
        rating=float(orm.rating or 0.0),
        rating_count=orm.rating_count or 0,
        series_id=orm.series_id,
        volume_number=orm.volume_number,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
        author=_summary(author),
        category=_summary(category),
        series=_summary(series),
    )


def enriched_query(session: Session) -> Query:
    """Books with their author, category and series rows in one round-trip."""
    return (
        session.query(BookORM, AuthorORM, CategoryORM, SeriesORM)
        .outerjoin(AuthorORM, AuthorORM.id == BookORM.author_id)
        .outerjoin(CategoryORM, CategoryORM.id == BookORM.category_id)
        .outerjoin(SeriesORM, SeriesORM.id == BookORM.series_id)
    )


def book_from_row(row) -> Book:
    return _book_from_orm(row[0], row[1], row[2], row[3])


class BooksRepository:
    """CRUD operations for books plus the counters they drive."""

    def list_books(self, session: Session, filters: Optional[BookFilters] = None) -> List[Book]:
        filters = filters or BookFilters()
        query = enriched_query(session)
        if filters.category_id is not None:
            query = query.filter(BookORM.category_id == filters.category_id)
        if filters.author_id is not None:
            query = query.filter(BookORM.author_id == filters.author_id)
        if filters.series_id is not None:
            query = query.filter(BookORM.series_id == filters.series_id)
        if filters.featured is not None:
            query = query.filter(BookORM.is_featured.is_(filters.featured))
        if filters.new is not None:
            query = query.filter(BookORM.is_new.is_(filters.new))
        if filters.free is not None:
            query = query.filter(BookORM.is_free.is_(filters.free))
        if filters.search:
            query = query.filter(BookORM.title.ilike(f"%{filters.search}%"))

        if filters.series_id is not None:
            query = query.order_by(BookORM.volume_number.asc(), BookORM.id.asc())
        else:
            query = query.order_by(BookORM.created_at.desc(), BookORM.id.desc())
        if filters.offset:
            query = query.offset(filters.offset)
        if filters.limit is not None:
            query = query.limit(filters.limit)
        return [book_from_row(row) for row in query.all()]

    def list_by_category(self, session: Session, category_id: int) -> List[Book]:
        return self.list_books(session, BookFilters(category_id=category_id))

    def list_by_author(self, session: Session, author_id: int) -> List[Book]:
        return self.list_books(session, BookFilters(author_id=author_id))

    def list_by_series(self, session: Session, series_id: int) -> List[Book]:
        return self.list_books(session, BookFilters(series_id=series_id))

    def get_book(self, session: Session, book_id: int) -> Optional[Book]:
        row = enriched_query(session).filter(BookORM.id == book_id).first()
        return book_from_row(row) if row else None

    def get_book_by_slug(self, session: Session, slug: str) -> Optional[Book]:
        row = enriched_query(session).filter(BookORM.slug == slug).first()
        return book_from_row(row) if row else None

    def _check_references(self, session: Session, fields: Dict[str, Any]) -> None:
        if "author_id" in fields and not exists(session, AuthorORM, fields["author_id"]):
            raise NotFoundError("Author not found")
        if "category_id" in fields and not exists(session, CategoryORM, fields["category_id"]):
            raise NotFoundError("Category not found")
        if fields.get("series_id") is not None and not exists(session, SeriesORM, fields["series_id"]):
            raise NotFoundError("Series not found")

    def create_book(self, session: Session, fields: Dict[str, Any]) -> Book:
        values = column_values(fields)
        self._check_references(session, values)
        ensure_unique(session, BookORM, "slug", values["slug"], "A book with this slug already exists")
        if values.get("series_id") is None:
            values["volume_number"] = None

        now = datetime.utcnow()
        orm = BookORM(**values, created_at=now, updated_at=now)
        session.add(orm)
        session.flush()
        aggregates.track_book_membership(session, orm, +1)
        commit(session, "A book with this slug already exists")
        return self.get_book(session, orm.id)

    def _claim_book(self, session: Session, book_id: int) -> BookORM:
        """Take the book row's write lock, then load its current state.

        Counter deltas are derived from the foreign keys read here, so they must
        be read after any concurrent writer to the same book has committed.
        """
        result = session.execute(
            update(BookORM)
            .where(BookORM.id == book_id)
            .values(updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            session.rollback()
            raise NotFoundError("Book not found")
        return session.get(BookORM, book_id, populate_existing=True)

    def update_book(self, session: Session, book_id: int, changes: Dict[str, Any]) -> Book:
        values = column_values(changes)
        self._check_references(session, values)
        if "slug" in values:
            ensure_unique(
                session, BookORM, "slug", values["slug"],
                "A book with this slug already exists", exclude_id=book_id,
            )
        orm = self._claim_book(session, book_id)

        keys = ("category_id", "author_id", "series_id")
        before = {k: getattr(orm, k) for k in keys}
        for key, value in values.items():
            setattr(orm, key, value)
        if orm.series_id is None:
            orm.volume_number = None
        orm.updated_at = datetime.utcnow()
        session.flush()
        aggregates.move_book(session, before, {k: getattr(orm, k) for k in keys})
        commit(session, "A book with this slug already exists")
        return self.get_book(session, book_id)

    def delete_book(self, session: Session, book_id: int) -> None:
        orm = self._claim_book(session, book_id)
        for dependent in (FavoriteORM, ReadingHistoryORM, CommentORM):
            session.query(dependent).filter(dependent.book_id == book_id).delete(synchronize_session=False)
        aggregates.track_book_membership(session, orm, -1)
        session.delete(orm)
        commit(session)

    def increment_download_count(self, session: Session, book_id: int) -> Book:
        result = session.execute(
            update(BookORM)
            .where(BookORM.id == book_id)
            .values(download_count=BookORM.download_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            session.rollback()
            raise NotFoundError("Book not found")
        commit(session)
        return self.get_book(session, book_id)
