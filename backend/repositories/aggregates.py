"""
Derived counters and aggregates.

Every function here runs inside the caller's transaction so the counter moves
together with the write that triggered it. Counter bumps are single UPDATE
statements (``col = col + delta``) so concurrent writers never lose updates.
"""
from typing import Iterable, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from repositories.models import AuthorORM, BookORM, CategoryORM, CommentORM, SeriesORM


def _bump(session: Session, orm_cls, column: str, row_id: Optional[int], delta: int) -> None:
    if row_id is None or delta == 0:
        return
    session.execute(
        update(orm_cls)
        .where(orm_cls.id == row_id)
        .values({column: getattr(orm_cls, column) + delta})
        .execution_options(synchronize_session=False)
    )


def adjust_category_count(session: Session, category_id: Optional[int], delta: int) -> None:
    _bump(session, CategoryORM, "book_count", category_id, delta)


def adjust_author_count(session: Session, author_id: Optional[int], delta: int) -> None:
    _bump(session, AuthorORM, "book_count", author_id, delta)


def adjust_series_count(session: Session, series_id: Optional[int], delta: int) -> None:
    _bump(session, SeriesORM, "total_books", series_id, delta)


def track_book_membership(session: Session, book: BookORM, delta: int) -> None:
    """Add (+1) or remove (-1) a book from every counter it contributes to."""
    adjust_category_count(session, book.category_id, delta)
    adjust_author_count(session, book.author_id, delta)
    adjust_series_count(session, book.series_id, delta)


def move_book(session: Session, old: dict, new: dict) -> None:
    """Shift counters for the foreign keys whose value changed in an update."""
    for key, adjust in (
        ("category_id", adjust_category_count),
        ("author_id", adjust_author_count),
        ("series_id", adjust_series_count),
    ):
        if old.get(key) != new.get(key):
            adjust(session, old.get(key), -1)
            adjust(session, new.get(key), +1)


def refresh_book_rating(session: Session, book_id: int) -> None:
    """Recompute rating/rating_count as the mean/count of approved, rated comments."""
    session.flush()
    avg_rating, count = (
        session.query(func.avg(CommentORM.rating), func.count(CommentORM.rating))
        .filter(
            CommentORM.book_id == book_id,
            CommentORM.is_approved.is_(True),
            CommentORM.rating.isnot(None),
        )
        .one()
    )
    session.execute(
        update(BookORM)
        .where(BookORM.id == book_id)
        .values(rating=float(avg_rating) if count else 0.0, rating_count=count or 0)
        .execution_options(synchronize_session=False)
    )


def refresh_book_ratings(session: Session, book_ids: Iterable[int]) -> None:
    for book_id in sorted(set(book_ids)):
        refresh_book_rating(session, book_id)
