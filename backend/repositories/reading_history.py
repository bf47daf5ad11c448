"""
Reading history repository backed by SQLAlchemy.

There is at most one entry per (user, book); saving progress again updates it.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from domain.errors import NotFoundError
from domain.models import ReadingHistory
from repositories.books import book_from_row, enriched_query
from repositories.common import commit, exists
from repositories.models import BookORM, ReadingHistoryORM

logger = logging.getLogger(__name__)

COMPLETED_AT = 100


def _history_from_orm(orm: ReadingHistoryORM, book=None) -> ReadingHistory:
    return ReadingHistory(
        id=orm.id,
        user_id=orm.user_id,
        book_id=orm.book_id,
        progress=orm.progress or 0,
        last_page=orm.last_page or 0,
        total_pages=orm.total_pages,
        is_completed=bool(orm.is_completed),
        created_at=orm.created_at,
        last_read_at=orm.last_read_at,
        book=book,
    )


def _apply(orm: ReadingHistoryORM, progress: Dict[str, Any]) -> None:
    for key in ("progress", "last_page", "total_pages"):
        if progress.get(key) is not None:
            setattr(orm, key, progress[key])
    if progress.get("is_completed") is not None:
        orm.is_completed = progress["is_completed"]
    elif (orm.progress or 0) >= COMPLETED_AT:
        orm.is_completed = True
    orm.last_read_at = datetime.utcnow()


class ReadingHistoryRepository:
    """Per-user reading progress."""

    def list_history(self, session: Session, user_id: int) -> List[ReadingHistory]:
        rows = (
            enriched_query(session)
            .add_entity(ReadingHistoryORM)
            .join(ReadingHistoryORM, ReadingHistoryORM.book_id == BookORM.id)
            .filter(ReadingHistoryORM.user_id == user_id)
            .order_by(ReadingHistoryORM.last_read_at.desc(), ReadingHistoryORM.id.desc())
            .all()
        )
        return [_history_from_orm(row[4], book_from_row(row)) for row in rows]

    def _find(self, session: Session, user_id: int, book_id: int) -> Optional[ReadingHistoryORM]:
        return (
            session.query(ReadingHistoryORM)
            .filter(ReadingHistoryORM.user_id == user_id, ReadingHistoryORM.book_id == book_id)
            .first()
        )

    def upsert(
        self, session: Session, user_id: int, book_id: int, progress: Dict[str, Any]
    ) -> Tuple[ReadingHistory, bool]:
        """Create or update the entry for (user, book).

        Returns ``(entry, created)``. A concurrent insert of the same pair is
        retried once as an update.
        """
        if not exists(session, BookORM, book_id):
            raise NotFoundError("Book not found")

        orm = self._find(session, user_id, book_id)
        if orm:
            _apply(orm, progress)
            commit(session)
            session.refresh(orm)
            return _history_from_orm(orm), False

        now = datetime.utcnow()
        orm = ReadingHistoryORM(user_id=user_id, book_id=book_id, created_at=now, last_read_at=now)
        _apply(orm, progress)
        session.add(orm)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.info("Concurrent history insert for user=%s book=%s, updating instead", user_id, book_id)
            orm = self._find(session, user_id, book_id)
            if orm is None:
                raise
            _apply(orm, progress)
            commit(session)
            session.refresh(orm)
            return _history_from_orm(orm), False
        session.refresh(orm)
        return _history_from_orm(orm), True

    def delete_entry(self, session: Session, user_id: int, entry_id: int) -> None:
        deleted = (
            session.query(ReadingHistoryORM)
            .filter(ReadingHistoryORM.id == entry_id, ReadingHistoryORM.user_id == user_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            session.rollback()
            raise NotFoundError("Reading history entry not found")
        commit(session)
