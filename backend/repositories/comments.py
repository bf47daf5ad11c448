"""
Comment repository backed by SQLAlchemy.

New comments wait for moderation. Only approved comments with a rating feed
the book rating, so every transition that changes that set recomputes it.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Query, Session

from domain.errors import NotFoundError
from domain.models import Comment, CommentAuthor, Summary
from repositories import aggregates
from repositories.common import commit, exists
from repositories.models import BookORM, CommentORM, UserORM

PENDING = "pending"
APPROVED = "approved"


def _comment_from_orm(
    orm: CommentORM, user: Optional[UserORM] = None, book: Optional[BookORM] = None
) -> Comment:
    return Comment(
        id=orm.id,
        user_id=orm.user_id,
        book_id=orm.book_id,
        content=orm.content,
        rating=orm.rating,
        is_approved=bool(orm.is_approved),
        helpful_count=orm.helpful_count or 0,
        created_at=orm.created_at,
        user=CommentAuthor(id=user.id, name=user.name, username=user.username, avatar_url=user.avatar_url)
        if user
        else None,
        book=Summary(id=book.id, name=book.title, slug=book.slug) if book else None,
    )


class CommentsRepository:
    """Comments, their moderation state and the ratings they drive."""

    def _query(self, session: Session) -> Query:
        return (
            session.query(CommentORM, UserORM, BookORM)
            .outerjoin(UserORM, UserORM.id == CommentORM.user_id)
            .outerjoin(BookORM, BookORM.id == CommentORM.book_id)
        )

    def get_comment(self, session: Session, comment_id: int) -> Optional[Comment]:
        row = self._query(session).filter(CommentORM.id == comment_id).first()
        return _comment_from_orm(*row) if row else None

    def list_for_book(self, session: Session, book_id: int) -> List[Comment]:
        """Approved comments for a book, newest first."""
        rows = (
            self._query(session)
            .filter(CommentORM.book_id == book_id, CommentORM.is_approved.is_(True))
            .order_by(CommentORM.created_at.desc(), CommentORM.id.desc())
            .all()
        )
        return [_comment_from_orm(c, u) for c, u, _ in rows]

    def list_all(self, session: Session, status: Optional[str] = None) -> List[Comment]:
        query = self._query(session)
        if status == PENDING:
            query = query.filter(CommentORM.is_approved.is_(False))
        elif status == APPROVED:
            query = query.filter(CommentORM.is_approved.is_(True))
        rows = query.order_by(CommentORM.created_at.desc(), CommentORM.id.desc()).all()
        return [_comment_from_orm(*row) for row in rows]

    def list_by_user(self, session: Session, user_id: int) -> List[Comment]:
        rows = (
            self._query(session)
            .filter(CommentORM.user_id == user_id)
            .order_by(CommentORM.created_at.desc(), CommentORM.id.desc())
            .all()
        )
        return [_comment_from_orm(*row) for row in rows]

    def create_comment(
        self, session: Session, user_id: int, book_id: int, content: str, rating: Optional[int] = None
    ) -> Comment:
        if not exists(session, BookORM, book_id):
            raise NotFoundError("Book not found")
        orm = CommentORM(
            user_id=user_id,
            book_id=book_id,
            content=content,
            rating=rating,
            is_approved=False,
            helpful_count=0,
            created_at=datetime.utcnow(),
        )
        session.add(orm)
        commit(session)
        return self.get_comment(session, orm.id)

    def _set_approval(self, session: Session, comment_id: int, approved: bool) -> Comment:
        orm = session.get(CommentORM, comment_id)
        if not orm:
            raise NotFoundError("Comment not found")
        if bool(orm.is_approved) != approved:
            orm.is_approved = approved
            if orm.rating is not None:
                aggregates.refresh_book_rating(session, orm.book_id)
            commit(session)
        return self.get_comment(session, comment_id)

    def approve(self, session: Session, comment_id: int) -> Comment:
        return self._set_approval(session, comment_id, True)

    def unapprove(self, session: Session, comment_id: int) -> Comment:
        return self._set_approval(session, comment_id, False)

    def delete_comment(self, session: Session, comment_id: int) -> None:
        orm = session.get(CommentORM, comment_id)
        if not orm:
            raise NotFoundError("Comment not found")
        rated = bool(orm.is_approved) and orm.rating is not None
        book_id = orm.book_id
        session.delete(orm)
        if rated:
            aggregates.refresh_book_rating(session, book_id)
        commit(session)

    def increment_helpful(self, session: Session, comment_id: int) -> Comment:
        result = session.execute(
            update(CommentORM)
            .where(CommentORM.id == comment_id)
            .values(helpful_count=CommentORM.helpful_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            session.rollback()
            raise NotFoundError("Comment not found")
        commit(session)
        return self.get_comment(session, comment_id)
