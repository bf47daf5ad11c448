"""
Author repository backed by SQLAlchemy.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from domain.errors import InUseError, NotFoundError
from domain.models import Author
from repositories.common import commit, ensure_unique
from repositories.models import AuthorORM, BookORM, SeriesORM

SLUG_TAKEN = "An author with this slug already exists"


def _author_from_orm(orm: AuthorORM) -> Author:
    return Author(
        id=orm.id,
        name=orm.name,
        slug=orm.slug,
        bio=orm.bio,
        photo_url=orm.photo_url,
        book_count=orm.book_count or 0,
    )


class AuthorsRepository:
    """CRUD operations for authors."""

    def list_authors(self, session: Session) -> List[Author]:
        rows = session.query(AuthorORM).order_by(AuthorORM.name.asc()).all()
        return [_author_from_orm(a) for a in rows]

    def get_author(self, session: Session, author_id: int) -> Optional[Author]:
        orm = session.get(AuthorORM, author_id)
        return _author_from_orm(orm) if orm else None

    def get_author_by_slug(self, session: Session, slug: str) -> Optional[Author]:
        orm = session.query(AuthorORM).filter(AuthorORM.slug == slug).first()
        return _author_from_orm(orm) if orm else None

    def create_author(self, session: Session, fields: Dict[str, Any]) -> Author:
        ensure_unique(session, AuthorORM, "slug", fields["slug"], SLUG_TAKEN)
        orm = AuthorORM(**fields, book_count=0)
        session.add(orm)
        commit(session, SLUG_TAKEN)
        session.refresh(orm)
        return _author_from_orm(orm)

    def update_author(self, session: Session, author_id: int, changes: Dict[str, Any]) -> Author:
        orm = session.get(AuthorORM, author_id)
        if not orm:
            raise NotFoundError("Author not found")
        if "slug" in changes and changes["slug"] != orm.slug:
            ensure_unique(session, AuthorORM, "slug", changes["slug"], SLUG_TAKEN, exclude_id=author_id)
        for key, value in changes.items():
            setattr(orm, key, value)
        commit(session, SLUG_TAKEN)
        session.refresh(orm)
        return _author_from_orm(orm)

    def delete_author(self, session: Session, author_id: int) -> None:
        orm = session.get(AuthorORM, author_id)
        if not orm:
            raise NotFoundError("Author not found")
        in_use = session.query(func.count(BookORM.id)).filter(BookORM.author_id == author_id).scalar()
        if in_use:
            raise InUseError(f"Author still has {in_use} book(s)")
        owned = session.query(func.count(SeriesORM.id)).filter(SeriesORM.author_id == author_id).scalar()
        if owned:
            raise InUseError(f"Author still owns {owned} series")
        session.delete(orm)
        commit(session)
