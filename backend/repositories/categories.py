"""
Category repository backed by SQLAlchemy.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from domain.errors import InUseError, NotFoundError
from domain.models import Category
from repositories.common import commit, ensure_unique
from repositories.models import BookORM, CategoryORM

SLUG_TAKEN = "A category with this slug already exists"


def _category_from_orm(orm: CategoryORM) -> Category:
    return Category(
        id=orm.id,
        name=orm.name,
        slug=orm.slug,
        icon_name=orm.icon_name,
        book_count=orm.book_count or 0,
    )


class CategoriesRepository:
    """CRUD operations for categories."""

    def list_categories(self, session: Session) -> List[Category]:
        rows = session.query(CategoryORM).order_by(CategoryORM.name.asc()).all()
        return [_category_from_orm(c) for c in rows]

    def get_category(self, session: Session, category_id: int) -> Optional[Category]:
        orm = session.get(CategoryORM, category_id)
        return _category_from_orm(orm) if orm else None

    def get_category_by_slug(self, session: Session, slug: str) -> Optional[Category]:
        orm = session.query(CategoryORM).filter(CategoryORM.slug == slug).first()
        return _category_from_orm(orm) if orm else None

    def create_category(self, session: Session, fields: Dict[str, Any]) -> Category:
        ensure_unique(session, CategoryORM, "slug", fields["slug"], SLUG_TAKEN)
        orm = CategoryORM(**fields, book_count=0)
        session.add(orm)
        commit(session, SLUG_TAKEN)
        session.refresh(orm)
        return _category_from_orm(orm)

    def update_category(self, session: Session, category_id: int, changes: Dict[str, Any]) -> Category:
        orm = session.get(CategoryORM, category_id)
        if not orm:
            raise NotFoundError("Category not found")
        if "slug" in changes and changes["slug"] != orm.slug:
            ensure_unique(session, CategoryORM, "slug", changes["slug"], SLUG_TAKEN, exclude_id=category_id)
        for key, value in changes.items():
            setattr(orm, key, value)
        commit(session, SLUG_TAKEN)
        session.refresh(orm)
        return _category_from_orm(orm)

    def delete_category(self, session: Session, category_id: int) -> None:
        orm = session.get(CategoryORM, category_id)
        if not orm:
            raise NotFoundError("Category not found")
        in_use = session.query(func.count(BookORM.id)).filter(BookORM.category_id == category_id).scalar()
        if in_use:
            raise InUseError(f"Category still has {in_use} book(s)")
        session.delete(orm)
        commit(session)
