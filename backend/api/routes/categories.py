"""
Category API routes.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import Field
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_admin
from api.routes.books import BookResponse, derive_slug, book_to_response
from api.schemas import CamelModel, NameSlug
from domain.errors import NotFoundError
from domain.models import User
from repositories import BooksRepository, CategoriesRepository

router = APIRouter()
categories_repo = CategoriesRepository()
books_repo = BooksRepository()
logger = logging.getLogger(__name__)


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    icon_name: str
    book_count: int


class CategoryCreate(CamelModel):
    name: str = Field(min_length=3)
    slug: NameSlug = None
    icon_name: str = Field(default="BookIcon", min_length=1)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=3)
    slug: NameSlug = None
    icon_name: Optional[str] = Field(default=None, min_length=1)


@router.get("", response_model=List[CategoryResponse])
def list_categories(session: Session = Depends(get_db_session)):
    return [CategoryResponse.model_validate(c) for c in categories_repo.list_categories(session)]


@router.get("/slug/{slug}", response_model=CategoryResponse)
def get_category_by_slug(slug: str, session: Session = Depends(get_db_session)):
    category = categories_repo.get_category_by_slug(session, slug)
    if not category:
        raise NotFoundError("Category not found")
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, session: Session = Depends(get_db_session)):
    category = categories_repo.get_category(session, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}/books", response_model=List[BookResponse])
def list_category_books(category_id: int, session: Session = Depends(get_db_session)):
    if not categories_repo.get_category(session, category_id):
        raise NotFoundError("Category not found")
    return [book_to_response(b) for b in books_repo.list_by_category(session, category_id)]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    fields = payload.model_dump()
    fields["slug"] = derive_slug(payload.slug, payload.name)
    category = categories_repo.create_category(session, fields)
    logger.info("Admin %s created category %s (%s)", admin.id, category.id, category.slug)
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    category = categories_repo.update_category(session, category_id, changes)
    logger.info("Admin %s updated category %s", admin.id, category_id)
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    categories_repo.delete_category(session, category_id)
    logger.info("Admin %s deleted category %s", admin.id, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
