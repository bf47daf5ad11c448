"""
Author API routes.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import Field
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_admin
from api.routes.books import BookResponse, derive_slug, book_to_response
from api.routes.series import SeriesResponse
from api.schemas import CamelModel, NameSlug, OptionalUrl
from domain.errors import NotFoundError
from domain.models import User
from repositories import AuthorsRepository, BooksRepository, SeriesRepository

router = APIRouter()
authors_repo = AuthorsRepository()
books_repo = BooksRepository()
series_repo = SeriesRepository()
logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"bio", "photo_url"}


class AuthorResponse(CamelModel):
    id: int
    name: str
    slug: str
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    book_count: int


class AuthorCreate(CamelModel):
    name: str = Field(min_length=3)
    slug: NameSlug = None
    bio: Optional[str] = None
    photo_url: OptionalUrl = None


class AuthorUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=3)
    slug: NameSlug = None
    bio: Optional[str] = None
    photo_url: OptionalUrl = None


def _require_author(session: Session, author_id: int):
    author = authors_repo.get_author(session, author_id)
    if not author:
        raise NotFoundError("Author not found")
    return author


@router.get("", response_model=List[AuthorResponse])
def list_authors(session: Session = Depends(get_db_session)):
    return [AuthorResponse.model_validate(a) for a in authors_repo.list_authors(session)]


@router.get("/slug/{slug}", response_model=AuthorResponse)
def get_author_by_slug(slug: str, session: Session = Depends(get_db_session)):
    author = authors_repo.get_author_by_slug(session, slug)
    if not author:
        raise NotFoundError("Author not found")
    return AuthorResponse.model_validate(author)


@router.get("/{author_id}", response_model=AuthorResponse)
def get_author(author_id: int, session: Session = Depends(get_db_session)):
    return AuthorResponse.model_validate(_require_author(session, author_id))


@router.get("/{author_id}/books", response_model=List[BookResponse])
def list_author_books(author_id: int, session: Session = Depends(get_db_session)):
    _require_author(session, author_id)
    return [book_to_response(b) for b in books_repo.list_by_author(session, author_id)]


@router.get("/{author_id}/series", response_model=List[SeriesResponse])
def list_author_series(author_id: int, session: Session = Depends(get_db_session)):
    _require_author(session, author_id)
    return [SeriesResponse.model_validate(s) for s in series_repo.list_by_author(session, author_id)]


@router.post("", response_model=AuthorResponse, status_code=status.HTTP_201_CREATED)
def create_author(
    payload: AuthorCreate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    fields = payload.model_dump()
    fields["slug"] = derive_slug(payload.slug, payload.name)
    author = authors_repo.create_author(session, fields)
    logger.info("Admin %s created author %s (%s)", admin.id, author.id, author.slug)
    return AuthorResponse.model_validate(author)


@router.put("/{author_id}", response_model=AuthorResponse)
def update_author(
    author_id: int,
    payload: AuthorUpdate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    author = authors_repo.update_author(session, author_id, changes)
    logger.info("Admin %s updated author %s", admin.id, author_id)
    return AuthorResponse.model_validate(author)


@router.delete("/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_author(
    author_id: int,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    authors_repo.delete_author(session, author_id)
    logger.info("Admin %s deleted author %s", admin.id, author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
