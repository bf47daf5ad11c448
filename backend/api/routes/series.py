"""
Series API routes.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_admin
from api.routes.books import BookResponse, SummaryResponse, derive_slug, book_to_response
from api.schemas import CamelModel, OptionalSlug, OptionalUrl
from domain.errors import NotFoundError
from domain.models import User
from repositories import BooksRepository, SeriesRepository

router = APIRouter()
series_repo = SeriesRepository()
books_repo = BooksRepository()
logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"description", "cover_url"}


class SeriesResponse(CamelModel):
    id: int
    name: str
    slug: str
    author_id: int
    description: Optional[str] = None
    cover_url: Optional[str] = None
    total_books: int
    author: Optional[SummaryResponse] = None


class SeriesDetailResponse(SeriesResponse):
    books: List[BookResponse] = Field(default_factory=list)


class SeriesCreate(CamelModel):
    name: str = Field(min_length=2)
    slug: OptionalSlug = None
    author_id: int
    description: Optional[str] = None
    cover_url: OptionalUrl = None


class SeriesUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2)
    slug: OptionalSlug = None
    author_id: Optional[int] = None
    description: Optional[str] = None
    cover_url: OptionalUrl = None


class SeriesDeleteResponse(CamelModel):
    message: str
    detached_books: int


@router.get("", response_model=List[SeriesResponse])
def list_series(session: Session = Depends(get_db_session)):
    return [SeriesResponse.model_validate(s) for s in series_repo.list_series(session)]


@router.get("/slug/{slug}", response_model=SeriesDetailResponse)
def get_series_by_slug(slug: str, session: Session = Depends(get_db_session)):
    series = series_repo.get_series_by_slug(session, slug)
    if not series:
        raise NotFoundError("Series not found")
    return _detail(session, series)


@router.get("/{series_id}", response_model=SeriesDetailResponse)
def get_series(series_id: int, session: Session = Depends(get_db_session)):
    series = series_repo.get_series(session, series_id)
    if not series:
        raise NotFoundError("Series not found")
    return _detail(session, series)


def _detail(session: Session, series) -> SeriesDetailResponse:
    """Series with its member books ordered by volume."""
    detail = SeriesDetailResponse.model_validate(series)
    detail.books = [book_to_response(b) for b in books_repo.list_by_series(session, series.id)]
    return detail


@router.post("", response_model=SeriesResponse, status_code=status.HTTP_201_CREATED)
def create_series(
    payload: SeriesCreate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    fields = payload.model_dump()
    fields["slug"] = derive_slug(payload.slug, payload.name)
    series = series_repo.create_series(session, fields)
    logger.info("Admin %s created series %s (%s)", admin.id, series.id, series.slug)
    return SeriesResponse.model_validate(series)


@router.put("/{series_id}", response_model=SeriesResponse)
def update_series(
    series_id: int,
    payload: SeriesUpdate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    series = series_repo.update_series(session, series_id, changes)
    logger.info("Admin %s updated series %s", admin.id, series_id)
    return SeriesResponse.model_validate(series)


@router.delete("/{series_id}", response_model=SeriesDeleteResponse)
def delete_series(
    series_id: int,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    detached = series_repo.delete_series(session, series_id)
    logger.info("Admin %s deleted series %s, detached %d book(s)", admin.id, series_id, detached)
    return SeriesDeleteResponse(message="Series deleted", detached_books=detached)
