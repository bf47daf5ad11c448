"""
Books API routes.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import Field
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_admin
from api.schemas import CamelModel, OptionalSlug, OptionalUrl
from domain.errors import NotFoundError, ValidationError
from domain.models import Book, BookFilters, BookFormat, Language, User
from domain.slugs import slugify
from repositories import BooksRepository

router = APIRouter()
books_repo = BooksRepository()
logger = logging.getLogger(__name__)

# Columns that may be cleared with an explicit null on update
NULLABLE_FIELDS = {
    "cover_url",
    "epub_url",
    "pdf_url",
    "amazon_url",
    "page_count",
    "isbn",
    "publish_year",
    "publisher",
    "series_id",
    "volume_number",
}


class SummaryResponse(CamelModel):
    id: int
    name: str
    slug: str


class BookResponse(CamelModel):
    id: int
    title: str
    slug: str
    author_id: int
    category_id: int
    description: str
    cover_url: Optional[str] = None
    epub_url: Optional[str] = None
    pdf_url: Optional[str] = None
    amazon_url: Optional[str] = None
    format: BookFormat
    page_count: Optional[int] = None
    isbn: Optional[str] = None
    publish_year: Optional[int] = None
    publisher: Optional[str] = None
    language: Language
    is_featured: bool
    is_new: bool
    is_free: bool
    download_count: int
    rating: float
    rating_count: int
    series_id: Optional[int] = None
    volume_number: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    author: Optional[SummaryResponse] = None
    category: Optional[SummaryResponse] = None
    series: Optional[SummaryResponse] = None


class BookCreate(CamelModel):
    title: str = Field(min_length=2)
    slug: OptionalSlug = None
    author_id: int
    category_id: int
    description: str = Field(min_length=10)
    cover_url: OptionalUrl = None
    epub_url: OptionalUrl = None
    pdf_url: OptionalUrl = None
    amazon_url: OptionalUrl = None
    format: BookFormat = BookFormat.BOTH
    page_count: Optional[int] = Field(default=None, ge=0)
    isbn: Optional[str] = None
    publish_year: Optional[int] = Field(default=None, ge=0)
    publisher: Optional[str] = None
    language: Language = Language.PT_BR
    is_featured: bool = False
    is_new: bool = False
    is_free: bool = False
    series_id: Optional[int] = None
    volume_number: Optional[int] = Field(default=None, ge=1)


class BookUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=2)
    slug: OptionalSlug = None
    author_id: Optional[int] = None
    category_id: Optional[int] = None
    description: Optional[str] = Field(default=None, min_length=10)
    cover_url: OptionalUrl = None
    epub_url: OptionalUrl = None
    pdf_url: OptionalUrl = None
    amazon_url: OptionalUrl = None
    format: Optional[BookFormat] = None
    page_count: Optional[int] = Field(default=None, ge=0)
    isbn: Optional[str] = None
    publish_year: Optional[int] = Field(default=None, ge=0)
    publisher: Optional[str] = None
    language: Optional[Language] = None
    is_featured: Optional[bool] = None
    is_new: Optional[bool] = None
    is_free: Optional[bool] = None
    series_id: Optional[int] = None
    volume_number: Optional[int] = Field(default=None, ge=1)


def book_to_response(book: Book) -> BookResponse:
    """Convert domain Book to API response."""
    return BookResponse.model_validate(book)


def derive_slug(slug: Optional[str], source: str) -> str:
    slug = slug or slugify(source)
    if not slug:
        raise ValidationError.for_field("slug", "Slug could not be derived; please provide one")
    return slug


@router.get("", response_model=List[BookResponse])
def list_books(
    category: Optional[int] = None,
    author: Optional[int] = None,
    series: Optional[int] = None,
    featured: Optional[bool] = None,
    new: Optional[bool] = None,
    free: Optional[bool] = None,
    search: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: Session = Depends(get_db_session),
):
    """List books, newest first (or by volume when filtered by series)."""
    filters = BookFilters(
        category_id=category,
        author_id=author,
        series_id=series,
        featured=featured,
        new=new,
        free=free,
        search=search.strip() if search else None,
        limit=limit,
        offset=offset,
    )
    return [book_to_response(b) for b in books_repo.list_books(session, filters)]


@router.get("/id/{book_id}", response_model=BookResponse)
def get_book_by_id(book_id: int, session: Session = Depends(get_db_session)):
    book = books_repo.get_book(session, book_id)
    if not book:
        raise NotFoundError("Book not found")
    return book_to_response(book)


@router.get("/{slug}", response_model=BookResponse)
def get_book(slug: str, session: Session = Depends(get_db_session)):
    book = books_repo.get_book_by_slug(session, slug)
    if not book:
        raise NotFoundError("Book not found")
    return book_to_response(book)


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
def create_book(
    payload: BookCreate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    if not payload.epub_url and not payload.pdf_url:
        raise ValidationError.for_field("epubUrl", "Provide an EPUB or PDF URL")
    fields = payload.model_dump()
    fields["slug"] = derive_slug(payload.slug, payload.title)
    book = books_repo.create_book(session, fields)
    logger.info("Admin %s created book %s (%s)", admin.id, book.id, book.slug)
    return book_to_response(book)


@router.put("/{book_id}", response_model=BookResponse)
def update_book(
    book_id: int,
    payload: BookUpdate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    book = books_repo.update_book(session, book_id, changes)
    logger.info("Admin %s updated book %s", admin.id, book_id)
    return book_to_response(book)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: int,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    books_repo.delete_book(session, book_id)
    logger.info("Admin %s deleted book %s", admin.id, book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{book_id}/increment-downloads", response_model=BookResponse)
def increment_downloads(book_id: int, session: Session = Depends(get_db_session)):
    return book_to_response(books_repo.increment_download_count(session, book_id))
