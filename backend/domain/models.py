"""
Core domain models for the library catalog.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class BookFormat(str, Enum):
    """Which downloadable files a book offers."""
    EPUB = "epub"
    PDF = "pdf"
    BOTH = "both"


class Language(str, Enum):
    PT_BR = "pt-BR"
    PT_PT = "pt-PT"
    EN = "en"
    ES = "es"
    FR = "fr"


@dataclass
class User:
    id: int
    username: str
    email: str
    name: str
    role: Role = Role.USER
    avatar_url: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class SessionUser:
    """
    Identity projection kept in a session.

    Deliberately carries no password hash.
    """
    id: int
    username: str
    email: str
    name: str
    role: Role
    avatar_url: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            name=user.name,
            role=user.role,
            avatar_url=user.avatar_url,
        )


@dataclass(frozen=True)
class Summary:
    """Compact {name, slug} projection used to enrich books."""
    id: int
    name: str
    slug: str


@dataclass
class Category:
    id: int
    name: str
    slug: str
    icon_name: str = "BookIcon"
    book_count: int = 0


@dataclass
class Author:
    id: int
    name: str
    slug: str
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    book_count: int = 0


@dataclass
class Series:
    id: int
    name: str
    slug: str
    author_id: int
    description: Optional[str] = None
    cover_url: Optional[str] = None
    total_books: int = 0
    author: Optional[Summary] = None


@dataclass
class Book:
    """
    A catalog entry.

    ``rating``/``rating_count`` are derived from approved, rated comments and
    ``download_count`` only ever grows.
    """
    id: int
    title: str
    slug: str
    author_id: int
    category_id: int
    description: str = ""
    cover_url: Optional[str] = None
    epub_url: Optional[str] = None
    pdf_url: Optional[str] = None
    amazon_url: Optional[str] = None
    format: BookFormat = BookFormat.BOTH
    page_count: Optional[int] = None
    isbn: Optional[str] = None
    publish_year: Optional[int] = None
    publisher: Optional[str] = None
    language: Language = Language.PT_BR
    is_featured: bool = False
    is_new: bool = False
    is_free: bool = False
    download_count: int = 0
    rating: float = 0.0
    rating_count: int = 0
    series_id: Optional[int] = None
    volume_number: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    author: Optional[Summary] = None
    category: Optional[Summary] = None
    series: Optional[Summary] = None


@dataclass
class Favorite:
    id: int
    user_id: int
    book_id: int
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class FavoriteBook:
    """A favorited book together with the favorite row that links it."""
    favorite_id: int
    added_at: datetime
    book: Book


@dataclass
class ReadingHistory:
    id: int
    user_id: int
    book_id: int
    progress: int = 0
    last_page: int = 0
    total_pages: Optional[int] = None
    is_completed: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_read_at: datetime = field(default_factory=datetime.utcnow)
    book: Optional[Book] = None


@dataclass
class CommentAuthor:
    id: int
    name: str
    username: str
    avatar_url: Optional[str] = None


@dataclass
class Comment:
    id: int
    user_id: int
    book_id: int
    content: str
    rating: Optional[int] = None
    is_approved: bool = False
    helpful_count: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    user: Optional[CommentAuthor] = None
    book: Optional[Summary] = None


@dataclass
class SiteSettings:
    id: int
    site_name: str = "Elexandria"
    site_description: str = "Sua biblioteca digital"
    site_url: str = "https://elexandria.com"
    contact_email: str = "contato@elexandria.com"
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    primary_color: str = "#A855F7"
    maintenance_mode: bool = False
    allow_registration: bool = True
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class BookFilters:
    """Filters accepted by the book listing."""
    category_id: Optional[int] = None
    author_id: Optional[int] = None
    series_id: Optional[int] = None
    featured: Optional[bool] = None
    new: Optional[bool] = None
    free: Optional[bool] = None
    search: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0
