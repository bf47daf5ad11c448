"""
SQLAlchemy ORM models for persistence.

Foreign keys are declared for joins; referential rules (guards, counters,
detachment) are enforced by the repositories.
"""
from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from db import Base


class UserORM(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default="user")
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CategoryORM(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    icon_name = Column(String(64), nullable=False, default="BookIcon")
    book_count = Column(Integer, nullable=False, default=0)


class AuthorORM(Base):
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    bio = Column(Text, nullable=True)
    photo_url = Column(String, nullable=True)
    book_count = Column(Integer, nullable=False, default=0)


class SeriesORM(Base):
    __tablename__ = "series"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("authors.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    cover_url = Column(String, nullable=True)
    total_books = Column(Integer, nullable=False, default=0)


class BookORM(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("authors.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    cover_url = Column(String, nullable=True)
    epub_url = Column(String, nullable=True)
    pdf_url = Column(String, nullable=True)
    amazon_url = Column(String, nullable=True)
    format = Column(String(8), nullable=False, default="both")
    page_count = Column(Integer, nullable=True)
    isbn = Column(String(32), nullable=True)
    publish_year = Column(Integer, nullable=True)
    publisher = Column(String(255), nullable=True)
    language = Column(String(8), nullable=False, default="pt-BR")
    is_featured = Column(Boolean, nullable=False, default=False)
    is_new = Column(Boolean, nullable=False, default=False)
    is_free = Column(Boolean, nullable=False, default=False)
    download_count = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)
    series_id = Column(Integer, ForeignKey("series.id"), nullable=True, index=True)
    volume_number = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class FavoriteORM(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_favorite_user_book"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ReadingHistoryORM(Base):
    __tablename__ = "reading_history"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_history_user_book"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    progress = Column(Integer, nullable=False, default=0)
    last_page = Column(Integer, nullable=False, default=0)
    total_pages = Column(Integer, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_read_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CommentORM(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    rating = Column(Integer, nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    helpful_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class SiteSettingsORM(Base):
    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    site_name = Column(String(255), nullable=False, default="Elexandria")
    site_description = Column(String(512), nullable=False, default="Sua biblioteca digital")
    site_url = Column(String, nullable=False, default="https://elexandria.com")
    contact_email = Column(String(255), nullable=False, default="contato@elexandria.com")
    logo_url = Column(String, nullable=True)
    favicon_url = Column(String, nullable=True)
    primary_color = Column(String(7), nullable=False, default="#A855F7")
    maintenance_mode = Column(Boolean, nullable=False, default=False)
    allow_registration = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
