"""
Comment routes: public listing, authoring and admin moderation.
"""
import logging
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import Field
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_admin, require_authenticated
from api.routes.books import SummaryResponse
from api.schemas import CamelModel
from domain.models import User
from repositories import CommentsRepository

book_comments_router = APIRouter()
router = APIRouter()
admin_router = APIRouter()
comments_repo = CommentsRepository()
logger = logging.getLogger(__name__)


class CommentAuthorResponse(CamelModel):
    id: int
    name: str
    username: str
    avatar_url: Optional[str] = None


class CommentResponse(CamelModel):
    id: int
    user_id: int
    book_id: int
    content: str
    rating: Optional[int] = None
    is_approved: bool
    helpful_count: int
    created_at: datetime
    user: Optional[CommentAuthorResponse] = None
    book: Optional[SummaryResponse] = None


class CommentCreate(CamelModel):
    content: str = Field(min_length=3)
    rating: Optional[int] = Field(default=None, ge=1, le=5)


@book_comments_router.get("/{book_id}/comments", response_model=List[CommentResponse])
def list_book_comments(book_id: int, session: Session = Depends(get_db_session)):
    """Approved comments only."""
    return [CommentResponse.model_validate(c) for c in comments_repo.list_for_book(session, book_id)]


@book_comments_router.post(
    "/{book_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED
)
def create_comment(
    book_id: int,
    payload: CommentCreate,
    session: Session = Depends(get_db_session),
    user: User = Depends(require_authenticated),
):
    """New comments wait in the moderation queue until an admin approves them."""
    comment = comments_repo.create_comment(
        session, user_id=user.id, book_id=book_id, content=payload.content.strip(), rating=payload.rating
    )
    logger.info("User %s commented on book %s (comment %s)", user.id, book_id, comment.id)
    return CommentResponse.model_validate(comment)


@router.get("/mine", response_model=List[CommentResponse])
def list_my_comments(session: Session = Depends(get_db_session), user: User = Depends(require_authenticated)):
    return [CommentResponse.model_validate(c) for c in comments_repo.list_by_user(session, user.id)]


@router.post("/{comment_id}/helpful", response_model=CommentResponse)
def mark_helpful(
    comment_id: int,
    session: Session = Depends(get_db_session),
    user: User = Depends(require_authenticated),
):
    return CommentResponse.model_validate(comments_repo.increment_helpful(session, comment_id))


@admin_router.get("", response_model=List[CommentResponse])
def list_all_comments(
    status_filter: Optional[Literal["pending", "approved"]] = Query(default=None, alias="status"),
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    return [CommentResponse.model_validate(c) for c in comments_repo.list_all(session, status_filter)]


@admin_router.post("/{comment_id}/approve", response_model=CommentResponse)
def approve_comment(
    comment_id: int,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    comment = comments_repo.approve(session, comment_id)
    logger.info("Admin %s approved comment %s", admin.id, comment_id)
    return CommentResponse.model_validate(comment)


@admin_router.post("/{comment_id}/unapprove", response_model=CommentResponse)
def unapprove_comment(
    comment_id: int,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    comment = comments_repo.unapprove(session, comment_id)
    logger.info("Admin %s unapproved comment %s", admin.id, comment_id)
    return CommentResponse.model_validate(comment)


@admin_router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: int,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    comments_repo.delete_comment(session, comment_id)
    logger.info("Admin %s deleted comment %s", admin.id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
