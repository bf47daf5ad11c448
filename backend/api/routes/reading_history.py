"""
Reading history routes. Progress is saved with upsert semantics per book.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import Field
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_authenticated
from api.routes.books import BookResponse
from api.schemas import CamelModel
from domain.models import User
from repositories import ReadingHistoryRepository

router = APIRouter()
history_repo = ReadingHistoryRepository()


class HistoryResponse(CamelModel):
    id: int
    user_id: int
    book_id: int
    progress: int
    last_page: int
    total_pages: Optional[int] = None
    is_completed: bool
    created_at: datetime
    last_read_at: datetime
    book: Optional[BookResponse] = None


class HistoryUpsert(CamelModel):
    book_id: int
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    last_page: Optional[int] = Field(default=None, ge=0)
    total_pages: Optional[int] = Field(default=None, ge=0)
    is_completed: Optional[bool] = None


@router.get("", response_model=List[HistoryResponse])
def list_history(session: Session = Depends(get_db_session), user: User = Depends(require_authenticated)):
    return [HistoryResponse.model_validate(h) for h in history_repo.list_history(session, user.id)]


@router.post("", response_model=HistoryResponse)
def save_progress(
    payload: HistoryUpsert,
    response: Response,
    session: Session = Depends(get_db_session),
    user: User = Depends(require_authenticated),
):
    """Create the entry for this book (201) or update the existing one (200)."""
    progress = payload.model_dump(exclude={"book_id"})
    entry, created = history_repo.upsert(session, user.id, payload.book_id, progress)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return HistoryResponse.model_validate(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(entry_id: int, session: Session = Depends(get_db_session), user: User = Depends(require_authenticated)):
    history_repo.delete_entry(session, user.id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
