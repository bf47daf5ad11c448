"""
Favorites routes. Every operation is scoped to the session's user.
"""
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_authenticated
from api.routes.books import BookResponse
from api.schemas import CamelModel
from domain.models import User
from repositories import FavoritesRepository

router = APIRouter()
favorites_repo = FavoritesRepository()


class FavoriteBookResponse(BookResponse):
    favorite_id: int
    added_at: datetime


class FavoriteCreate(CamelModel):
    book_id: int


class FavoriteResponse(CamelModel):
    id: int
    user_id: int
    book_id: int
    created_at: datetime


class FavoriteCheckResponse(CamelModel):
    is_favorite: bool


@router.get("", response_model=List[FavoriteBookResponse])
def list_favorites(session: Session = Depends(get_db_session), user: User = Depends(require_authenticated)):
    return [
        FavoriteBookResponse(
            **BookResponse.model_validate(fav.book).model_dump(),
            favorite_id=fav.favorite_id,
            added_at=fav.added_at,
        )
        for fav in favorites_repo.list_favorite_books(session, user.id)
    ]


@router.post("", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoriteCreate,
    session: Session = Depends(get_db_session),
    user: User = Depends(require_authenticated),
):
    return FavoriteResponse.model_validate(favorites_repo.add_favorite(session, user.id, payload.book_id))


@router.get("/check/{book_id}", response_model=FavoriteCheckResponse)
def check_favorite(book_id: int, session: Session = Depends(get_db_session), user: User = Depends(require_authenticated)):
    return FavoriteCheckResponse(is_favorite=favorites_repo.is_favorite(session, user.id, book_id))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(book_id: int, session: Session = Depends(get_db_session), user: User = Depends(require_authenticated)):
    favorites_repo.remove_favorite(session, user.id, book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
