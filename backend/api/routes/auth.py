"""
Authentication routes: register, login, logout and the current identity.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from api.deps import current_user_optional, get_auth, get_db_session, get_settings, session_id_from
from api.schemas import CamelModel, MessageResponse
from domain.errors import UnauthorizedError
from domain.models import Role, User
from services.auth import AuthService
from settings import Settings

router = APIRouter()
logger = logging.getLogger(__name__)


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    name: str
    role: Role
    avatar_url: Optional[str] = None


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(CamelModel):
    name: str = Field(min_length=2)
    username: str = Field(min_length=3)
    email: EmailStr
    password: str = Field(min_length=6)


def set_session_cookie(response: Response, settings: Settings, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        path="/",
    )


@router.post("/register", response_model=UserResponse, status_code=201)
def register(
    payload: RegisterRequest,
    response: Response,
    session: Session = Depends(get_db_session),
    auth: AuthService = Depends(get_auth),
    settings: Settings = Depends(get_settings),
):
    """Create a plain user account and log it in; any client-sent role is ignored."""
    session_id, user = auth.register(
        session,
        username=payload.username,
        password=payload.password,
        email=str(payload.email),
        name=payload.name,
    )
    set_session_cookie(response, settings, session_id)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserResponse)
def login(
    payload: LoginRequest,
    response: Response,
    session: Session = Depends(get_db_session),
    auth: AuthService = Depends(get_auth),
    settings: Settings = Depends(get_settings),
):
    session_id, user = auth.login(session, payload.username, payload.password)
    set_session_cookie(response, settings, session_id)
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth),
    settings: Settings = Depends(get_settings),
):
    auth.logout(session_id_from(request))
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
def me(user: Optional[User] = Depends(current_user_optional)):
    if user is None:
        raise UnauthorizedError()
    return UserResponse.model_validate(user)
