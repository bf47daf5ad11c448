"""
User account routes: self-service profile and admin user management.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from api.deps import get_auth, get_db_session, require_admin, require_authenticated
from api.routes.auth import UserResponse
from api.schemas import CamelModel, MessageResponse, OptionalUrl
from domain.errors import NotFoundError
from domain.models import Role, User
from repositories import UsersRepository
from services.auth import AuthService

router = APIRouter()
admin_router = APIRouter()
users_repo = UsersRepository()
logger = logging.getLogger(__name__)


class AdminUserResponse(UserResponse):
    created_at: datetime


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    avatar_url: OptionalUrl = None


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class RoleUpdate(CamelModel):
    role: Role


@router.get("/me", response_model=UserResponse)
def get_profile(user: User = Depends(require_authenticated)):
    return UserResponse.model_validate(user)


@router.put("/me", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_db_session),
    user: User = Depends(require_authenticated),
):
    changes = payload.model_dump(exclude_unset=True)
    changes = {k: v for k, v in changes.items() if v is not None or k == "avatar_url"}
    if "email" in changes:
        changes["email"] = str(changes["email"])
    return UserResponse.model_validate(users_repo.update_profile(session, user.id, changes))


@router.put("/me/password", response_model=MessageResponse)
def change_password(
    payload: PasswordChange,
    session: Session = Depends(get_db_session),
    auth: AuthService = Depends(get_auth),
    user: User = Depends(require_authenticated),
):
    auth.change_password(session, user.id, payload.current_password, payload.new_password)
    return MessageResponse(message="Password updated")


@admin_router.get("", response_model=List[AdminUserResponse])
def list_users(session: Session = Depends(get_db_session), admin: User = Depends(require_admin)):
    return [AdminUserResponse.model_validate(u) for u in users_repo.list_users(session)]


@admin_router.get("/{user_id}", response_model=AdminUserResponse)
def get_user(user_id: int, session: Session = Depends(get_db_session), admin: User = Depends(require_admin)):
    user = users_repo.get_user(session, user_id)
    if not user:
        raise NotFoundError("User not found")
    return AdminUserResponse.model_validate(user)


@admin_router.put("/{user_id}", response_model=AdminUserResponse)
def update_role(
    user_id: int,
    payload: RoleUpdate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    user = users_repo.set_role(session, user_id, payload.role)
    logger.info("Admin %s set role of user %s to %s", admin.id, user_id, payload.role.value)
    return AdminUserResponse.model_validate(user)


@admin_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    session: Session = Depends(get_db_session),
    auth: AuthService = Depends(get_auth),
    admin: User = Depends(require_admin),
):
    users_repo.delete_user(session, user_id, acting_user_id=admin.id)
    auth.sessions.destroy_user(user_id)
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
