"""
Site settings routes. Readable by anyone, writable by admins.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from api.deps import get_db_session, require_admin
from api.schemas import CamelModel, Color, OptionalUrl, RequiredUrl
from domain.models import User
from repositories import SiteSettingsRepository

router = APIRouter()
settings_repo = SiteSettingsRepository()
logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"logo_url", "favicon_url"}


class SiteSettingsResponse(CamelModel):
    site_name: str
    site_description: str
    site_url: str
    contact_email: str
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    primary_color: str
    maintenance_mode: bool
    allow_registration: bool
    updated_at: datetime


class SiteSettingsUpdate(CamelModel):
    site_name: Optional[str] = Field(default=None, min_length=2)
    site_description: Optional[str] = None
    site_url: Optional[RequiredUrl] = None
    contact_email: Optional[EmailStr] = None
    logo_url: OptionalUrl = None
    favicon_url: OptionalUrl = None
    primary_color: Optional[Color] = None
    maintenance_mode: Optional[bool] = None
    allow_registration: Optional[bool] = None


@router.get("", response_model=SiteSettingsResponse)
def get_settings(session: Session = Depends(get_db_session)):
    return SiteSettingsResponse.model_validate(settings_repo.get_settings(session))


@router.put("", response_model=SiteSettingsResponse)
def update_settings(
    payload: SiteSettingsUpdate,
    session: Session = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    """Partial update: only the keys sent are changed."""
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    if "contact_email" in changes:
        changes["contact_email"] = str(changes["contact_email"])
    updated = settings_repo.update_settings(session, changes)
    logger.info("Admin %s updated site settings: %s", admin.id, sorted(changes))
    return SiteSettingsResponse.model_validate(updated)
