"""
Site settings repository. The table holds a single row, created on first read.
"""
from datetime import datetime
from typing import Any, Dict

from sqlalchemy.orm import Session

from domain.models import SiteSettings
from repositories.common import commit
from repositories.models import SiteSettingsORM


def _settings_from_orm(orm: SiteSettingsORM) -> SiteSettings:
    return SiteSettings(
        id=orm.id,
        site_name=orm.site_name,
        site_description=orm.site_description,
        site_url=orm.site_url,
        contact_email=orm.contact_email,
        logo_url=orm.logo_url,
        favicon_url=orm.favicon_url,
        primary_color=orm.primary_color,
        maintenance_mode=bool(orm.maintenance_mode),
        allow_registration=bool(orm.allow_registration),
        updated_at=orm.updated_at,
    )


class SiteSettingsRepository:
    def _row(self, session: Session) -> SiteSettingsORM:
        orm = session.query(SiteSettingsORM).order_by(SiteSettingsORM.id.asc()).first()
        if orm is None:
            defaults = SiteSettings(id=0)
            orm = SiteSettingsORM(
                site_name=defaults.site_name,
                site_description=defaults.site_description,
                site_url=defaults.site_url,
                contact_email=defaults.contact_email,
                primary_color=defaults.primary_color,
                maintenance_mode=defaults.maintenance_mode,
                allow_registration=defaults.allow_registration,
                updated_at=datetime.utcnow(),
            )
            session.add(orm)
            commit(session)
            session.refresh(orm)
        return orm

    def get_settings(self, session: Session) -> SiteSettings:
        return _settings_from_orm(self._row(session))

    def update_settings(self, session: Session, changes: Dict[str, Any]) -> SiteSettings:
        """Apply a partial update; keys not present keep their stored value."""
        orm = self._row(session)
        for key, value in changes.items():
            setattr(orm, key, value)
        orm.updated_at = datetime.utcnow()
        commit(session)
        session.refresh(orm)
        return _settings_from_orm(orm)
