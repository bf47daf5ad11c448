import os
from pathlib import Path
from typing import List

# Basic settings helper to read environment configuration.

DATA_DIR = Path(__file__).resolve().parent / "data"


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_list(val: str | None) -> List[str]:
    if not val:
        return []
    return [item.strip() for item in val.split(",") if item.strip()]


class Settings:
    def __init__(self, **overrides) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL") or f"sqlite:///{DATA_DIR / 'catalog.db'}"
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self.SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "catalog_session")
        self.SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", str(24 * 3600)))
        self.COOKIE_SECURE: bool = _as_bool(os.getenv("COOKIE_SECURE"), False)
        self.CORS_ORIGINS: List[str] = _as_list(os.getenv("CORS_ORIGINS"))

        # Connection establishment: capped exponential backoff
        self.DB_MAX_RETRIES: int = int(os.getenv("DB_MAX_RETRIES", "5"))
        self.DB_INITIAL_RETRY_DELAY: float = float(os.getenv("DB_INITIAL_RETRY_DELAY", "0.5"))
        self.DB_MAX_RETRY_DELAY: float = float(os.getenv("DB_MAX_RETRY_DELAY", "4"))
        self.DB_POOL_TIMEOUT: float = float(os.getenv("DB_POOL_TIMEOUT", "10"))
        self.HEALTH_CHECK_INTERVAL: float = float(os.getenv("HEALTH_CHECK_INTERVAL", "30"))

        # Bootstrap admin, created only when no admin exists
        self.ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
        self.ADMIN_PASSWORD: str | None = os.getenv("ADMIN_PASSWORD")
        self.ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@elexandria.com")
        self.ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Administrador")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
