"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import (  # noqa: E402
    auth,
    authors,
    books,
    categories,
    comments,
    favorites,
    reading_history,
    series,
    site_settings,
    users,
)
from db import Database  # noqa: E402
from domain.errors import CatalogError, FieldError, ValidationError  # noqa: E402
from services.auth import AuthService  # noqa: E402
from services.bootstrap import seed  # noqa: E402
from services.health import HealthMonitor  # noqa: E402
from services.sessions import SessionStore  # noqa: E402
from settings import Settings  # noqa: E402

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    # Drop the "body"/"query"/"path" prefix pydantic puts in front of the field
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _error_message(error: dict) -> str:
    message = error.get("msg", "Invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(
            "Validation failed",
            [FieldError(_field_name(e.get("loc", ())), _error_message(e)) for e in exc.errors()],
        )
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(settings: Optional[Settings] = None, start_monitor: bool = True) -> FastAPI:
    """Build the application and its service objects.

    The database, session store and health monitor live on ``app.state`` and are
    started and stopped by the startup/shutdown hooks.
    """
    settings = settings or Settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Library Catalog API",
        description="Books, authors, categories, series, readers and their comments",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.sessions = SessionStore(settings.SESSION_TTL_SECONDS)
    app.state.auth = AuthService(app.state.sessions)
    app.state.health = HealthMonitor(app.state.database, settings.HEALTH_CHECK_INTERVAL)

    # Credentials (the session cookie) require explicit origins
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        if request.url.path.startswith("/api"):
            logger.info("%s %s %s in %.0fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(users.admin_router, prefix="/api/admin/users", tags=["users"])
    app.include_router(comments.book_comments_router, prefix="/api/books", tags=["comments"])
    app.include_router(books.router, prefix="/api/books", tags=["books"])
    app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
    app.include_router(authors.router, prefix="/api/authors", tags=["authors"])
    app.include_router(series.router, prefix="/api/series", tags=["series"])
    app.include_router(favorites.router, prefix="/api/favorites", tags=["favorites"])
    app.include_router(reading_history.router, prefix="/api/reading-history", tags=["reading-history"])
    app.include_router(comments.router, prefix="/api/comments", tags=["comments"])
    app.include_router(comments.admin_router, prefix="/api/admin/comments", tags=["comments"])
    app.include_router(site_settings.router, prefix="/api/settings", tags=["settings"])

    @app.on_event("startup")
    def startup_event():
        """Connect to the database, create tables, seed first-run data."""
        database: Database = app.state.database
        database.connect()
        database.init_schema()
        with database.session() as session:
            seed(session, settings)
        app.state.health.check()
        if start_monitor:
            app.state.health.start()

    @app.on_event("shutdown")
    def shutdown_event():
        app.state.health.stop()
        app.state.sessions.clear()
        app.state.database.dispose()

    @app.get("/api/health")
    def health():
        """Health check endpoint."""
        monitor: HealthMonitor = app.state.health
        connected = monitor.check()
        return JSONResponse(
            status_code=200 if connected else 503,
            content={
                "status": "ok" if connected else "degraded",
                "database": "connected" if connected else "disconnected",
                "lastCheck": monitor.last_check.isoformat() if monitor.last_check else None,
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    return app


app = create_app()
