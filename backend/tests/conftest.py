import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from api.main import create_app  # noqa: E402
from db import Database  # noqa: E402
from settings import Settings  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'catalog.db'}",
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        ADMIN_EMAIL="admin@elexandria.com",
        HEALTH_CHECK_INTERVAL=3600,
        DB_INITIAL_RETRY_DELAY=0,
        CORS_ORIGINS=[],
        COOKIE_SECURE=False,
    )


@pytest.fixture
def database(settings):
    db = Database(settings)
    db.init_schema()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    with database.session() as s:
        yield s


@pytest.fixture
def app(settings):
    return create_app(settings, start_monitor=False)


@pytest.fixture
def client(app):
    """Anonymous client; entering the context runs the startup hooks."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_client(app, client):
    """Extra clients sharing the started app, each with its own cookie jar."""
    def _make() -> TestClient:
        return TestClient(app)

    return _make


def login(c: TestClient, username: str, password: str) -> dict:
    resp = c.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def register(c: TestClient, username: str, password: str = "secret1", **extra) -> dict:
    payload = {
        "name": extra.pop("name", username.title()),
        "username": username,
        "email": extra.pop("email", f"{username}@leitores.org"),
        "password": password,
    }
    payload.update(extra)
    resp = c.post("/api/auth/register", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def admin_client(make_client):
    c = make_client()
    login(c, ADMIN_USERNAME, ADMIN_PASSWORD)
    return c


@pytest.fixture
def user_client(make_client):
    c = make_client()
    register(c, "leitora")
    return c


@pytest.fixture
def catalog(admin_client):
    """A category, an author and one book created through the admin API."""
    category = admin_client.post("/api/categories", json={"name": "Ficção"}).json()
    author = admin_client.post("/api/authors", json={"name": "Autora X"}).json()
    book = admin_client.post(
        "/api/books",
        json={
            "title": "O Livro",
            "authorId": author["id"],
            "categoryId": category["id"],
            "description": "Uma história sobre livros.",
            "epubUrl": "https://cdn.elexandria.com/o-livro.epub",
        },
    ).json()
    return {"category": category, "author": author, "book": book}
