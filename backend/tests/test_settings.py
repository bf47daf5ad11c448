import pytest

from settings import Settings, _as_bool, _as_list


def test_as_bool_accepts_common_truthy_values():
    for val in ("1", "true", "TRUE", "yes", "on"):
        assert _as_bool(val) is True
    assert _as_bool("0") is False
    assert _as_bool(None) is False
    assert _as_bool(None, default=True) is True


def test_as_list_splits_and_trims():
    assert _as_list("http://a.com, http://b.com ,") == ["http://a.com", "http://b.com"]
    assert _as_list(None) == []


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DB_MAX_RETRIES", "7")
    monkeypatch.setenv("COOKIE_SECURE", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = Settings()
    assert s.DB_MAX_RETRIES == 7
    assert s.COOKIE_SECURE is True
    assert s.LOG_LEVEL == "DEBUG"


def test_settings_defaults(monkeypatch):
    for key in ("SESSION_COOKIE_NAME", "DB_MAX_RETRIES", "HEALTH_CHECK_INTERVAL", "ADMIN_EMAIL"):
        monkeypatch.delenv(key, raising=False)
    s = Settings()
    assert s.SESSION_COOKIE_NAME == "catalog_session"
    assert s.DB_MAX_RETRIES == 5
    assert s.HEALTH_CHECK_INTERVAL == 30
    assert s.ADMIN_EMAIL == "admin@elexandria.com"


def test_settings_overrides():
    s = Settings(DATABASE_URL="sqlite:///x.db", DB_MAX_RETRIES=2)
    assert s.DATABASE_URL == "sqlite:///x.db"
    assert s.DB_MAX_RETRIES == 2
    assert s.is_sqlite


def test_unknown_override_rejected():
    with pytest.raises(AttributeError):
        Settings(NOT_A_SETTING=1)
