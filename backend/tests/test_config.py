import pytest

from study_planner.config import Settings


def test_missing_database_url_fails_fast(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL must be set"):
        Settings()


def test_blank_database_url_is_rejected(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "   ")
    with pytest.raises(RuntimeError):
        Settings()


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///planner.db")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ALLOW_DEV_CORS", "false")
    s = Settings()
    assert s.DATABASE_URL == "sqlite:///planner.db"
    assert s.LOG_LEVEL == "DEBUG"
    assert s.ALLOW_DEV_CORS is False
    assert s.DB_ECHO is False
