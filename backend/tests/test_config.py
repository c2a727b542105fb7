"""Tests for settings parsing and limit handling"""
from app.config import Settings
from app.services.session_service import SessionService


def test_cors_origins_list():
    settings = Settings(cors_origins="http://a.test, http://b.test")
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    monkeypatch.setenv("MAX_LIST_LIMIT", "7")

    settings = Settings()
    assert settings.database_url == "sqlite:///./other.db"
    assert settings.max_list_limit == 7


def test_limit_clamping():
    assert SessionService._clamp_limit(None, 20) == 20
    assert SessionService._clamp_limit(0, 20) == 20
    assert SessionService._clamp_limit(-3, 10) == 10
    assert SessionService._clamp_limit(5, 20) == 5
    assert SessionService._clamp_limit(10_000, 20) == 100
