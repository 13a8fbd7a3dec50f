"""Settings - environment-driven defaults and derived policy."""

import pytest

from app.config import (
    DEVELOPMENT_ORIGINS, PRODUCTION_ORIGINS, Environment, Settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "NODE_ENV", "APP_ENV", "ENVIRONMENT", "CORS_ORIGINS", "PORT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings(_env_file=None)
    assert settings.port == 5000
    assert settings.environment is Environment.DEVELOPMENT
    assert settings.api_rate_limit == 200
    assert settings.image_rate_limit == 500
    assert settings.rate_limit_window_seconds == 900
    assert settings.max_body_bytes == 10 * 1024 * 1024
    assert settings.allowed_origins == DEVELOPMENT_ORIGINS
    assert settings.expose_error_detail is True


def test_node_env_production(clean_env):
    clean_env.setenv("NODE_ENV", "Production")
    settings = Settings(_env_file=None)
    assert settings.is_production
    assert settings.expose_error_detail is False
    assert settings.allowed_origins == PRODUCTION_ORIGINS


def test_unknown_environment_falls_back_to_development(clean_env):
    clean_env.setenv("NODE_ENV", "staging")
    assert Settings(_env_file=None).environment is Environment.DEVELOPMENT


def test_port_from_env(clean_env):
    clean_env.setenv("PORT", "8080")
    assert Settings(_env_file=None).port == 8080


def test_cors_override(clean_env):
    clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    assert Settings(_env_file=None).allowed_origins == [
        "https://a.example", "https://b.example",
    ]


def test_database_url_built_from_db_fields(clean_env):
    settings = Settings(_env_file=None)
    assert settings.resolved_database_url == "mysql+aiomysql://root@localhost:3306/pwa_ecommerce"
    assert settings.server_url == "mysql+aiomysql://root@localhost:3306"


def test_database_password_is_kept(clean_env):
    settings = Settings(_env_file=None, db_password="s3cret", db_host="db")
    assert settings.resolved_database_url == "mysql+aiomysql://root:s3cret@db:3306/pwa_ecommerce"


def test_database_url_overrides_fields(clean_env):
    settings = Settings(_env_file=None, database_url="sqlite+aiosqlite:///x.db")
    assert settings.resolved_database_url == "sqlite+aiosqlite:///x.db"
