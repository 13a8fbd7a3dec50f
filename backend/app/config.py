"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) - single instance per process
    - Environment-dependent policy (origins, error detail) is derived here,
      never branched on ad hoc inside middleware

Design Decisions:
    - DB_* fields mirror the storefront's deployment env; DATABASE_URL overrides them
    - NODE_ENV still recognized so existing deploy manifests keep working
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

_SQL_DIR = Path(__file__).resolve().parent / "db"

DEVELOPMENT_ORIGINS = ["http://localhost:3000"]
PRODUCTION_ORIGINS = ["https://yourdomain.com"]


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Server settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV", "environment"),
    )

    # Database
    db_host: str = "localhost"
    db_user: str = "root"
    db_password: str = ""
    db_port: int = 3306
    db_name: str = "pwa_ecommerce"
    db_driver: str = "mysql+aiomysql"
    database_url: str | None = None
    database_pool_size: int = 10
    database_max_overflow: int = 5

    # Bootstrap
    bootstrap_on_startup: bool = True
    schema_script: Path = _SQL_DIR / "schema.sql"
    seed_script: Path = _SQL_DIR / "seeds.sql"

    # Gatekeeper
    cors_origins: str | None = None  # comma-separated; overrides the environment default
    rate_limit_window_seconds: int = 15 * 60
    api_rate_limit: int = 200
    image_rate_limit: int = 500
    rate_limit_storage_uri: str = "async+memory://"
    trusted_proxy_hops: int = 1
    max_body_bytes: int = 10 * 1024 * 1024
    upload_dir: Path = Path("uploads")

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v):
        """NODE_ENV values arrive in any case; unknown values fall back to development."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in {e.value for e in Environment}:
                return Environment.DEVELOPMENT
        return v

    @property
    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION

    @property
    def expose_error_detail(self) -> bool:
        return self.environment is Environment.DEVELOPMENT

    @property
    def allowed_origins(self) -> list[str]:
        if self.cors_origins:
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return list(PRODUCTION_ORIGINS if self.is_production else DEVELOPMENT_ORIGINS)

    @property
    def resolved_database_url(self) -> str:
        """DSN targeting the storefront database."""
        if self.database_url:
            return self.database_url
        return self._build_url(database=self.db_name)

    @property
    def server_url(self) -> str:
        """DSN for the database server with no database selected."""
        return self._build_url(database=None)

    def _build_url(self, database: str | None) -> str:
        url = URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=database,
        )
        return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()
