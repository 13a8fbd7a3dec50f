"""Client Configuration - API base URL, timeout and credential slot location."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings; env vars are prefixed with STOREFRONT_."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_", env_file=".env", extra="ignore",
    )

    # Aliased fields skip env_prefix, so the env name is spelled out
    api_base_url: str = Field(
        default="http://localhost:5001/api",
        validation_alias=AliasChoices("STOREFRONT_API_URL", "api_base_url"),
    )
    timeout_seconds: float = 10.0
    token_path: Path = Path.home() / ".storefront" / "credentials.json"
    token_key: str = "token"
    login_path: str = "/login"
