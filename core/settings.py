import json
import os
import secrets

from typing import Optional

from pydantic import PostgresDsn, field_validator
from pydantic.fields import computed_field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


class Settings(BaseSettings):

    SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    SERVER_ADDRESS: str = "0.0.0.0"
    SERVER_PORT: int = int(os.getenv("PORT", 8000))
    BACKEND_CORS_ORIGINS: list[str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            if v.startswith("["):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    raise ValueError(v) from None
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    FRONTEND_URL: Optional[str] = None
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_POOL_SIZE: int = 50
    POSTGRES_MAX_OVERFLOW: int = 0
    SQLITE_FALLBACK_URL: str = "sqlite+aiosqlite:///./what2play.db"

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if "DATABASE_URL" in os.environ:
            db_url = os.environ["DATABASE_URL"]
            # Convert postgresql:// to postgresql+psycopg:// for compatibility
            if db_url.startswith("postgresql://") and "+psycopg" not in db_url:
                db_url = db_url.replace("postgresql://", "postgresql+psycopg://")
            return db_url

        if not all([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_SERVER, self.POSTGRES_DB]):
            return self.SQLITE_FALLBACK_URL

        return str(
            PostgresDsn.build(
                scheme="postgresql+psycopg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                path=f"{self.POSTGRES_DB or ''}",
            )
        )

    # Cookie
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"

    # Game catalog (IGDB via Twitch OAuth)
    TWITCH_CLIENT_ID: Optional[str] = None
    TWITCH_CLIENT_SECRET: Optional[str] = None
    TWITCH_TOKEN_URL: str = "https://id.twitch.tv/oauth2/token"
    IGDB_BASE_URL: str = "https://api.igdb.com/v4"
    CATALOG_TIMEOUT_SECONDS: float = 10.0
    CATALOG_SEARCH_LIMIT: int = 20
    CATALOG_RANDOM_LIMIT: int = 10
    CATALOG_TOKEN_REFRESH_MARGIN_SECONDS: int = 300

    WATCH_FILES: bool = False
    LOG_LEVEL: str = "info"  # Logging level: critical, error, warning, info, debug, trace

    class Config:
        env_file = "local.env"
        case_sensitive = True
        extra = "allow"
        env_ignore_empty = True

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, dotenv_settings

settings = Settings()
