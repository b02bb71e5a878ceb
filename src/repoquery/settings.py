from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPOQUERY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    database_url: str = "sqlite+aiosqlite:///./repoquery.db"

    # Passed straight to create_async_engine(echo=...)
    echo_sql: bool = False

    log_level: str = "INFO"
    log_json: bool = False

    # Emit one DEBUG record per adapter operation (never includes bind values).
    log_queries: bool = False


def get_settings() -> Settings:
    return Settings()
