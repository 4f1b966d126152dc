"""Configuration for the thread grouper, loaded from environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="THREAD_GROUPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_file_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Dump files larger than this are rejected before reading",
    )
    encoding: str = Field(default="utf-8", description="Encoding used to read dump files")
    log_level: str = Field(default="WARNING", description="Root log level for the CLI and server")


@lru_cache
def get_settings() -> Settings:
    return Settings()
