"""
Configuration settings for modeller.

Uses Pydantic Settings to load environment variables for the database
connection bootstrap and logging. Credentials have no defaults on purpose:
`connect()` refuses to build a pool unless user, password and database are set.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from psycopg.conninfo import make_conninfo
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("127.0.0.1", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: Optional[str] = Field(None, alias="DB_USER")
    db_password: Optional[str] = Field(None, alias="DB_PASSWORD")
    db_name: Optional[str] = Field(None, alias="DB_NAME")

    # Pool
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    db_connect_attempts: int = Field(3, alias="DB_CONNECT_ATTEMPTS")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def missing_credentials(self) -> list[str]:
        """Names of the connection settings that still need a value."""
        required = {"DB_USER": self.db_user, "DB_PASSWORD": self.db_password, "DB_NAME": self.db_name}
        return [name for name, value in required.items() if not value]

    def conninfo(self) -> str:
        """Compose a libpq key/value connection string; values are quoted as needed."""
        return make_conninfo(
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            dbname=self.db_name,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
