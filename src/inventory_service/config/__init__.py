"""Application configuration loading helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    url: str
    pool_size: int = 10
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Store Inventory", alias="APP_NAME")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    timezone: str = Field(default="Europe/Moscow", alias="TZ")

    database_url: str = Field(default="sqlite:///./data/inventory.db", alias="DATABASE_URL")
    database_pool_size: int = Field(default=10, alias="DATABASE_POOL_SIZE")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    default_operator: str = Field(default="system", alias="DEFAULT_OPERATOR")
    expiry_warning_days: int = Field(default=30, ge=0, alias="EXPIRY_WARNING_DAYS")
    seed_demo_data: bool = Field(default=False, alias="SEED_DEMO_DATA")

    _database: DatabaseSettings = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:  # pragma: no cover - simple data wiring
        object.__setattr__(
            self,
            "_database",
            DatabaseSettings(
                url=self.database_url,
                pool_size=self.database_pool_size,
                echo=self.database_echo,
            ),
        )

    @property
    def database(self) -> DatabaseSettings:
        return self._database


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings", "DatabaseSettings"]
