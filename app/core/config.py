from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Asset Desk"
    env: str = "dev"
    log_level: str = "INFO"

    # env: MONGO_URI / MONGO_DB
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "asset_desk"

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    # upper bounds for list reads against the remote collections
    tickets_page_limit: int = 500
    policies_page_limit: int = 100

    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
