from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    GEMINI_API_KEY: Optional[SecretStr] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    DRINKS_FILE: Path = Path("data/drinks.json")
    RECOMMENDATION_HISTORY_LIMIT: int = Field(default=20, ge=1)
    MAX_OUTPUT_TOKENS: int = Field(default=200, ge=1)
    JPEG_QUALITY: int = Field(default=80, ge=1, le=95)
    RECENT_DRINKS_COUNT: int = Field(default=3, ge=0)

    def gemini_api_key(self) -> str:
        if self.GEMINI_API_KEY is None:
            return ""
        return self.GEMINI_API_KEY.get_secret_value().strip()


settings = Settings()
