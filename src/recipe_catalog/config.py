"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_INGREDIENT_KEYWORDS = "ingredient,protein,veggie,carb,dairy"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    image_bucket: str = "recipe-images"
    ingredient_group_keywords: str = DEFAULT_INGREDIENT_KEYWORDS
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_keywords(raw: str | None) -> tuple[str, ...]:
    """Parse the comma-separated ingredient group keywords."""
    if raw is None:
        raw = DEFAULT_INGREDIENT_KEYWORDS
    keywords = []
    for chunk in raw.split(","):
        value = chunk.strip().lower()
        if value and value not in keywords:
            keywords.append(value)
    return tuple(keywords)
