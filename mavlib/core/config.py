"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


DEFAULT_GENRES = [
    "Romance",
    "Animation",
    "Adventure",
    "Comics",
    "Articles",
    "History",
    "Science",
    "Fantasy",
    "Biography",
    "Fiction",
    "Mystery",
    "Horror",
    "Poetry",
    "Children",
    "Science Fiction",
]


class Settings(BaseSettings):
    """Application settings."""

    # Lending rules
    loan_period_days: int = 14
    renewal_period_days: int = 14
    max_renewals: int = 2
    overdue_sweep_interval_seconds: float = 3600.0
    due_soon_days: int = 7

    # Search / reports
    search_quick_list_limit: int = 15
    recommendation_limit: int = 4

    # Catalog ingestion
    catalog_source: Literal["remote", "bundled"] = "remote"
    catalog_base_url: str = "https://openlibrary.org"
    catalog_genres: list[str] = DEFAULT_GENRES
    catalog_books_per_genre: int = 10
    catalog_default_copies: int = 5
    catalog_fetch_timeout: float = 10.0

    # Sessions
    session_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379"
    session_ttl_minutes: int = 60 * 24
    login_max_attempts: int = 5
    login_lockout_minutes: int = 15

    model_config = {"env_file": ".env", "env_prefix": "MAVLIB_"}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
