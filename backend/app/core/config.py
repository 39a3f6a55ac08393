from functools import lru_cache
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _ensure_sqlalchemy_postgres_scheme(value: str) -> str:
    if not value.lower().startswith("postgres"):
        return value

    parsed = urlparse(value)
    scheme = parsed.scheme.lower()

    if scheme == "postgres":
        scheme = "postgresql"

    if scheme == "postgresql":
        scheme = "postgresql+psycopg"

    if scheme not in {"postgresql+psycopg", "postgresql+asyncpg"}:
        scheme = "postgresql+psycopg"

    query_params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    query_params.setdefault("sslmode", "require")
    query_params.setdefault("target_session_attrs", "read-write")
    new_query = urlencode(query_params, doseq=True)

    return urlunparse(parsed._replace(scheme=scheme, query=new_query))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    database_url: AnyUrl | str = Field(
        default="sqlite:///../data/storefront.db",
        description="SQLAlchemy compatible database URL",
    )
    supabase_db_url: AnyUrl | str | None = Field(
        default=None,
        description="Supabase pooled Postgres connection string for production runs",
    )
    ticketing_base_url: AnyUrl = Field(
        default="https://api.xs2event.com/v1",
        description="Base URL for the upstream ticketing API",
    )
    ticketing_api_key: str | None = Field(
        default=None,
        description="API key sent as X-Api-Key to the ticketing API",
    )
    ticketing_events_path: str = Field(
        default="/events",
        description="Relative path for the events list endpoint",
    )
    ticketing_tickets_path: str = Field(
        default="/tickets",
        description="Relative path for the tickets list endpoint",
    )
    ticketing_categories_path: str = Field(
        default="/categories",
        description="Relative path for the ticket categories endpoint",
    )
    ticketing_page_size: int = Field(
        default=100, description="Number of events requested per upstream page", ge=1
    )
    ticket_page_size: int = Field(
        default=500, description="Number of tickets requested per upstream page", ge=1
    )
    max_pages: int = Field(
        default=100,
        description="Hard cap on pages followed by a single pagination chain",
        ge=1,
    )
    cache_ttl_seconds: float = Field(
        default=300.0,
        description="Seconds an upstream page stays in the response cache",
        gt=0,
    )
    default_popular_sports: list[str] | str = Field(
        default_factory=lambda: ["formula1", "football", "tennis", "motogp"],
        description=(
            "Sports fetched when no filter is selected. Product policy, not derived "
            "from data; comma-separated string or list."
        ),
    )
    request_timeout: float | None = Field(
        default=None,
        description="Per-request timeout in seconds; unset keeps the transport default",
    )
    session_ttl_seconds: float = Field(
        default=1800.0,
        description="Seconds an idle filter session keeps its aggregator",
        gt=0,
    )
    max_sessions: int = Field(
        default=1000,
        description="Most filter sessions kept at once; the least recently used is dropped first",
        ge=1,
    )

    @field_validator("database_url", "supabase_db_url", mode="before")
    @classmethod
    def _normalize_postgres_urls(cls, value: Any) -> Any:
        if value is None or not isinstance(value, str):
            return value

        if value.startswith("postgresql+psycopg://") or value.startswith(
            "postgresql+asyncpg://"
        ):
            return value

        if value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://") :]
        return value

    @field_validator("default_popular_sports", mode="after")
    @classmethod
    def _parse_popular_sports(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [
                item.lower()
                for item in (part.strip() for part in value.split(","))
                if item
            ]
        if isinstance(value, (list, tuple, set)):
            return [str(item).strip().lower() for item in value if str(item).strip()]
        raise ValueError(
            "DEFAULT_POPULAR_SPORTS must be provided as a list or comma-separated string"
        )

    @property
    def resolved_database_url(self) -> str:
        if self.environment.lower() == "production":
            if not self.supabase_db_url:
                raise ValueError(
                    "SUPABASE_DB_URL must be set when ENVIRONMENT=production"
                )
            return _ensure_sqlalchemy_postgres_scheme(str(self.supabase_db_url))
        return _ensure_sqlalchemy_postgres_scheme(str(self.database_url))

    @property
    def ticketing_api_root(self) -> str:
        """Base URL with exactly one trailing slash, for relative joins."""

        return str(self.ticketing_base_url).rstrip("/") + "/"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
