import json
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = Field(default="local", alias="ENV")

    cors_origins: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")

    # ─────────────────────────────────────────────
    # TMDB upstream
    # ─────────────────────────────────────────────
    tmdb_api_key: str = Field(alias="TMDB_API_KEY")
    tmdb_base_url: str = Field(default="https://api.themoviedb.org/3", alias="TMDB_BASE_URL")
    tmdb_image_base_url: str = Field(default="https://image.tmdb.org/t/p", alias="TMDB_IMAGE_BASE_URL")
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")

    # ─────────────────────────────────────────────
    # Request cache
    # ─────────────────────────────────────────────
    cache_ttl_seconds: float = Field(default=300.0, alias="CACHE_TTL_SECONDS")
    cache_max_entries: int | None = Field(default=1000, alias="CACHE_MAX_ENTRIES")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("tmdb_base_url", "tmdb_image_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        return value.strip().rstrip("/")

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("CACHE_TTL_SECONDS must be greater than 0")
        return value

    @field_validator("cache_max_entries", mode="before")
    @classmethod
    def normalize_cache_max_entries(cls, value: object) -> object:
        # An empty value in .env means "no cap".
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cache_max_entries")
    @classmethod
    def validate_cache_max_entries(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("CACHE_MAX_ENTRIES must be greater than 0 when set")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        cleaned = value.strip().upper()
        if cleaned not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {value!r}")
        return cleaned

    def cors_origin_list(self) -> list[str]:
        raw = (self.cors_origins or "").strip()
        if not raw:
            return []

        values: list[str]
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                values = [str(v) for v in parsed if isinstance(v, str)]
            else:
                values = [raw]
        else:
            values = raw.split(",")

        normalized: list[str] = []
        seen: set[str] = set()
        for value in values:
            cleaned = value.strip().strip("\"'")
            if not cleaned:
                continue
            # CORS origins are scheme + host (+ optional port) with no path slash.
            if cleaned != "*" and cleaned.endswith("/"):
                cleaned = cleaned.rstrip("/")
            if cleaned in seen:
                continue
            seen.add(cleaned)
            normalized.append(cleaned)

        return normalized


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

settings = Settings()
