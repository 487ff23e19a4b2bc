# maonamassa/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Everything has a development default, so the API boots with no .env.
    In production at least set:
      - JWT_SECRET (HS256 signing secret for bearer tokens)
      - DATABASE_URL (SQLAlchemy URL of the record store)

    Lifecycle hardening (off by default, matches the legacy API):
      - STRICT_STATUS_TRANSITIONS: reject non-adjacent contract status moves
      - STRICT_RATING: only rate finished contracts, and only once
    """

    PROJECT_NAME: str = "Mão na Massa API"
    API_PREFIX: str = ""

    # Record store
    DATABASE_URL: str = "sqlite:///./maonamassa.db"
    # Optional json-server style db.json loaded into an empty store on startup
    SEED_FILE: str | None = None

    # Bearer tokens
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    PASSWORD_MIN_LENGTH: int = 4

    STRICT_STATUS_TRANSITIONS: bool = False
    STRICT_RATING: bool = False

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
