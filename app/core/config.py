# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string, or sqlite:// for local runs)
      - JWT_SECRET (signing secret shared with the identity provider)

    Optional:
      - GUEST_CART_COOKIE / GUEST_CART_MAX_AGE (anonymous cart storage)
      - DB_POOL_SIZE (connections kept per process)
    """

    PROJECT_NAME: str = "Storefront Cart API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str
    DB_POOL_SIZE: int = 5

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Anonymous cart lives on the visitor's device under this cookie
    GUEST_CART_COOKIE: str = "guestCart"
    GUEST_CART_MAX_AGE: int = 60 * 60 * 24 * 30

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
