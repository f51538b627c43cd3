from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Refurb Inventory ERP"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Security / caller identity
    # ==============================
    API_KEYS: Optional[str] = None
    API_KEY_HEADER: str = "X-API-Key"
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None
    AUTH_REQUIRED: bool = False
    DEFAULT_ACTOR: str = "anonymous"

    # ==============================
    # Listing
    # ==============================
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    # ==============================
    # Stock rules
    # ==============================
    LOW_STOCK_THRESHOLD: int = 10
    ATTENTION_DAYS: int = 90
    RECENT_ARRIVAL_DAYS: int = 30

    # ==============================
    # Reference catalog
    # ==============================
    SEED_REFERENCE_DATA: bool = True


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
