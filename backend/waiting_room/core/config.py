"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.

Per-queue concurrency limits live in QUEUE_MANAGEMENT, a JSON object
mapping queue name to the number of clients allowed to proceed at once:

    QUEUE_MANAGEMENT='{"checkout": 2, "report-export": 5}'
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Waiting Room API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: int = 5

    # Queue store: "redis" or "memory" (single process only)
    QUEUE_STORE_BACKEND: str = "redis"
    QUEUE_KEY_PREFIX: str = "queue:"
    QUEUE_ENTRY_TTL_SECONDS: int = Field(1800, gt=0)  # 30 minutes

    # Admission
    DEFAULT_MAX_CONCURRENT: int = Field(1, ge=1)
    QUEUE_MANAGEMENT: dict[str, int] = {}
    STRICT_ADMISSION: bool = False

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
