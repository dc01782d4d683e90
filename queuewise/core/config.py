# queuewise/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "QueueWise Clinic API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:9002", "http://127.0.0.1:9002"]

    JWT_SECRET: str = Field(...)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # full URL wins over the DB_* parts (tests point this at sqlite+aiosqlite)
    DATABASE_URL: str | None = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "queuewise"
    DB_PASSWORD: str = ""
    DB_NAME: str = "queuewise"

    # single canonical timezone for day keys and ticket expiry
    BOOKING_TIMEZONE: str = "Africa/Cairo"
    INVITE_EXPIRY_DAYS: int = 7

    # rate limiting; no REDIS_URL means per-process counters
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_BOOKING: int = 5
    RATE_LIMIT_SEARCH: int = 10
    RATE_LIMIT_QUEUE_COUNT: int = 30
    RATE_LIMIT_ADMIN: int = 20

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")

    @property
    def rate_limits(self) -> dict[str, int]:
        return {
            "booking": self.RATE_LIMIT_BOOKING,
            "search": self.RATE_LIMIT_SEARCH,
            "queue-count": self.RATE_LIMIT_QUEUE_COUNT,
            "admin": self.RATE_LIMIT_ADMIN,
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
