from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/chat.db"

    # Ignored for SQLite, which runs without a connection pool.
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "info"

    STATIC_DIR: str = "public"
    CORS_ORIGINS: list[str] = ["*"]

    WS_SEND_QUEUE_SIZE: int = 256
    WS_SEND_TIMEOUT_SECONDS: float = 5.0

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
