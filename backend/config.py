from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"

    # App URLs
    BACKEND_URL: str = "http://localhost:8000"
    FRONTEND_URL: str = "http://localhost:3000"

    # Room defaults (applied when a create request leaves them out)
    DEFAULT_TIMEZONE: str = "UTC"
    DEFAULT_ROTATION_POLICY: str = "round_robin"
    DEFAULT_ROTATION_INTERVAL_SEC: int = 60

    # Socket.IO keep-alive: engine.io pings detect dead viewers
    SOCKET_PING_INTERVAL: int = 25
    SOCKET_PING_TIMEOUT: int = 20

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
