"""Application settings and configuration constants.

This module contains application settings, constants, and configuration
values for the Ziria avatar and skin rendering service.
"""

from logging import INFO, Formatter, Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr
from pydantic_settings.main import BaseSettings, SettingsConfigDict
from redis.asyncio.connection import SSLConnection

ENV_FILE = Path(__file__).parent.parent.parent / ".env"

# --- Constants ---
AVATAR_BASE_SIZE = 8
AVATAR_MAX_SIZE = 512
SKIN_BASE_SIZE = 64
SKIN_MAX_SIZE = 512

# Standard 64x64 skin texture layout (x, y, width, height)
FACE_REGION = (8, 8, 8, 8)
HELM_REGION = (40, 8, 8, 8)

# Fixed encoder configuration, the compact codec depends on it
PNG_COMPRESS_LEVEL = 6

# Response constants
USER_NOT_FOUND = "User not found!"
SKIN_NOT_FOUND = "Skin not found!"


class Settings(BaseSettings):
    """Application settings with validation and default values."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Ziria"
    DEBUG: bool = False

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE: str = "logs/ziria.log"

    # Redis Configuration (optional, falls back to in-memory)
    REDIS_ENABLED: bool = False
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_USERNAME: str | None = None
    REDIS_PASSWORD: str | None = None
    REDIS_SSL: bool = False

    # Administration
    CLEAR_CACHE_PASSWORD: SecretStr = SecretStr("")

    # Upstream account services
    MOJANG_API_URL: str = "https://api.mojang.com"
    SESSION_SERVER_URL: str = "https://sessionserver.mojang.com"
    UPSTREAM_TIMEOUT: float = 10.0  # seconds

    # Responses
    CACHE_CONTROL_MAX_AGE: int = 1200  # 20 minutes
    SERVER_HEADER: str = "Ziria"

    # Monitoring
    ENABLE_METRICS: bool = True


settings = Settings()


class RedisConfig(BaseSettings):
    """Redis connection pool configuration."""

    model_config = SettingsConfigDict(env_prefix="REDIS_", case_sensitive=False, extra="ignore")

    host: str = settings.REDIS_HOST
    port: int = settings.REDIS_PORT
    db: int = settings.REDIS_DB
    username: str | None = settings.REDIS_USERNAME
    password: str | None = settings.REDIS_PASSWORD
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    socket_keepalive: bool = True
    health_check_interval: int = 30
    max_connections: int = 50
    # Cached values are compact PNG payloads, never text
    decode_responses: bool = False


class CacheConfig(BaseSettings):
    """Cache configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_", case_sensitive=False, extra="ignore")

    key_prefix: str = "ziria"
    max_locks: int = 10_000


class LimiterConfig(BaseSettings):
    """Rate limiter (slowapi) configuration."""

    model_config = SettingsConfigDict(env_prefix="LIMITER_", case_sensitive=False, extra="ignore")

    default_limits: list[str] = ["600/minute"]
    headers_enabled: bool = False
    enabled: bool = True


def _pool_kwargs() -> dict[str, Any]:
    kwargs = RedisConfig().model_dump()
    if settings.REDIS_SSL:
        # redis-py selects the SSL connection class from the pool kwargs
        kwargs["connection_class"] = SSLConnection
    return kwargs


pool_kwargs = _pool_kwargs()


def file_logger(logger: Logger) -> Logger:
    """
    Attach the shared rotating file handler to a logger when enabled.

    Args:
        logger: Standard library logger (typically ``getLogger(__name__)``).

    Returns:
        The same logger, for one-line module setup.
    """
    if not settings.LOG_TO_FILE:
        return logger

    log_file = Path(settings.LOG_FILE)
    if any(
        isinstance(h, RotatingFileHandler) and Path(h.baseFilename) == log_file.resolve()
        for h in logger.handlers
    ):
        return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
    handler.setLevel(INFO)
    handler.setFormatter(Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
