from ziria.configs.settings import (
    AVATAR_BASE_SIZE,
    AVATAR_MAX_SIZE,
    FACE_REGION,
    HELM_REGION,
    PNG_COMPRESS_LEVEL,
    SKIN_BASE_SIZE,
    SKIN_MAX_SIZE,
    CacheConfig,
    LimiterConfig,
    RedisConfig,
    file_logger,
    pool_kwargs,
    settings,
)

__all__ = [
    "AVATAR_BASE_SIZE",
    "AVATAR_MAX_SIZE",
    "FACE_REGION",
    "HELM_REGION",
    "PNG_COMPRESS_LEVEL",
    "SKIN_BASE_SIZE",
    "SKIN_MAX_SIZE",
    "CacheConfig",
    "LimiterConfig",
    "RedisConfig",
    "file_logger",
    "pool_kwargs",
    "settings",
]
