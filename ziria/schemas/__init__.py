from ziria.schemas.cache import (
    CacheClearResponse,
    CacheHealthResponse,
    CacheStatisticsData,
    HealthCheckResponse,
)
from ziria.schemas.identity import ById, ByName, IdentityRef, parse_identifier
from ziria.schemas.render import RenderKind, RequestVariant

__all__ = [
    "CacheClearResponse",
    "CacheHealthResponse",
    "CacheStatisticsData",
    "HealthCheckResponse",
    "ById",
    "ByName",
    "IdentityRef",
    "parse_identifier",
    "RenderKind",
    "RequestVariant",
]
