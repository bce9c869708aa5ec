from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheStatisticsData(BaseModel):
    """Cache statistics model."""

    model_config = ConfigDict(ser_json_timedelta="iso8601", ser_json_bytes="utf8")

    hits: int
    misses: int
    sets: int
    errors: int
    total_bytes_written: int
    total_bytes_read: int
    hit_rate: str
    total_requests: int
    created_at: str
    last_updated_at: str


class CacheHealthResponse(BaseModel):
    """Cache health response model (nested in HealthCheckResponse)."""

    model_config = ConfigDict(ser_json_timedelta="iso8601", ser_json_bytes="utf8")

    backend: str
    statistics: CacheStatisticsData
    status: str
    error: str | None = None
    info: dict[str, Any] | None = None


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    model_config = ConfigDict(ser_json_timedelta="iso8601", ser_json_bytes="utf8")

    version: str = Field(description="API version")
    status: str = Field(description="Overall health status")
    timestamp: str = Field(description="Current timestamp")
    cache: CacheHealthResponse = Field(description="Cache health information")


class CacheClearResponse(BaseModel):
    """Response of the administrative cache flush."""

    status: str
    message: str
