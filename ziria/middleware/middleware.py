# ziria/middleware/middleware.py
"""
Middleware components for the rendering service.

This module contains middleware for request logging, CORS handling and
response headers, plus the lifespan event handler that builds the cache
store, the upstream client and the render service, and tears them down.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ziria.clients.mojang_client import MojangClient
from ziria.configs import settings
from ziria.managers.cache_store import CacheStore
from ziria.monitoring import bind_request_id, clear_context, get_logger
from ziria.services.render import RenderService
from ziria.utils.helpers import get_summary, host

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Manage application startup and shutdown events with service initialization."""
    # Startup
    logger.info(f"Starting {app.title}...")

    try:
        cache_store = CacheStore()
        await cache_store.initialize()
        app.state.cache_store = cache_store

        mojang_client = MojangClient()
        app.state.mojang_client = mojang_client

        # The Mojang client is both the identity resolver and the texture source
        app.state.render_service = RenderService(cache_store, mojang_client, mojang_client)

        logger.info("Services initialized successfully", cache_backend=cache_store.backend)
        logger.info("  - Health Check: http://localhost:8000/health")
        if settings.ENABLE_METRICS:
            logger.info("  - Metrics: http://localhost:8000/metrics")

    except Exception:
        logger.exception("Failed to initialize services")
        raise

    yield

    # Shutdown
    logger.info(f"Shutting down {app.title}...")

    try:
        await mojang_client.close()
        await cache_store.shutdown()
        logger.info("Services cleaned up successfully")

    except Exception:
        logger.exception("Error during service cleanup")


def configure_cors(app: FastAPI) -> None:
    """Images are public and read-only, so any origin may GET them."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request summary and timing information under a request ID."""

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        bind_request_id(request_id)

        start_time = perf_counter()
        route_info = get_summary(request) or f"{request.method} {request.url.path}"
        logger.info(f"Request: {route_info}", ip=host(request))

        try:
            response = await call_next(request)
        finally:
            clear_context()

        duration = perf_counter() - start_time
        logger.info(
            f"Response: {response.status_code} for {request.method} {request.url.path}",
            duration=f"{duration:.3f}s",
            request_id=request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to all responses."""

        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
