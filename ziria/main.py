# ziria/main.py

"""Ziria - Minecraft avatar and skin rendering with a compact image cache."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from ziria.configs import settings
from ziria.dependencies import CacheDep
from ziria.errors import (
    CacheExceptionError,
    RenderError,
    cache_exception_handler,
    render_exception_handler,
    validation_exception_handler,
)
from ziria.managers import limiter, rate_limit_exceeded_handler
from ziria.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from ziria.monitoring import setup_monitoring
from ziria.routes import admin_router, render_router
from ziria.schemas import CacheHealthResponse, HealthCheckResponse
from ziria.utils.helpers import today_str

app = FastAPI(
    title=settings.APP_NAME,
    description="Avatar and skin rendering API",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

setup_monitoring(app)
configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
# Middleware to tell FastAPI it is behind a reverse proxy
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


routes = [render_router, admin_router]

_ = [app.include_router(router) for router in routes]

errors = [
    (RenderError, render_exception_handler),
    (CacheExceptionError, cache_exception_handler),
    (RateLimitExceeded, rate_limit_exceeded_handler),
    (RequestValidationError, validation_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

app.state.limiter = limiter
limiter: Limiter = app.state.limiter


@app.get(
    "/",
    tags=["🏠 Root"],
    summary="Root access",
    response_class=Response,
    operation_id="root_access",
)
@limiter.exempt
async def root(request: Request) -> Response:
    """Liveness probe: an empty 200 response."""
    return Response(status_code=200, headers={"Server": settings.SERVER_HEADER})


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01 12:00:00",
                        "cache": {"backend": "redis", "status": "healthy"},
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
@limiter.exempt
async def health_check(request: Request, store: CacheDep) -> ORJSONResponse:
    """
    Health check endpoint with cache status.

    Parameters
    ----------
    request : Request
        Current request context.
    store : CacheStore
        The shared cache store.

    Returns
    -------
    ORJSONResponse
        Overall status plus cache backend, statistics and health.

    Examples
    --------
    Request
        GET /health
    Response
        200 OK
        {"version": "1.0.0", "status": "ok", "timestamp": "...", "cache": { ... }}
    """
    cache = CacheHealthResponse(**await store.health_check())
    response = HealthCheckResponse(
        version=app.version,
        status="ok" if cache.status == "healthy" else "degraded",
        timestamp=today_str(),
        cache=cache,
    )
    return ORJSONResponse(response.model_dump())


if __name__ == "__main__":
    from uvicorn import run

    run(
        app,
        host="127.0.0.1",
        port=8000,
        log_level="info",
        server_header=False,
    )
