# ziria/dependencies.py

"""Application dependencies, resolved from the objects built at start-up."""

from typing import Annotated

from fastapi import Depends, Request

from ziria.managers.cache_store import CacheStore
from ziria.services.render import RenderService


def get_cache_store(request: Request) -> CacheStore:
    """Dependency to get the shared cache store."""
    return request.app.state.cache_store


def get_render_service(request: Request) -> RenderService:
    """Dependency to get the shared render service."""
    return request.app.state.render_service


CacheDep = Annotated[CacheStore, Depends(get_cache_store)]
RenderDep = Annotated[RenderService, Depends(get_render_service)]
