# ziria/routes/admin.py
"""Administrative cache flush."""

from hmac import compare_digest
from logging import getLogger

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_403_FORBIDDEN

from ziria.configs import file_logger, settings
from ziria.dependencies import CacheDep
from ziria.managers import limiter
from ziria.schemas import CacheClearResponse
from ziria.utils.helpers import host

logger = file_logger(getLogger(__name__))

router = APIRouter(tags=["🔧 Admin"])


def password_matches(candidate: str) -> bool:
    """Constant-time check against the configured password; an empty one never matches."""
    expected = settings.CLEAR_CACHE_PASSWORD.get_secret_value()
    if not expected:
        return False
    return compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


@router.get(
    "/clear_cache/{password}",
    summary="Flush the whole cache",
    response_model=CacheClearResponse,
    response_class=ORJSONResponse,
    include_in_schema=False,
)
@limiter.limit("5/hour")
async def clear_cache(request: Request, password: str, store: CacheDep) -> ORJSONResponse:
    """
    Wipe every cached image.

    There is no other eviction; entries otherwise live until this is called.
    """
    if not password_matches(password):
        logger.warning(f"Rejected cache flush from ip: {host(request)}")
        response = CacheClearResponse(status="error", message="Wrong password!")
        return ORJSONResponse(content=response.model_dump(), status_code=HTTP_403_FORBIDDEN)

    await store.flush_all()
    response = CacheClearResponse(status="success", message="Cache cleared!")
    return ORJSONResponse(content=response.model_dump())
