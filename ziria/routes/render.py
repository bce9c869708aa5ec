# ziria/routes/render.py
"""Avatar and skin image endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from ziria.configs import AVATAR_BASE_SIZE, settings
from ziria.dependencies import RenderDep
from ziria.managers import limiter

router = APIRouter(tags=["🖼️ Render"])

RENDER_RATE_LIMIT = "600/minute"

PNG_RESPONSES: dict[int | str, dict] = {
    200: {"content": {"image/png": {}}, "description": "PNG image"},
    400: {"description": "Size out of bounds or not an allowed multiple"},
    404: {"description": "User or skin not found"},
}


def image_response(png: bytes) -> Response:
    """Wrap PNG bytes with the caching and server headers every image carries."""
    return Response(
        content=png,
        media_type="image/png",
        headers={
            "Cache-Control": f"max-age={settings.CACHE_CONTROL_MAX_AGE}",
            "Server": settings.SERVER_HEADER,
        },
    )


@router.get(
    "/avatar/{identifier}/{size}/{overlay}",
    summary="Render avatar",
    response_class=Response,
    responses=PNG_RESPONSES,
    operation_id="get_avatar",
)
@limiter.limit(RENDER_RATE_LIMIT)
async def get_avatar(
    request: Request,
    identifier: str,
    size: int,
    overlay: bool,
    renderer: RenderDep,
) -> Response:
    """
    Render the face of an account.

    Parameters
    ----------
    identifier : str
        Account id (plain or dashed) or display name.
    size : int
        Side length in pixels, a multiple of 8 between 8 and 512.
    overlay : bool
        Whether to composite the helmet layer over the face.

    Examples
    --------
    Request
        GET /avatar/Notch/64/true
    Response
        200 OK, image/png (64x64)
    """
    return image_response(await renderer.render_avatar(identifier, size, overlay=overlay))


@router.get(
    "/avatar/{identifier}",
    summary="Render avatar at base size",
    response_class=Response,
    responses=PNG_RESPONSES,
    operation_id="get_avatar_base",
)
@limiter.limit(RENDER_RATE_LIMIT)
async def get_avatar_base(request: Request, identifier: str, renderer: RenderDep) -> Response:
    """Render the 8x8 face of an account without its helmet layer."""
    return image_response(await renderer.render_avatar(identifier, AVATAR_BASE_SIZE))


@router.get(
    "/skin/{identifier}/{size}",
    summary="Render skin",
    response_class=Response,
    responses=PNG_RESPONSES,
    operation_id="get_skin",
)
@limiter.limit(RENDER_RATE_LIMIT)
async def get_skin(request: Request, identifier: str, size: int, renderer: RenderDep) -> Response:
    """
    Render the full skin texture of an account.

    Parameters
    ----------
    identifier : str
        Account id (plain or dashed) or display name.
    size : int
        Side length in pixels, a multiple of 64 between 64 and 512.
    """
    return image_response(await renderer.render_skin(identifier, size))


@router.get(
    "/skin/{identifier}",
    summary="Render skin at base size",
    response_class=Response,
    responses=PNG_RESPONSES,
    operation_id="get_skin_base",
)
@limiter.limit(RENDER_RATE_LIMIT)
async def get_skin_base(request: Request, identifier: str, renderer: RenderDep) -> Response:
    """Render the 64x64 skin texture of an account."""
    return image_response(await renderer.render_skin(identifier))
