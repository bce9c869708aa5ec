"""
Rendering errors.

Client-input and not-found failures raised while turning a request into an
avatar or skin image, before or around the cache.
"""

from logging import getLogger

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from ziria.configs import file_logger
from ziria.configs.settings import SKIN_NOT_FOUND, USER_NOT_FOUND
from ziria.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class RenderError(BaseAppError):
    """Base exception for rendering failures."""

    def __init__(
        self,
        detail: str = "Rendering failed",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail=detail, status_code=status_code)


class InvalidVariantError(RenderError):
    """Raised when the requested size is out of bounds or not an allowed multiple."""

    def __init__(self, detail: str = "Invalid image size") -> None:
        super().__init__(detail=detail, status_code=HTTP_400_BAD_REQUEST)


class IdentityNotFoundError(RenderError):
    """Raised when a display name does not resolve to an account."""

    def __init__(self, identifier: str | None = None) -> None:
        super().__init__(detail=USER_NOT_FOUND, status_code=HTTP_404_NOT_FOUND)
        self.identifier = identifier


class TextureUnavailableError(RenderError):
    """Raised when the skin texture is absent, unreachable or undecodable."""

    def __init__(self, detail: str = SKIN_NOT_FOUND) -> None:
        super().__init__(detail=detail, status_code=HTTP_404_NOT_FOUND)


class ScaleFactorError(RenderError):
    """Raised when a nearest-neighbor scale target is not an exact multiple."""

    def __init__(self, source: int, target: int) -> None:
        super().__init__(
            detail=f"Cannot scale {source}px to {target}px by an integer factor",
        )
        self.source = source
        self.target = target


render_exception_handler = create_exception_handler(logger)
