"""Custom exceptions for the cache store and the compact codec."""

from logging import getLogger

from starlette import status

from ziria.configs import file_logger
from ziria.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class CacheExceptionError(BaseAppError):
    """Base exception for cache operations."""

    def __init__(self, detail: str = "Cache exception occurred") -> None:
        super().__init__(
            detail=detail,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


class CacheStoreError(CacheExceptionError):
    """Raised when the key-value backend rejects or fails a command."""

    def __init__(self, detail: str = "Cache store error") -> None:
        super().__init__(detail)


class CodecFormatError(CacheExceptionError):
    """Raised when compact() is given a stream this service did not encode."""

    def __init__(self, detail: str = "Not a stream produced by the fixed encoder") -> None:
        super().__init__(detail)


class CodecCorruptionError(CacheExceptionError):
    """Raised when a stored payload cannot be rebuilt into a valid PNG."""

    def __init__(self, detail: str = "Cached payload is corrupted") -> None:
        super().__init__(detail)


class CacheDecodeError(CacheExceptionError):
    """Raised when a rebuilt cache entry does not decode to the expected image."""

    def __init__(self, detail: str = "Error loading image from cache!") -> None:
        super().__init__(detail)


cache_exception_handler = create_exception_handler(logger)
