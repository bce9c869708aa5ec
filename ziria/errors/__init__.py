from ziria.errors.base import BASE_EXCEPTION, BaseAppError, create_exception_handler
from ziria.errors.cache import (
    CacheDecodeError,
    CacheExceptionError,
    CacheStoreError,
    CodecCorruptionError,
    CodecFormatError,
    cache_exception_handler,
)
from ziria.errors.render import (
    IdentityNotFoundError,
    InvalidVariantError,
    RenderError,
    ScaleFactorError,
    TextureUnavailableError,
    render_exception_handler,
)
from ziria.errors.validation import validation_exception_handler

__all__ = [
    "BASE_EXCEPTION",
    "BaseAppError",
    "create_exception_handler",
    "CacheDecodeError",
    "CacheExceptionError",
    "CacheStoreError",
    "CodecCorruptionError",
    "CodecFormatError",
    "cache_exception_handler",
    "IdentityNotFoundError",
    "InvalidVariantError",
    "RenderError",
    "ScaleFactorError",
    "TextureUnavailableError",
    "render_exception_handler",
    "validation_exception_handler",
]
