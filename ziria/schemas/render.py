"""Requested artifact shapes and their validation rules."""

from dataclasses import dataclass
from enum import StrEnum

from ziria.configs import AVATAR_BASE_SIZE, AVATAR_MAX_SIZE, SKIN_BASE_SIZE, SKIN_MAX_SIZE
from ziria.errors.render import InvalidVariantError


class RenderKind(StrEnum):
    """Kind of artifact; doubles as the cache namespace."""

    AVATAR = "avatar"
    SKIN = "skin"


@dataclass(frozen=True, slots=True)
class RequestVariant:
    """
    Shape of a requested image.

    Build instances through ``avatar`` or ``skin`` so the size rules are
    always checked before any resolution or cache work happens.
    """

    kind: RenderKind
    size: int
    overlay: bool = False

    @property
    def base_size(self) -> int:
        """Side length of the image that is actually cached."""
        return AVATAR_BASE_SIZE if self.kind is RenderKind.AVATAR else SKIN_BASE_SIZE

    @property
    def base_mode(self) -> str:
        """Pillow mode of the cached base image."""
        return "RGB" if self.kind is RenderKind.AVATAR else "RGBA"

    @property
    def needs_scaling(self) -> bool:
        return self.size != self.base_size

    @classmethod
    def avatar(cls, size: int = AVATAR_BASE_SIZE, *, overlay: bool = False) -> "RequestVariant":
        """
        Validate and build an avatar variant.

        Raises:
            InvalidVariantError: Unless ``8 <= size <= 512`` and ``size % 8 == 0``.
        """
        if not AVATAR_BASE_SIZE <= size <= AVATAR_MAX_SIZE or size % AVATAR_BASE_SIZE:
            mssg = (
                f"Size must be between {AVATAR_BASE_SIZE} and {AVATAR_MAX_SIZE}, "
                f"and divisible by {AVATAR_BASE_SIZE}."
            )
            raise InvalidVariantError(mssg)
        return cls(RenderKind.AVATAR, size, overlay)

    @classmethod
    def skin(cls, size: int | None = None) -> "RequestVariant":
        """
        Validate and build a full-skin variant; no size means the base 64.

        Raises:
            InvalidVariantError: Unless ``64 <= size <= 512`` and ``size % 64 == 0``.
        """
        if size is None:
            size = SKIN_BASE_SIZE
        if not SKIN_BASE_SIZE <= size <= SKIN_MAX_SIZE or size % SKIN_BASE_SIZE:
            mssg = (
                f"Size must be between {SKIN_BASE_SIZE} and {SKIN_MAX_SIZE}, "
                f"and divisible by {SKIN_BASE_SIZE}."
            )
            raise InvalidVariantError(mssg)
        return cls(RenderKind.SKIN, size)
