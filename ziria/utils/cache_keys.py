"""
Cache key builders.

A key names the canonical base image of one (identity, overlay) pair. The
requested display size never takes part in it: every size of the same pair
is served from the same cached base image.
"""

from uuid import UUID

OVERLAY_FLAG = "1"
PLAIN_FLAG = "0"


def derive_key(identity: UUID, overlay: bool) -> str:
    """
    Build the canonical cache key for a resolved identity.

    The identity is rendered as its 32-digit lower-case hex form and a single
    flag character is appended, so two keys are equal only when both the
    identity and the overlay flag are equal.

    Args:
        identity: Resolved account identity (never a raw display name).
        overlay: Whether the helmet overlay is composited.

    Returns:
        A 33-character key, e.g. ``"069a79f444e94726a5befca90e38aaf51"``.
    """
    return f"{identity.hex}{OVERLAY_FLAG if overlay else PLAIN_FLAG}"
