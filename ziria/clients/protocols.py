"""Protocol definitions for cache backends and upstream collaborators."""

from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class CacheClientProtocol(Protocol):
    """
    Protocol for key-value backends holding compact payloads.

    Both RedisClient and MemoryClient conform to this protocol. Values are
    opaque bytes and never expire; ``flush_all`` is the only eviction.
    """

    def get(self, key: str) -> Awaitable[bytes | None]:
        """Get a value from the cache."""
        ...

    def set(self, key: str, value: bytes) -> Awaitable[bool]:
        """Set a value in the cache, without expiry."""
        ...

    def ping(self) -> Awaitable[bool]:
        """Check if the cache server is reachable."""
        ...

    def info(self) -> Awaitable[dict[str, Any]]:
        """Get information about the cache."""
        ...

    def flush_all(self) -> Awaitable[bool]:
        """Clear all entries from the cache."""
        ...


@runtime_checkable
class IdentityResolver(Protocol):
    """Maps a display name to a unique account id."""

    def resolve(self, name: str) -> Awaitable[UUID | None]:
        """Return the account id, or None when no account has that name."""
        ...


@runtime_checkable
class TextureSource(Protocol):
    """Returns raw skin texture bytes for a resolved account."""

    def fetch_texture(self, identity: UUID) -> Awaitable[bytes]:
        """
        Return the encoded texture.

        Raises:
            TextureUnavailableError: If the texture is absent or unreachable.
        """
        ...
