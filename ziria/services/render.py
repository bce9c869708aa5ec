"""
Render service.

Turns a raw identifier and a requested variant into PNG bytes:

    validate -> resolve -> derive key -> cache lookup
        hit:  decompact -> decode -> (scale) -> respond
        miss: fetch texture -> build base -> encode -> compact + store
              -> (scale) -> respond

Only the base resolution (8x8 avatar, 64x64 skin) is ever cached; larger
sizes are scaled on the way out. Concurrent misses on one key are coalesced
so a single upstream fetch serves all of them.
"""

from collections.abc import Awaitable, Callable
from time import perf_counter
from uuid import UUID

from ziria.clients.protocols import IdentityResolver, TextureSource
from ziria.errors import CacheExceptionError, IdentityNotFoundError
from ziria.managers.cache_store import CacheStore
from ziria.monitoring import get_logger, metrics
from ziria.schemas import ById, ByName, IdentityRef, RenderKind, RequestVariant, parse_identifier
from ziria.services import pipeline
from ziria.utils.cache_keys import derive_key
from ziria.utils.compact import compact, decompact

logger = get_logger(__name__)

BaseBuilder = Callable[[], Awaitable[bytes]]


class RenderService:
    """Orchestrates the key deriver, cache store, codec and image pipeline."""

    def __init__(
        self,
        store: CacheStore,
        resolver: IdentityResolver,
        textures: TextureSource,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.textures = textures

    async def render_avatar(self, raw_identifier: str, size: int, *, overlay: bool = False) -> bytes:
        """
        Render the face of an account, optionally with its helmet layer.

        Raises:
            InvalidVariantError: Before any other work, for a bad size.
            IdentityNotFoundError: If a display name does not resolve.
            TextureUnavailableError: If the texture cannot be fetched.
            CodecCorruptionError, CacheDecodeError: For a damaged cache entry.
        """
        variant = RequestVariant.avatar(size, overlay=overlay)
        return await self._render(raw_identifier, variant)

    async def render_skin(self, raw_identifier: str, size: int | None = None) -> bytes:
        """Render the full skin texture, at 64x64 or an exact multiple of it."""
        variant = RequestVariant.skin(size)
        return await self._render(raw_identifier, variant)

    async def resolve(self, ref: IdentityRef) -> UUID:
        """
        Resolve an identity reference to an account id.

        A ``ById`` reference is returned as is; a ``ByName`` one is looked up,
        unless the name cannot belong to any account.
        """
        match ref:
            case ById(identity=identity):
                return identity
            case ByName(name=name) if ref.is_plausible:
                identity = await self.resolver.resolve(name)
                if identity is None:
                    raise IdentityNotFoundError(name)
                return identity
            case ByName(name=name):
                raise IdentityNotFoundError(name)

    async def _render(self, raw_identifier: str, variant: RequestVariant) -> bytes:
        start = perf_counter()
        identity = await self.resolve(parse_identifier(raw_identifier))
        key = derive_key(identity, variant.overlay)

        png = await self._load_base(
            variant.kind,
            key,
            lambda: self._build_base(identity, variant),
        )
        grid = pipeline.decode_cached(png, variant.base_mode, variant.base_size)
        if variant.needs_scaling:
            png = pipeline.encode(pipeline.scale_nearest_neighbor(grid, variant.size))

        metrics.observe_render(variant.kind, perf_counter() - start)
        return png

    async def _load_base(self, kind: RenderKind, key: str, build: BaseBuilder) -> bytes:
        """Return the base PNG from the cache, building and storing it on a miss."""
        if (png := await self._read(kind, key)) is not None:
            return png

        async with self.store.lock_for(key, kind):
            # Another request may have filled the entry while we waited
            if (png := await self._read(kind, key)) is not None:
                return png

            metrics.record_cache_miss(kind)
            png = await build()
            await self._write(kind, key, png)
            return png

    async def _read(self, kind: RenderKind, key: str) -> bytes | None:
        try:
            payload = await self.store.get(key, kind)
        except CacheExceptionError as e:
            # An unreachable store degrades to recomputing
            logger.warning("Cache read failed, rebuilding", key=key, error=str(e))
            metrics.record_cache_error("get")
            return None
        if payload is None:
            return None

        metrics.record_cache_hit(kind)
        return decompact(payload)

    async def _write(self, kind: RenderKind, key: str, png: bytes) -> None:
        try:
            await self.store.set(key, compact(png), kind)
        except CacheExceptionError as e:
            # The response never depends on the write
            logger.warning("Cache write failed", key=key, error=str(e))
            metrics.record_cache_error("set")

    async def _build_base(self, identity: UUID, variant: RequestVariant) -> bytes:
        data = await self.textures.fetch_texture(identity)
        texture = pipeline.decode_texture(data)
        if variant.kind is RenderKind.AVATAR:
            grid = pipeline.build_avatar(texture, overlay=variant.overlay)
        else:
            grid = pipeline.build_skin(texture)
        logger.info("Built base image", identity=identity.hex, kind=variant.kind)
        return pipeline.encode(grid)
