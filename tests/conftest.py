# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import asyncio
from collections.abc import AsyncGenerator
from io import BytesIO
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from ziria.clients.memory_client import MemoryClient
from ziria.errors import TextureUnavailableError
from ziria.managers.cache_store import CacheStore
from ziria.services.render import RenderService

NOTCH = UUID("069a79f444e94726a5befca90e38aaf5")
JEB = UUID("853c80ef3c3749fdaa49938b674adae6")
BARE = UUID("00000000000000000000000000000001")  # account without a skin

OPAQUE_RED = (255, 0, 0, 255)
HALF_BLUE = (0, 0, 255, 128)


def face_color(i: int, j: int) -> tuple[int, int, int, int]:
    """Colour of face pixel (i, j) in the test texture."""
    return (10 * i, 20 + 10 * j, 200, 255)


def build_texture(height: int = 64) -> Image.Image:
    """
    Build a skin texture with recognisable markers.

    The face region carries a per-pixel gradient; the helmet region has a
    transparent row 0, an opaque red row 1 and a half-alpha blue row 2.
    """
    texture = Image.new("RGBA", (64, height), (0, 0, 0, 0))
    for j in range(8):
        for i in range(8):
            texture.putpixel((8 + i, 8 + j), face_color(i, j))
    for i in range(8):
        texture.putpixel((40 + i, 9), OPAQUE_RED)
        texture.putpixel((40 + i, 10), HALF_BLUE)
    # Body marker outside the head
    texture.putpixel((20, 20), (1, 2, 3, 255))
    return texture


def to_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class FakeAccounts:
    """Identity resolver and texture source with call counters."""

    def __init__(self, texture: bytes, delay: float = 0.0) -> None:
        self.texture = texture
        self.delay = delay
        self.names = {"notch": NOTCH, "jeb_": JEB, "bare": BARE}
        self.resolve_calls = 0
        self.texture_calls = 0

    async def resolve(self, name: str) -> UUID | None:
        self.resolve_calls += 1
        return self.names.get(name.lower())

    async def fetch_texture(self, identity: UUID) -> bytes:
        self.texture_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if identity not in (NOTCH, JEB):
            raise TextureUnavailableError
        return self.texture


@pytest.fixture
def texture() -> Image.Image:
    return build_texture()


@pytest.fixture
def texture_png(texture: Image.Image) -> bytes:
    return to_png(texture)


@pytest.fixture
def accounts(texture_png: bytes) -> FakeAccounts:
    return FakeAccounts(texture_png)


@pytest.fixture
def memory_client() -> MemoryClient:
    """In-memory backend, so no test needs a Redis server."""
    return MemoryClient()


@pytest.fixture
def store(memory_client: MemoryClient) -> CacheStore:
    """Cache store over the in-memory backend, without touching Redis."""
    return CacheStore(memory_client=memory_client)


@pytest.fixture
def service(store: CacheStore, accounts: FakeAccounts) -> RenderService:
    return RenderService(store, accounts, accounts)


@pytest.fixture
async def client(store: CacheStore, service: RenderService) -> AsyncGenerator[AsyncClient]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Wires the in-memory store and fake upstream onto the app state the
    lifespan would normally populate, and disables rate limiting.
    """
    from ziria.main import app
    from ziria.managers.rate_limiter import limiter

    limiter.enabled = False
    app.state.cache_store = store
    app.state.render_service = service
    async with AsyncClient(
        base_url="http://test",
        transport=ASGITransport(app=app),
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def notch() -> UUID:
    return NOTCH


@pytest.fixture
def legacy_texture_png() -> bytes:
    """A 64x32 texture in the pre-1.8 layout."""
    return to_png(build_texture(height=32))
