# ziria/clients/mojang_client.py
"""
Client for the upstream account services.

Implements both collaborators the renderer depends on: the identity resolver
(display name to account id) and the texture source (account id to skin
texture bytes). One ``httpx.AsyncClient`` is shared by all requests so its
connection pool is reused.
"""

from base64 import b64decode
from binascii import Error as Base64Error
from typing import Any
from urllib.parse import quote
from uuid import UUID

from httpx import AsyncClient, HTTPError, Response
from orjson import JSONDecodeError
from orjson import loads as orjson_loads

from ziria.configs import settings
from ziria.errors.render import TextureUnavailableError
from ziria.monitoring import get_logger, metrics

logger = get_logger(__name__)

RESOLVER = "resolver"
TEXTURE = "texture"


class MojangClient:
    """
    Async client for the Mojang profile and session APIs.

    Attributes:
        api_url: Base URL of the name lookup API.
        session_url: Base URL of the session (profile/textures) API.
    """

    def __init__(
        self,
        client: AsyncClient | None = None,
        *,
        api_url: str = settings.MOJANG_API_URL,
        session_url: str = settings.SESSION_SERVER_URL,
        timeout: float = settings.UPSTREAM_TIMEOUT,
    ) -> None:
        """
        Initialize the client.

        Args:
            client: Optional pre-built httpx client (tests pass one with a
                mock transport). When omitted the instance owns its client.
            api_url: Base URL of the name lookup API.
            session_url: Base URL of the session API.
            timeout: Per-request timeout in seconds.
        """
        self.api_url = api_url.rstrip("/")
        self.session_url = session_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or AsyncClient(
            timeout=timeout,
            headers={"User-Agent": settings.SERVER_HEADER},
            follow_redirects=True,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def resolve(self, name: str) -> UUID | None:
        """
        Look up the account id for a display name.

        Transport failures and unexpected answers are logged and reported as
        "not found", the same as an unknown name.

        Returns:
            The account id, or None.
        """
        url = f"{self.api_url}/users/profiles/minecraft/{quote(name, safe='')}"
        try:
            response = await self._client.get(url)
        except HTTPError as e:
            logger.warning("Identity lookup failed", name=name, error=str(e))
            metrics.record_upstream(RESOLVER, "error")
            return None

        if response.status_code in (204, 404):
            metrics.record_upstream(RESOLVER, "not_found")
            return None
        if response.status_code != 200:
            logger.warning("Identity lookup rejected", name=name, status=response.status_code)
            metrics.record_upstream(RESOLVER, "error")
            return None

        try:
            identity = UUID(self._json(response)["id"])
        except (JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Identity lookup returned a malformed profile", name=name, error=str(e))
            metrics.record_upstream(RESOLVER, "error")
            return None

        metrics.record_upstream(RESOLVER, "ok")
        return identity

    async def fetch_texture(self, identity: UUID) -> bytes:
        """
        Download the skin texture of an account.

        Raises:
            TextureUnavailableError: If the profile has no skin or any step
                of the lookup fails.
        """
        try:
            skin_url = await self._skin_url(identity)
            response = await self._client.get(skin_url)
            response.raise_for_status()
        except TextureUnavailableError:
            metrics.record_upstream(TEXTURE, "not_found")
            raise
        except HTTPError as e:
            logger.warning("Texture download failed", identity=identity.hex, error=str(e))
            metrics.record_upstream(TEXTURE, "error")
            raise TextureUnavailableError from e

        metrics.record_upstream(TEXTURE, "ok")
        return response.content

    async def _skin_url(self, identity: UUID) -> str:
        """Read the skin URL out of the account's signed textures property."""
        url = f"{self.session_url}/session/minecraft/profile/{identity.hex}"
        response = await self._client.get(url)
        if response.status_code in (204, 404):
            raise TextureUnavailableError
        response.raise_for_status()

        try:
            profile = self._json(response)
            textures = next(
                prop["value"]
                for prop in profile.get("properties", [])
                if prop.get("name") == "textures"
            )
            decoded = orjson_loads(b64decode(textures, validate=True))
            skin_url: str = decoded["textures"]["SKIN"]["url"]
        except (StopIteration, KeyError, TypeError, AttributeError) as e:
            raise TextureUnavailableError from e
        except (Base64Error, JSONDecodeError, ValueError) as e:
            logger.warning("Malformed textures property", identity=identity.hex, error=str(e))
            raise TextureUnavailableError from e

        # The session server still hands out plain http texture URLs
        if skin_url.startswith("http://"):
            skin_url = "https://" + skin_url.removeprefix("http://")
        return skin_url

    @staticmethod
    def _json(response: Response) -> Any:
        return orjson_loads(response.content)
