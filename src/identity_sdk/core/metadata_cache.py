"""Provider metadata cache.

Discovery metadata is fetched once per client instance and then served
from memory. There is no TTL; ``invalidate`` is the only way to drop it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import ProviderMetadata
from ..telemetry import get_logger

if TYPE_CHECKING:
    from .typed_fetch import TypedFetcher

DISCOVERY_PATH = "/.well-known/openid-configuration"


class ProviderMetadataCache:
    """Instance-scoped cache of the OpenID Connect discovery document.

    Concurrent first calls may each fetch and store the document; the last
    write wins, which is harmless since both hold the same metadata.

    Attributes:
        discovery_url: Absolute URL of the discovery document.
    """

    def __init__(self, fetcher: TypedFetcher, discovery_url: str) -> None:
        """Initialize the cache.

        Args:
            fetcher: Typed fetcher used for the discovery request.
            discovery_url: Absolute URL of the discovery document.
        """
        self.discovery_url = discovery_url
        self._fetcher = fetcher
        self._metadata: ProviderMetadata | None = None
        self._logger = get_logger()

    @property
    def is_cached(self) -> bool:
        return self._metadata is not None

    @property
    def metadata(self) -> ProviderMetadata | None:
        return self._metadata

    async def get(self) -> ProviderMetadata:
        """Return cached metadata, fetching it on the first call.

        A failed fetch is not cached, so the next call tries again.
        """
        cached = self._metadata
        if cached is not None:
            self._logger.debug("Provider metadata cache hit")
            return cached

        self._logger.debug("Provider metadata cache miss", url=self.discovery_url)
        request = self._fetcher.transport.build_request("GET", self.discovery_url)
        self._metadata = await self._fetcher.fetch(request, ProviderMetadata)
        return self._metadata

    def invalidate(self) -> None:
        """Drop cached metadata so the next ``get`` fetches it again."""
        self._metadata = None
