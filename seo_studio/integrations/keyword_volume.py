"""Keyword Tool search-volume lookup."""

import logging
import os
from typing import Optional

import httpx

from seo_studio.exceptions import AuthError, UnknownApiError
from seo_studio.integrations.http_errors import ensure_success, send_with_deadline

logger = logging.getLogger(__name__)

KEYWORDTOOL_VOLUME_URL = "https://api.keywordtool.io/v2/search/volume"
PROVIDER = "keywordtool"


class KeywordVolumeClient:
    """Client for live monthly search volume.

    Without ``KEYWORDTOOL_API_KEY`` the client is disabled and callers are
    expected to fall back to the heuristic estimate.

    Usage::

        client = KeywordVolumeClient()
        if client.enabled:
            volume = await client.get_search_volume("seo tools", country="us")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key if api_key is not None else os.getenv("KEYWORDTOOL_API_KEY", "")
        self._timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def get_search_volume(
        self, keyword: str, country: str = "us", language: str = "en"
    ) -> int:
        """Return the monthly search volume. Raises a ``SerpError`` subtype."""
        if not self.enabled:
            raise AuthError("No KEYWORDTOOL_API_KEY configured", PROVIDER)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            request = client.post(
                KEYWORDTOOL_VOLUME_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={"keyword": keyword, "country": country, "language": language},
            )
            response = await send_with_deadline(request, self._timeout, PROVIDER)

        data = ensure_success(response, PROVIDER)
        volume = data.get("volume")
        if not isinstance(volume, (int, float)) or volume < 0:
            raise UnknownApiError("Response has no usable volume", PROVIDER, payload=data)
        logger.debug("Keyword Tool volume for %r: %s", keyword, volume)
        return int(volume)
