"""Map httpx failures onto the studio's SERP error taxonomy.

Classification uses exception types and HTTP status codes only; error
message text is never inspected.
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional

import httpx

from seo_studio.exceptions import (
    AuthError,
    NetworkError,
    RateLimitError,
    SerpError,
    SerpTimeoutError,
    UnknownApiError,
)

logger = logging.getLogger(__name__)


def classify_transport_error(exc: httpx.HTTPError, provider: str) -> SerpError:
    """Translate an exception raised by an httpx call."""
    if isinstance(exc, httpx.TimeoutException):
        return SerpTimeoutError(f"Request timed out ({type(exc).__name__})", provider)
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_status(exc.response, provider)
    if isinstance(exc, httpx.TransportError):
        return NetworkError(f"Connection failed ({type(exc).__name__})", provider)
    return UnknownApiError(f"HTTP client error ({type(exc).__name__})", provider)


async def send_with_deadline(
    request: Awaitable[httpx.Response], timeout: float, provider: str
) -> httpx.Response:
    """Await an httpx request, bounding the whole exchange by ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(request, timeout)
    except asyncio.TimeoutError as exc:
        raise SerpTimeoutError(f"No complete response within {timeout}s", provider) from exc
    except httpx.HTTPError as exc:
        raise classify_transport_error(exc, provider) from exc


def classify_status(response: httpx.Response, provider: str) -> SerpError:
    """Translate a non-2xx response."""
    status = response.status_code
    if status == 429:
        return RateLimitError(
            "Too many requests", provider, retry_after=_retry_after(response)
        )
    if status in (401, 403):
        return AuthError(f"Provider rejected credentials (HTTP {status})", provider)
    return UnknownApiError(
        f"Unexpected HTTP {status}", provider, status_code=status, payload=_payload(response)
    )


def ensure_success(response: httpx.Response, provider: str) -> dict[str, Any]:
    """Return the JSON body of a 2xx response or raise a classified error."""
    if not response.is_success:
        raise classify_status(response, provider)
    try:
        data = response.json()
    except ValueError as exc:
        raise UnknownApiError(
            "Response body is not valid JSON",
            provider,
            status_code=response.status_code,
            payload=response.text[:500],
        ) from exc
    if not isinstance(data, dict):
        raise UnknownApiError(
            "Response body is not a JSON object", provider,
            status_code=response.status_code, payload=data,
        )
    return data


def _retry_after(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("Retry-After", "")
    return int(value) if value.isdigit() else None


def _payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500] or None
