"""Exception hierarchy for SEO Content Studio.

Heuristic modules (estimator, templater, scorer) never raise. These errors
are produced at the input boundary (keyword validation) and by the HTTP
integrations, where they are classified from ``httpx`` exception types and
status codes.
"""

import json
from typing import Any, Optional


class SEOStudioError(Exception):
    """Base class for all studio errors."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider

    @property
    def user_message(self) -> str:
        """Short, user-facing text for an error banner."""
        return self.message

    def __str__(self) -> str:
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class ValidationError(SEOStudioError):
    """Empty or otherwise unusable input. Rejected immediately, no fallback."""


class SerpError(SEOStudioError):
    """Base class for failures talking to a search-data provider."""

    retryable = False


class NetworkError(SerpError):
    """Connectivity failure (DNS, refused connection, TLS, protocol)."""

    retryable = True

    @property
    def user_message(self) -> str:
        return "Could not reach the search data provider. Showing generated results instead."


class SerpTimeoutError(SerpError):
    """The provider did not answer within the configured timeout."""

    retryable = True

    @property
    def user_message(self) -> str:
        return "The search data provider timed out. Showing generated results instead."


class RateLimitError(SerpError):
    """HTTP 429 from the provider."""

    retryable = True

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        retry_after: Optional[int] = None,
    ):
        super().__init__(message, provider)
        self.retry_after = retry_after

    @property
    def user_message(self) -> str:
        if self.retry_after:
            return f"Rate limit reached. Please wait {self.retry_after}s and retry."
        return "Rate limit reached. Please wait a moment and retry."


class AuthError(SerpError):
    """HTTP 401/403 or missing credentials."""

    @property
    def user_message(self) -> str:
        return "Authentication failed. Check the API credentials in your .env file."


class UnknownApiError(SerpError):
    """Any other non-2xx response or malformed payload."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message, provider)
        self.status_code = status_code
        self.payload = payload

    @property
    def diagnostics(self) -> str:
        """JSON dump of the response payload, or a generic message."""
        if self.payload is None:
            return "No diagnostic payload available."
        try:
            return json.dumps(self.payload, default=str)[:500]
        except (TypeError, ValueError):
            return "Unserialisable diagnostic payload."

    @property
    def user_message(self) -> str:
        if self.status_code:
            return f"Search data provider returned HTTP {self.status_code}. {self.diagnostics}"
        return f"Unexpected search data provider error. {self.diagnostics}"


class ContentGenerationError(SEOStudioError):
    """Raised when content could not be produced, not even as a fallback."""
