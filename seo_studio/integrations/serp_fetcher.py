"""SERP fetcher -- live results from SerpAPI or DataForSEO with generated fallback."""

import logging
import math
import os
import random
from typing import Any, Optional

import httpx

from seo_studio.exceptions import AuthError, SerpError, UnknownApiError
from seo_studio.integrations.http_errors import ensure_success, send_with_deadline
from seo_studio.models.serp import SerpResult
from seo_studio.modules.keyword_research.estimator import KeywordEstimator
from seo_studio.utils.helpers import hyphenate
from seo_studio.utils.text_processing import top_terms

logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search"
DATAFORSEO_URL = "https://api.dataforseo.com/v3/serp/google/organic/live/advanced"

FALLBACK_DOMAINS = (
    "wikipedia.org", "medium.com", "hubspot.com", "moz.com", "searchengineland.com",
)
FALLBACK_SNIPPET = (
    "Learn about {kw} with comprehensive guides and expert insights. "
    "Get the latest information and best practices."
)

# Industry-average organic click-through rate by position.
CTR_BY_POSITION: dict[int, float] = {
    1: 31.7, 2: 24.7, 3: 18.7, 4: 13.7, 5: 9.5,
    6: 6.1, 7: 4.4, 8: 3.1, 9: 2.5, 10: 2.2,
}

RELATED_POSITION_OFFSET = 100


def _records(value: Any) -> list[dict[str, Any]]:
    """JSON objects of a list-valued field; anything else yields nothing."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def calculate_ctr(position: int) -> float:
    if position in CTR_BY_POSITION:
        return CTR_BY_POSITION[position]
    return round(max(0.5, 2.5 - position * 0.1), 2)


def calculate_difficulty(total_results: int, index: int) -> int:
    """Ranking difficulty of a slot given how crowded the page is."""
    base = min(90, total_results * 2)
    if index < 3:
        factor = 1.2
    elif index < 10:
        factor = 1.0
    else:
        factor = 0.8
    return math.floor(base * factor)


class SerpFetcher:
    """Fetch search results for a keyword, never failing the caller.

    ``get_results`` always returns a ranked list: live data when a provider
    is configured and answers, otherwise five generated results. The reason
    for the last fallback is kept on ``last_error`` so a front end can show
    a rate-limit or credentials banner.

    Usage::

        fetcher = SerpFetcher()                       # keys from the environment
        results = await fetcher.get_results("seo tools")
        if fetcher.last_error:
            print(fetcher.last_error.user_message)
    """

    def __init__(
        self,
        serpapi_key: Optional[str] = None,
        dataforseo_login: Optional[str] = None,
        dataforseo_password: Optional[str] = None,
        provider: str = "auto",
        timeout: float = 10.0,
        num_results: int = 20,
        location: str = "United States",
        language: str = "en",
        estimator: Optional[KeywordEstimator] = None,
        rng: Optional[random.Random] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._serpapi_key = serpapi_key if serpapi_key is not None else os.getenv("SERPAPI_KEY", "")
        self._dfs_login = (
            dataforseo_login if dataforseo_login is not None else os.getenv("DATAFORSEO_LOGIN", "")
        )
        self._dfs_password = (
            dataforseo_password if dataforseo_password is not None
            else os.getenv("DATAFORSEO_PASSWORD", "")
        )
        self._provider = provider
        self._timeout = timeout
        self._num_results = num_results
        self._location = location
        self._language = language
        self._rng = rng or random.Random()
        self._estimator = estimator or KeywordEstimator(rng=self._rng)
        self._transport = transport
        self.last_error: Optional[SerpError] = None

    # ------------------------------------------------------------------
    # Provider selection
    # ------------------------------------------------------------------

    @property
    def active_provider(self) -> Optional[str]:
        """Provider that will be queried, or None in fallback-only mode."""
        if self._provider in ("serpapi", "auto") and self._serpapi_key:
            return "serpapi"
        if self._provider in ("dataforseo", "auto") and self._dfs_login and self._dfs_password:
            return "dataforseo"
        return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_results(
        self,
        keyword: str,
        location: Optional[str] = None,
        language: Optional[str] = None,
    ) -> list[SerpResult]:
        """Ranked results for a keyword, falling back on any provider failure."""
        try:
            results = await self.fetch_live(keyword, location, language)
        except SerpError as exc:
            self.last_error = exc
            logger.warning("SERP fetch for %r failed, using fallback: %s", keyword, exc)
            return self.generate_fallback_results(keyword)

        if not any(r.is_organic for r in results):
            logger.warning("SERP response for %r had no organic results, using fallback", keyword)
            return self.generate_fallback_results(keyword)

        self.last_error = None
        return results

    async def analyze(
        self,
        keyword: str,
        location: Optional[str] = None,
        language: Optional[str] = None,
    ) -> list[SerpResult]:
        """Results for keyword analysis.

        Behaves like :meth:`get_results`; raises only when not even fallback
        results could be produced.
        """
        results = await self.get_results(keyword, location, language)
        if not results:
            raise UnknownApiError(f"No SERP data could be generated for {keyword!r}")
        return results

    async def fetch_live(
        self,
        keyword: str,
        location: Optional[str] = None,
        language: Optional[str] = None,
    ) -> list[SerpResult]:
        """Query the configured provider. Raises a :class:`SerpError` subtype."""
        provider = self.active_provider
        if provider is None:
            raise AuthError("No SERP API credentials configured")

        location = location or self._location
        language = language or self._language
        logger.info("Fetching SERP for %r via %s", keyword, provider)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            if provider == "serpapi":
                request = client.get(SERPAPI_URL, params={
                    "q": keyword,
                    "api_key": self._serpapi_key,
                    "location": location,
                    "hl": language,
                    "num": str(self._num_results),
                })
            else:
                request = client.post(
                    DATAFORSEO_URL,
                    json=[{
                        "keyword": keyword,
                        "location_name": location,
                        "language_code": language,
                        "depth": self._num_results,
                    }],
                    auth=(self._dfs_login, self._dfs_password),
                )
            response = await send_with_deadline(request, self._timeout, provider)

        data = ensure_success(response, provider)
        if provider == "serpapi":
            return self.process_serpapi_results(data, keyword)
        return self.process_dataforseo_results(data, keyword)

    # ------------------------------------------------------------------
    # Response processing
    # ------------------------------------------------------------------

    def process_serpapi_results(self, data: dict[str, Any], keyword: str) -> list[SerpResult]:
        organic = _records(data.get("organic_results"))
        results = [
            self._organic_result(
                index, len(organic), keyword,
                title=item.get("title"), url=item.get("link"), snippet=item.get("snippet"),
                source="serpapi",
            )
            for index, item in enumerate(organic)
        ]

        for index, related in enumerate(_records(data.get("related_searches"))):
            query = str(related.get("query") or "")
            if not query:
                continue
            results.append(SerpResult(
                position=RELATED_POSITION_OFFSET + index,
                title=f"Related: {query}",
                url="",
                snippet=f"Related search query for {keyword}",
                keyword=query,
                search_volume=self._estimator.estimate_volume(query),
                difficulty=self._rng.randint(30, 69),
                ctr=0.0,
                source="related_search",
            ))
        return results

    def process_dataforseo_results(self, data: dict[str, Any], keyword: str) -> list[SerpResult]:
        status_code = data.get("status_code")
        if status_code is not None and status_code != 20000:
            raise UnknownApiError(
                data.get("status_message", "DataForSEO task failed"),
                "dataforseo", payload=data,
            )
        items: list[dict[str, Any]] = []
        for task in _records(data.get("tasks")):
            for result in _records(task.get("result")):
                items.extend(i for i in _records(result.get("items")) if i.get("type") == "organic")

        return [
            self._organic_result(
                index, len(items), keyword,
                title=item.get("title"), url=item.get("url"), snippet=item.get("description"),
                source="dataforseo",
            )
            for index, item in enumerate(items)
        ]

    def generate_fallback_results(self, keyword: str) -> list[SerpResult]:
        """Five synthetic results built from well-known domains."""
        results = []
        for index, domain in enumerate(FALLBACK_DOMAINS):
            title = f"{keyword} - {domain.split('.')[0].upper()}"
            snippet = FALLBACK_SNIPPET.format(kw=keyword)
            results.append(SerpResult(
                position=index + 1,
                title=title,
                url=f"https://{domain}/{hyphenate(keyword)}",
                snippet=snippet,
                keyword=keyword,
                entities=top_terms([title, snippet], limit=5),
                search_volume=self._rng.randint(1000, 10999),
                difficulty=self._rng.randint(20, 79),
                ctr=calculate_ctr(index + 1),
                source="fallback",
            ))
        return results

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _organic_result(
        self,
        index: int,
        total: int,
        keyword: str,
        title: Any,
        url: Any,
        snippet: Any,
        source: str,
    ) -> SerpResult:
        title = str(title) if title else "No title"
        snippet = str(snippet) if snippet else "No description available"
        return SerpResult(
            position=index + 1,
            title=title,
            url=str(url) if url else "",
            snippet=snippet,
            keyword=keyword,
            entities=top_terms([title, snippet], limit=5),
            search_volume=self._estimator.estimate_volume(keyword),
            difficulty=calculate_difficulty(total, index),
            ctr=calculate_ctr(index + 1),
            source=source,
        )
