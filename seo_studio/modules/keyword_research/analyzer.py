"""Keyword analyzer -- cached keyword analyses and their management."""

import asyncio
import logging
import random
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from seo_studio.exceptions import SEOStudioError, SerpError, ValidationError
from seo_studio.integrations.keyword_volume import KeywordVolumeClient
from seo_studio.models.keyword import KeywordAnalysis, RelatedKeyword, make_cache_key
from seo_studio.modules.keyword_research.estimator import KeywordEstimator
from seo_studio.modules.keyword_research.expander import QueryExpander
from seo_studio.utils.cache import TTLCache
from seo_studio.utils.validators import validate_keyword, validate_market

logger = logging.getLogger(__name__)

SAMPLE_KEYWORDS = (
    "SEO tools",
    "content marketing",
    "keyword research",
    "digital marketing",
    "web analytics",
)

RELATED_LIMIT = 10
FALLBACK_RELATED_LIMIT = 8
LIST_LIMIT = 50


class KeywordAnalyzer:
    """Produce and manage keyword analyses keyed by (keyword, country, language).

    Analyses are cached for the cache's freshness window (one hour by
    default). Each analyzer owns its cache, so independent instances never
    share state.

    Usage::

        analyzer = KeywordAnalyzer(rng=random.Random(7))
        analysis = await analyzer.analyze_keyword("coffee makers")
        recent = await analyzer.get_all()
    """

    def __init__(
        self,
        estimator: Optional[KeywordEstimator] = None,
        expander: Optional[QueryExpander] = None,
        cache: Optional[TTLCache[KeywordAnalysis]] = None,
        volume_client: Optional[KeywordVolumeClient] = None,
        rng: Optional[random.Random] = None,
        country: str = "us",
        language: str = "en",
    ):
        self._rng = rng or random.Random()
        self._estimator = estimator or KeywordEstimator(rng=self._rng)
        self._expander = expander or QueryExpander(estimator=self._estimator, rng=self._rng)
        self._cache = cache if cache is not None else TTLCache(ttl_seconds=3600)
        self._volume_client = volume_client or KeywordVolumeClient()
        self._country = country
        self._language = language

    @property
    def estimator(self) -> KeywordEstimator:
        return self._estimator

    @property
    def expander(self) -> QueryExpander:
        return self._expander

    # ------------------------------------------------------------------
    # analyze_keyword
    # ------------------------------------------------------------------

    async def analyze_keyword(
        self,
        keyword: str,
        country: Optional[str] = None,
        language: Optional[str] = None,
    ) -> KeywordAnalysis:
        """Return a fresh or cached analysis.

        Raises:
            ValidationError: the keyword or market codes are unusable.
        """
        ok, error = validate_keyword(keyword)
        if not ok:
            raise ValidationError(error)
        keyword = " ".join(keyword.split())
        country = (country or self._country).lower()
        language = (language or self._language).lower()
        ok, error = validate_market(country, language)
        if not ok:
            raise ValidationError(error)

        key = make_cache_key(keyword, country, language)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Keyword analysis cache hit: %s", key)
            return cached

        try:
            analysis = await self._build_analysis(keyword, country, language)
        except Exception:
            logger.exception("Keyword analysis failed for %r, using fallback", keyword)
            analysis = self.fallback_analysis(keyword, country, language)

        self._cache.set(key, analysis)
        logger.info(
            "Analyzed %r: volume=%d difficulty=%d intent=%s",
            keyword, analysis.search_volume, analysis.difficulty, analysis.intent.value,
        )
        return analysis

    async def analyze_many(
        self,
        keywords: list[str],
        country: Optional[str] = None,
        language: Optional[str] = None,
    ) -> list[KeywordAnalysis]:
        """Analyze several seed keywords concurrently. Invalid ones are skipped."""
        tasks = [self.analyze_keyword(kw, country, language) for kw in keywords]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        analyses = []
        for keyword, outcome in zip(keywords, outcomes):
            if isinstance(outcome, ValidationError):
                logger.warning("Skipping keyword %r: %s", keyword, outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            analyses.append(outcome)
        return analyses

    def fallback_analysis(
        self,
        keyword: str,
        country: Optional[str] = None,
        language: Optional[str] = None,
    ) -> KeywordAnalysis:
        """Heuristic-only analysis used when the live path fails."""
        try:
            stats = self._estimator.estimate(keyword)
            related = [
                RelatedKeyword(
                    keyword=variant,
                    search_volume=self._estimator.estimate_volume(variant),
                    difficulty=self._estimator.estimate_difficulty(variant),
                    relevance=self._estimator.relevance(keyword, variant),
                )
                for variant in self._expander.expand(keyword)[:FALLBACK_RELATED_LIMIT]
            ]
            return KeywordAnalysis(
                keyword=keyword,
                search_volume=stats.search_volume,
                difficulty=stats.difficulty,
                cpc=self._estimator.estimate_cpc(keyword),
                intent=stats.intent,
                trend=stats.trend,
                seasonality=stats.seasonality,
                competition=self._estimator.competition_level(stats.difficulty),
                related_keywords=related,
                opportunities=self._estimator.find_opportunities(
                    keyword, stats.difficulty, stats.intent, stats.trend
                ),
                country=country or self._country,
                language=language or self._language,
                source="fallback",
            )
        except Exception as exc:
            raise SEOStudioError(f"Could not analyze keyword {keyword!r}: {exc}") from exc

    # ------------------------------------------------------------------
    # Management over the cache
    # ------------------------------------------------------------------

    async def get_all(self, limit: int = LIST_LIMIT) -> list[KeywordAnalysis]:
        """Recent analyses, newest first. Seeds sample keywords when empty."""
        if not len(self._cache):
            logger.info("Keyword cache empty, analyzing %d sample keywords", len(SAMPLE_KEYWORDS))
            await self.analyze_many(list(SAMPLE_KEYWORDS))
        analyses = sorted(self._cache.values(), key=lambda a: a.timestamp, reverse=True)
        return analyses[:limit]

    def get_by_id(self, analysis_id: str) -> Optional[KeywordAnalysis]:
        for analysis in self._cache.values():
            if analysis.id == analysis_id:
                return analysis
        return None

    def update(self, analysis_id: str, **changes: Any) -> Optional[KeywordAnalysis]:
        """Replace an analysis with an updated copy. Returns None if unknown."""
        current = self.get_by_id(analysis_id)
        if current is None:
            return None
        changes.pop("id", None)
        changes.pop("timestamp", None)
        updated = replace(current, timestamp=datetime.now(timezone.utc), **changes)
        if updated.cache_key != current.cache_key:
            self._cache.evict(current.cache_key)
        self._cache.set(updated.cache_key, updated)
        logger.info("Updated keyword analysis %s", analysis_id)
        return updated

    def delete(self, analysis_id: str) -> bool:
        current = self.get_by_id(analysis_id)
        if current is None:
            return False
        self._cache.evict(current.cache_key)
        logger.info("Deleted keyword analysis %s", analysis_id)
        return True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _build_analysis(self, keyword: str, country: str, language: str) -> KeywordAnalysis:
        volume = await self._search_volume(keyword, country, language)
        difficulty = self._estimator.estimate_difficulty(keyword)
        intent = self._estimator.classify_intent(keyword)
        trend = self._estimator.analyze_trend(keyword)
        return KeywordAnalysis(
            keyword=keyword,
            search_volume=volume,
            difficulty=difficulty,
            cpc=self._estimator.estimate_cpc(keyword),
            intent=intent,
            trend=trend,
            seasonality=self._estimator.analyze_seasonality(keyword),
            competition=self._estimator.competition_level(difficulty),
            related_keywords=self._expander.related_keywords(keyword, limit=RELATED_LIMIT),
            opportunities=self._estimator.find_opportunities(keyword, difficulty, intent, trend),
            country=country,
            language=language,
            source="live_analysis",
        )

    async def _search_volume(self, keyword: str, country: str, language: str) -> int:
        if self._volume_client.enabled:
            try:
                return await self._volume_client.get_search_volume(keyword, country, language)
            except SerpError as exc:
                logger.warning("Volume lookup failed for %r, estimating: %s", keyword, exc)
        return self._estimator.estimate_volume(keyword)
