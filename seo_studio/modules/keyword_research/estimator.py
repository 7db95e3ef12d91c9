"""Keyword estimator -- heuristic volume, difficulty, intent, trend and seasonality.

Everything here works from the keyword string alone and never raises. The
random source is injected so callers (and tests) can pin the jitter.
"""

import logging
import math
import random
import re
from typing import Optional

from seo_studio.models.keyword import Competition, Intent, KeywordEstimate, Trend
from seo_studio.utils.helpers import clamp
from seo_studio.utils.text_processing import jaccard_similarity

logger = logging.getLogger(__name__)

BASE_VOLUME = 10000
MIN_VOLUME = 10
BASE_DIFFICULTY = 50

COMMERCIAL_TERMS = ("buy", "price", "cost", "cheap", "discount", "sale")

# Checked in order; the first group with a substring hit wins.
INTENT_CASCADE: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    (Intent.TRANSACTIONAL, ("buy", "purchase", "order", "price", "cost", "discount", "sale")),
    (Intent.COMMERCIAL, ("best", "top", "review", "compare", "vs", "alternative")),
    (Intent.INFORMATIONAL, ("what", "how", "why", "when", "where", "guide", "tutorial", "tips")),
)

TRENDING_TERMS = ("ai", "automation", "remote", "digital", "online", "virtual", "cloud")

SEASONAL_TERMS: dict[str, str] = {
    "christmas": "winter_peak",
    "summer": "summer_peak",
    "halloween": "fall_peak",
    "tax": "spring_peak",
    "vacation": "summer_peak",
    "school": "fall_peak",
}

_SPECIAL_CHAR_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')


class KeywordEstimator:
    """Estimate keyword metrics with simple, explainable heuristics.

    Usage::

        estimator = KeywordEstimator(rng=random.Random(42))
        stats = estimator.estimate("best coffee makers")
        stats.difficulty  # always within [10, 100]
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # estimate
    # ------------------------------------------------------------------

    def estimate(self, keyword: str) -> KeywordEstimate:
        """Return volume, difficulty, intent, trend and seasonality."""
        return KeywordEstimate(
            search_volume=self.estimate_volume(keyword),
            difficulty=self.estimate_difficulty(keyword),
            intent=self.classify_intent(keyword),
            trend=self.analyze_trend(keyword),
            seasonality=self.analyze_seasonality(keyword),
        )

    def estimate_volume(self, keyword: str) -> int:
        """Monthly search volume estimate, never below 10.

        Short head terms get a boost, long-tail phrases a cut, then a
        +/-20% jitter is applied.
        """
        keyword = keyword or ""
        word_count = len(keyword.split())
        length = len(keyword)
        base = float(BASE_VOLUME)

        if word_count == 1:
            base *= 2
        elif word_count > 4:
            base *= 0.3

        if length < 5:
            base *= 1.5
        elif length > 20:
            base *= 0.5

        variation = (self._rng.random() - 0.5) * 0.4
        return max(MIN_VOLUME, math.floor(base * (1 + variation)))

    def estimate_difficulty(self, keyword: str) -> int:
        """Ranking difficulty in [10, 100]."""
        keyword = keyword or ""
        lowered = keyword.lower()
        word_count = len(keyword.split())
        difficulty = BASE_DIFFICULTY

        if word_count == 1:
            difficulty += 20
        elif word_count > 3:
            difficulty -= 15

        if re.search(r"\d", keyword):
            difficulty -= 10
        if _SPECIAL_CHAR_RE.search(keyword):
            difficulty -= 5
        if any(term in lowered for term in COMMERCIAL_TERMS):
            difficulty += 15

        jittered = math.floor(difficulty + (self._rng.random() - 0.5) * 20)
        return int(clamp(jittered, 10, 100))

    def estimate_cpc(self, keyword: str) -> float:
        """Cost-per-click estimate in USD, rounded to cents."""
        cpc = self._rng.random() * 3 + 0.5
        if any(term in (keyword or "").lower() for term in COMMERCIAL_TERMS):
            cpc *= 1.5
        return round(cpc, 2)

    @staticmethod
    def competition_level(difficulty: int) -> Competition:
        if difficulty > 70:
            return Competition.HIGH
        if difficulty > 40:
            return Competition.MEDIUM
        return Competition.LOW

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @staticmethod
    def classify_intent(keyword: str) -> Intent:
        """Classify search intent by the first matching term group."""
        lowered = (keyword or "").lower()
        for intent, terms in INTENT_CASCADE:
            if any(term in lowered for term in terms):
                return intent
        return Intent.NAVIGATIONAL

    def analyze_trend(self, keyword: str) -> Trend:
        lowered = (keyword or "").lower()
        if any(term in lowered for term in TRENDING_TERMS):
            return Trend.RISING
        return self._rng.choice((Trend.STABLE, Trend.DECLINING))

    @staticmethod
    def analyze_seasonality(keyword: str) -> str:
        lowered = (keyword or "").lower()
        for term, season in SEASONAL_TERMS.items():
            if term in lowered:
                return season
        return "stable"

    @staticmethod
    def relevance(original: str, related: str) -> int:
        """Word overlap between two keywords as a 0-100 percentage."""
        return round(jaccard_similarity(original, related) * 100)

    def find_opportunities(
        self,
        keyword: str,
        difficulty: Optional[int] = None,
        intent: Optional[Intent] = None,
        trend: Optional[Trend] = None,
    ) -> list[str]:
        """List the ranking opportunities a keyword presents.

        Metrics that are not supplied are estimated afresh.
        """
        difficulty = self.estimate_difficulty(keyword) if difficulty is None else difficulty
        intent = self.classify_intent(keyword) if intent is None else intent
        trend = self.analyze_trend(keyword) if trend is None else trend

        opportunities: list[str] = []
        if difficulty < 30:
            opportunities.append("Low competition opportunity")
        if len(keyword.split()) > 3:
            opportunities.append("Long-tail keyword potential")
        if intent is Intent.COMMERCIAL:
            opportunities.append("High conversion potential")
        if trend is Trend.RISING:
            opportunities.append("Trending topic opportunity")

        if not opportunities:
            return ["Content optimization", "SERP analysis recommended"]
        return opportunities
