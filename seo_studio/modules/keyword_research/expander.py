"""Query expander -- template-based keyword variants and buyer-journey fan-out."""

import logging
import math
import random
from datetime import date
from typing import Optional

from seo_studio.models.content import FanOutQuery, JourneyStage
from seo_studio.models.keyword import Intent, KeywordAnalysis, RelatedKeyword
from seo_studio.modules.keyword_research.estimator import KeywordEstimator
from seo_studio.utils.helpers import clamp, dedupe

logger = logging.getLogger(__name__)

PREFIXES = ("best", "top", "how to", "what is", "why", "when", "where")
SUFFIXES = ("guide", "tips", "tutorial", "examples", "tools", "software", "services", "review")
MODIFIERS = ("free", "online", "easy", "quick", "professional", "advanced")

DECISION_TERMS = ("buy", "price", "cost", "discount", "sale", "order")
CONSIDERATION_TERMS = ("best", "top", "review", "compare", "vs", "alternative")

STAGE_INTENT: dict[JourneyStage, Intent] = {
    JourneyStage.AWARENESS: Intent.INFORMATIONAL,
    JourneyStage.CONSIDERATION: Intent.COMMERCIAL,
    JourneyStage.DECISION: Intent.TRANSACTIONAL,
}

INTENT_TEMPLATES: dict[Intent, tuple[str, ...]] = {
    Intent.INFORMATIONAL: (
        "how to {kw}", "{kw} tutorial", "{kw} guide", "{kw} tips",
        "{kw} best practices", "{kw} examples", "learn {kw}", "{kw} for beginners",
    ),
    Intent.COMMERCIAL: (
        "best {kw}", "{kw} comparison", "{kw} reviews", "top {kw}",
        "{kw} vs", "{kw} alternatives", "{kw} features", "{kw} benefits",
    ),
    Intent.TRANSACTIONAL: (
        "buy {kw}", "{kw} price", "{kw} cost", "{kw} discount",
        "{kw} deal", "{kw} sale", "order {kw}", "{kw} online",
    ),
    Intent.NAVIGATIONAL: (
        "{kw} login", "{kw} website", "{kw} official",
        "{kw} app", "{kw} download", "{kw} platform",
    ),
}

# Keyed by month number, 1 = January.
SEASONAL_MODIFIERS: dict[int, tuple[str, ...]] = {
    1: ("winter", "january", "new year"),
    2: ("february", "valentine"),
    3: ("march", "spring"),
    4: ("april", "easter", "spring"),
    5: ("may", "mother's day"),
    6: ("june", "summer", "father's day"),
    7: ("july", "summer"),
    8: ("august", "back to school"),
    9: ("september", "fall", "autumn"),
    10: ("october", "halloween"),
    11: ("november", "thanksgiving", "black friday"),
    12: ("december", "christmas", "holiday", "winter"),
}

QUESTION_TEMPLATES = (
    "what is {kw}",
    "how does {kw} work",
    "why use {kw}",
    "when to use {kw}",
    "where to find {kw}",
    "which {kw} is best",
    "who needs {kw}",
    "how to choose {kw}",
    "what are {kw} benefits",
    "how much does {kw} cost",
)

FALLBACK_STAGE_TEMPLATES: dict[JourneyStage, tuple[str, ...]] = {
    JourneyStage.AWARENESS: (
        "what is {kw}", "{kw} definition", "why is {kw} important", "{kw} explained",
        "{kw} basics", "introduction to {kw}", "{kw} overview", "{kw} fundamentals",
    ),
    JourneyStage.CONSIDERATION: (
        "best {kw}", "{kw} comparison", "{kw} vs alternatives", "{kw} reviews",
        "{kw} features", "{kw} benefits", "{kw} options", "{kw} guide",
        "how to choose {kw}", "{kw} checklist",
    ),
    JourneyStage.DECISION: (
        "{kw} pricing", "{kw} cost", "buy {kw}", "{kw} discount", "{kw} free trial",
        "{kw} demo", "{kw} services", "hire {kw} expert", "{kw} consultation",
        "{kw} implementation",
    ),
}

MAX_FAN_OUT = 30
FALLBACK_FAN_OUT_SIZE = 20


def classify_stage(query: str) -> JourneyStage:
    """Place a query on the buyer journey by substring rules."""
    lowered = query.lower()
    if any(term in lowered for term in DECISION_TERMS):
        return JourneyStage.DECISION
    if any(term in lowered for term in CONSIDERATION_TERMS):
        return JourneyStage.CONSIDERATION
    return JourneyStage.AWARENESS


def intent_for_stage(stage: JourneyStage) -> Intent:
    return STAGE_INTENT.get(stage, Intent.INFORMATIONAL)


class QueryExpander:
    """Expand a seed keyword into variants and a buyer-journey fan-out.

    ``expand`` is deterministic. ``related_keywords`` and ``fan_out`` attach
    estimated metrics, so they draw from the estimator's random source.

    Usage::

        expander = QueryExpander(KeywordEstimator(rng=random.Random(1)))
        variants = expander.expand("coffee makers")
        queries = expander.fan_out("coffee makers", analysis)
    """

    def __init__(
        self,
        estimator: Optional[KeywordEstimator] = None,
        rng: Optional[random.Random] = None,
    ):
        self._rng = rng or random.Random()
        self._estimator = estimator or KeywordEstimator(rng=self._rng)

    # ------------------------------------------------------------------
    # expand
    # ------------------------------------------------------------------

    def expand(self, keyword: str) -> list[str]:
        """All template variants of a keyword, distinct and excluding itself."""
        keyword = " ".join(keyword.split())
        if not keyword:
            return []

        candidates: list[str] = []
        candidates.extend(f"{prefix} {keyword}" for prefix in PREFIXES)
        candidates.extend(f"{keyword} {suffix}" for suffix in SUFFIXES)
        for modifier in MODIFIERS:
            candidates.append(f"{modifier} {keyword}")
            candidates.append(f"{keyword} {modifier}")

        words = keyword.split()
        if len(words) > 1:
            for i in range(len(words)):
                candidates.append(" ".join(words[:i] + words[i + 1:]))

        original = keyword.lower()
        return [c for c in dedupe(candidates) if c.lower() != original]

    def related_keywords(self, keyword: str, limit: int = 10) -> list[RelatedKeyword]:
        """Top expansions with estimated metrics, most relevant first."""
        related = [
            RelatedKeyword(
                keyword=variant,
                search_volume=self._estimator.estimate_volume(variant),
                difficulty=self._estimator.estimate_difficulty(variant),
                relevance=self._estimator.relevance(keyword, variant),
            )
            for variant in self.expand(keyword)[:limit]
        ]
        related.sort(key=lambda r: r.relevance, reverse=True)
        return related

    # ------------------------------------------------------------------
    # fan-out
    # ------------------------------------------------------------------

    def fan_out(
        self,
        keyword: str,
        analysis: KeywordAnalysis,
        today: Optional[date] = None,
    ) -> list[FanOutQuery]:
        """Expand a keyword into journey-staged queries, highest volume first.

        Sources, in order: the analysis' related keywords, intent templates,
        seasonal variants for this month and next, and question phrasings.
        """
        today = today or date.today()
        base_volume = analysis.search_volume or 1000
        base_difficulty = analysis.difficulty or 50
        queries: list[FanOutQuery] = []

        for related in analysis.related_keywords:
            queries.append(self._make_query(
                related.keyword,
                related.search_volume or math.floor(base_volume * (self._rng.random() * 0.5 + 0.3)),
                related.difficulty or math.floor(base_difficulty * (self._rng.random() * 0.4 + 0.8)),
                source="keyword_analysis",
                relevance=related.relevance or 85,
            ))

        templates = INTENT_TEMPLATES.get(analysis.intent, INTENT_TEMPLATES[Intent.INFORMATIONAL])
        for template in templates:
            queries.append(self._make_query(
                template.format(kw=keyword),
                math.floor(base_volume * (self._rng.random() * 0.6 + 0.2)),
                base_difficulty + math.floor(self._rng.random() * 20 - 10),
                source="intent_expansion",
                relevance=90,
            ))

        for modifier in self.seasonal_modifiers(today):
            queries.append(self._make_query(
                f"{keyword} {modifier}",
                math.floor(base_volume * (self._rng.random() * 0.8 + 0.1)),
                base_difficulty - 5,
                source="seasonal",
                relevance=75,
            ))

        for template in QUESTION_TEMPLATES:
            queries.append(self._make_query(
                template.format(kw=keyword),
                math.floor(base_volume * (self._rng.random() * 0.4 + 0.1)),
                base_difficulty - 10,
                source="question",
                relevance=80,
            ))

        unique: dict[str, FanOutQuery] = {}
        for query in queries:
            unique.setdefault(query.query.lower(), query)

        result = list(unique.values())[:MAX_FAN_OUT]
        result.sort(key=lambda q: q.search_volume, reverse=True)
        logger.info("Fan-out for %r produced %d queries", keyword, len(result))
        return result

    def fallback_fan_out(self, keyword: str) -> list[FanOutQuery]:
        """Template-only fan-out with random metrics, used when analysis fails."""
        queries = [
            FanOutQuery(
                query=template.format(kw=keyword),
                stage=stage,
                search_volume=self._rng.randint(100, 5099),
                difficulty=self._rng.randint(20, 99),
                intent=intent_for_stage(stage),
                source="fallback",
            )
            for stage, templates in FALLBACK_STAGE_TEMPLATES.items()
            for template in templates
        ]
        self._rng.shuffle(queries)
        return queries[:FALLBACK_FAN_OUT_SIZE]

    @staticmethod
    def seasonal_modifiers(today: date) -> list[str]:
        next_month = today.month % 12 + 1
        return list(SEASONAL_MODIFIERS[today.month]) + list(SEASONAL_MODIFIERS[next_month])

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _make_query(
        query: str,
        search_volume: int,
        difficulty: int,
        source: str,
        relevance: int,
    ) -> FanOutQuery:
        stage = classify_stage(query)
        return FanOutQuery(
            query=query,
            stage=stage,
            search_volume=max(0, int(search_volume)),
            difficulty=int(clamp(difficulty, 0, 100)),
            intent=intent_for_stage(stage),
            source=source,
            relevance=relevance,
        )
