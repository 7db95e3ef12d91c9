"""Topic clusterer -- group a main topic with subtopics and supporting keywords."""

import asyncio
import logging
import random
import re
from typing import Optional

from seo_studio.exceptions import ValidationError
from seo_studio.integrations.serp_fetcher import SerpFetcher
from seo_studio.models.keyword import Intent, KeywordAnalysis
from seo_studio.models.serp import SerpResult
from seo_studio.models.topic import ContentOpportunity, TopicCluster
from seo_studio.modules.keyword_research.analyzer import KeywordAnalyzer
from seo_studio.utils.helpers import clamp, dedupe
from seo_studio.utils.text_processing import jaccard_similarity, top_terms
from seo_studio.utils.validators import validate_keyword

logger = logging.getLogger(__name__)

MAX_SUBTOPICS = 12
MAX_KEYWORDS = 20
MAX_SUBTOPIC_LENGTH = 60
INTENT_SAMPLE_SIZE = 5

SUBTOPIC_TEMPLATES: dict[Intent, tuple[str, ...]] = {
    Intent.INFORMATIONAL: (
        "{topic} basics and fundamentals",
        "how to get started with {topic}",
        "{topic} best practices and tips",
        "common {topic} mistakes to avoid",
        "advanced {topic} techniques",
        "{topic} trends and updates",
    ),
    Intent.COMMERCIAL: (
        "best {topic} tools and software",
        "{topic} comparison and reviews",
        "top {topic} service providers",
        "{topic} features and benefits",
        "{topic} alternatives and options",
        "{topic} pricing and costs",
    ),
    Intent.TRANSACTIONAL: (
        "buy {topic} online",
        "{topic} pricing and packages",
        "{topic} discounts and deals",
        "{topic} subscription options",
        "{topic} trial and demo",
        "{topic} support and services",
    ),
}

SYNONYMS: dict[str, tuple[str, ...]] = {
    "marketing": ("advertising", "promotion", "campaigns"),
    "strategy": ("approach", "plan", "methodology"),
    "optimization": ("improvement", "enhancement", "refinement"),
    "analysis": ("examination", "evaluation", "assessment"),
    "management": ("administration", "oversight", "coordination"),
}

QUESTION_TEMPLATES = (
    "what is {topic}",
    "how does {topic} work",
    "why use {topic}",
    "when to implement {topic}",
    "how to choose {topic}",
)

COMMERCIAL_TEMPLATES = (
    "{topic} pricing",
    "{topic} cost",
    "best {topic} tools",
    "{topic} services",
    "{topic} solutions",
    "{topic} software",
)

CONTENT_TYPES: dict[Intent, tuple[str, ...]] = {
    Intent.INFORMATIONAL: ("blog posts", "guides", "tutorials", "infographics"),
    Intent.COMMERCIAL: ("comparison pages", "review articles", "feature pages", "case studies"),
    Intent.TRANSACTIONAL: ("product pages", "pricing pages", "landing pages", "checkout flows"),
}

INTENT_SIGNALS: dict[Intent, re.Pattern[str]] = {
    Intent.INFORMATIONAL: re.compile(r"how to|what is|guide|tutorial|tips|learn"),
    Intent.COMMERCIAL: re.compile(r"best|top|review|compare|vs|alternative"),
    Intent.TRANSACTIONAL: re.compile(r"buy|price|cost|discount|sale|order"),
}

SAMPLE_TOPICS: tuple[tuple[str, Intent], ...] = (
    ("content marketing strategy", Intent.INFORMATIONAL),
    ("SEO optimization tools", Intent.COMMERCIAL),
    ("email marketing software", Intent.TRANSACTIONAL),
    ("social media management", Intent.COMMERCIAL),
    ("digital marketing analytics", Intent.INFORMATIONAL),
)


def determine_intent(results: list[SerpResult]) -> Intent:
    """Vote on intent using signal words in the top organic results.

    Transactional wins only with a strict majority over both others;
    otherwise commercial wins if it beats informational.
    """
    counts = {intent: 0 for intent in INTENT_SIGNALS}
    for result in [r for r in results if r.is_organic][:INTENT_SAMPLE_SIZE]:
        text = f"{result.title} {result.snippet}".lower()
        for intent, pattern in INTENT_SIGNALS.items():
            if pattern.search(text):
                counts[intent] += 1

    info = counts[Intent.INFORMATIONAL]
    commercial = counts[Intent.COMMERCIAL]
    transactional = counts[Intent.TRANSACTIONAL]
    if transactional > commercial and transactional > info:
        return Intent.TRANSACTIONAL
    if commercial > info:
        return Intent.COMMERCIAL
    return Intent.INFORMATIONAL


def semantic_relevance(main_topic: str, subtopics: list[str]) -> int:
    """Average word-overlap of each subtopic with the main topic, 0-100."""
    if not subtopics:
        return 0
    total = sum(jaccard_similarity(main_topic, s) for s in subtopics)
    return int(clamp(round(total / len(subtopics) * 100), 0, 100))


def transform_to_subtopic(keyword: str, main_topic: str) -> str:
    if main_topic.lower() in keyword.lower():
        return keyword
    return f"{main_topic} {keyword}"


class TopicClusterer:
    """Build topic clusters from keyword analysis and SERP competitors.

    Usage::

        clusterer = TopicClusterer(analyzer, SerpFetcher())
        cluster = await clusterer.cluster("email marketing")
        cluster.intent, cluster.subtopics[:3]
    """

    def __init__(
        self,
        analyzer: Optional[KeywordAnalyzer] = None,
        serp_fetcher: Optional[SerpFetcher] = None,
        rng: Optional[random.Random] = None,
    ):
        self._rng = rng or random.Random()
        self._analyzer = analyzer or KeywordAnalyzer(rng=self._rng)
        self._serp = serp_fetcher or SerpFetcher(rng=self._rng)

    # ------------------------------------------------------------------
    # cluster
    # ------------------------------------------------------------------

    async def cluster(
        self,
        main_topic: str,
        intent: "Optional[str | Intent]" = None,
    ) -> TopicCluster:
        """Build a cluster; intent is voted from the SERP when not given.

        Raises:
            ValidationError: the main topic is empty.
        """
        ok, error = validate_keyword(main_topic)
        if not ok:
            raise ValidationError(f"Main topic is required: {error}")
        main_topic = " ".join(main_topic.split())
        try:
            explicit = Intent(intent) if intent else None
        except ValueError as exc:
            raise ValidationError(f"Unknown intent: {intent!r}") from exc

        try:
            analysis = await self._analyzer.analyze_keyword(main_topic)
            results = await self._serp.get_results(main_topic)
            competitor_topics = top_terms(
                [f"{r.title} {r.snippet}" for r in results if r.is_organic], limit=15
            )
            resolved = explicit or determine_intent(results)
            subtopics = self.generate_subtopics(main_topic, resolved, analysis, competitor_topics)
            keywords = self.generate_keywords(main_topic, resolved, analysis, subtopics)
        except Exception:
            logger.exception("Topic cluster generation failed for %r, using fallback", main_topic)
            return self.fallback_cluster(main_topic, explicit or Intent.INFORMATIONAL)

        logger.info(
            "Clustered %r: intent=%s subtopics=%d keywords=%d",
            main_topic, resolved.value, len(subtopics), len(keywords),
        )
        return TopicCluster(
            main_topic=main_topic,
            intent=resolved,
            subtopics=subtopics,
            keywords=keywords,
            semantic_relevance=semantic_relevance(main_topic, subtopics),
            search_volume=analysis.search_volume,
            difficulty=analysis.difficulty,
            competitor_topics=competitor_topics,
            content_opportunities=self.content_opportunities(subtopics, keywords, resolved),
            seasonality=analysis.seasonality,
            trend=analysis.trend.value,
        )

    async def sample_clusters(self) -> list[TopicCluster]:
        clusters = await asyncio.gather(
            *(self.cluster(topic, intent) for topic, intent in SAMPLE_TOPICS)
        )
        return list(clusters)

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    @staticmethod
    def generate_subtopics(
        main_topic: str,
        intent: Intent,
        analysis: KeywordAnalysis,
        competitor_topics: list[str],
    ) -> list[str]:
        templates = SUBTOPIC_TEMPLATES.get(intent, SUBTOPIC_TEMPLATES[Intent.INFORMATIONAL])
        candidates = [t.format(topic=main_topic) for t in templates]
        candidates.extend(
            transform_to_subtopic(r.keyword, main_topic) for r in analysis.related_keywords[:8]
        )
        for topic in competitor_topics[:6]:
            subtopic = f"{main_topic} {topic}"
            if len(subtopic) < MAX_SUBTOPIC_LENGTH:
                candidates.append(subtopic)
        candidates.extend(TopicClusterer.semantic_variations(main_topic))
        return dedupe(candidates, limit=MAX_SUBTOPICS)

    @staticmethod
    def semantic_variations(main_topic: str) -> list[str]:
        variations = []
        for word in main_topic.split():
            for synonym in SYNONYMS.get(word.lower(), ()):
                variations.append(main_topic.replace(word, synonym))
        return variations[:4]

    @staticmethod
    def generate_keywords(
        main_topic: str,
        intent: Intent,
        analysis: KeywordAnalysis,
        subtopics: list[str],
    ) -> list[str]:
        candidates = [main_topic]
        candidates.extend(r.keyword for r in analysis.related_keywords)
        for subtopic in subtopics:
            candidates.extend((f"best {subtopic}", f"top {subtopic}"))
            candidates.extend((f"{subtopic} guide", f"{subtopic} tips"))
        candidates.extend(t.format(topic=main_topic) for t in QUESTION_TEMPLATES)
        if intent in (Intent.COMMERCIAL, Intent.TRANSACTIONAL):
            candidates.extend(t.format(topic=main_topic) for t in COMMERCIAL_TEMPLATES)
        return dedupe(candidates, limit=MAX_KEYWORDS)

    @staticmethod
    def content_opportunities(
        subtopics: list[str],
        keywords: list[str],
        intent: Intent,
    ) -> list[ContentOpportunity]:
        types = CONTENT_TYPES.get(intent, CONTENT_TYPES[Intent.INFORMATIONAL])
        return [
            ContentOpportunity(
                topic=subtopic,
                content_type=types[index % len(types)],
                keywords=[k for k in keywords if subtopic.lower() in k.lower()][:3],
                priority="high" if index < 3 else "medium",
            )
            for index, subtopic in enumerate(subtopics[:5])
        ]

    def fallback_cluster(self, main_topic: str, intent: Intent = Intent.INFORMATIONAL) -> TopicCluster:
        subtopics = [
            f"{main_topic} best practices",
            f"{main_topic} implementation guide",
            f"{main_topic} tools and resources",
            f"{main_topic} strategy and planning",
            f"{main_topic} case studies and examples",
            f"{main_topic} trends and updates",
        ]
        keywords = [
            f"best {main_topic}",
            f"{main_topic} guide",
            f"{main_topic} tips",
            f"{main_topic} strategies",
            f"{main_topic} tools",
            f"{main_topic} services",
            f"{main_topic} examples",
            f"{main_topic} benefits",
        ]
        chosen = subtopics[:self._rng.randint(4, 6)]
        return TopicCluster(
            main_topic=main_topic,
            intent=intent,
            subtopics=chosen,
            keywords=keywords[:self._rng.randint(6, 8)],
            semantic_relevance=semantic_relevance(main_topic, chosen),
            search_volume=self._rng.randint(1000, 5999),
            difficulty=self._rng.randint(20, 79),
            competitor_topics=["strategy", "implementation", "tools"],
            source="fallback",
        )
