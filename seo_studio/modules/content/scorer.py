"""SEO scorer -- additive 0-100 content score and recommendation rules."""

import logging
from typing import Optional, Union

from seo_studio.models.content import ContentDraft, GeneratedContent
from seo_studio.models.keyword import Intent, KeywordAnalysis
from seo_studio.models.serp import CompetitorInsights
from seo_studio.utils.helpers import clamp
from seo_studio.utils.text_processing import (
    calculate_keyword_density,
    calculate_readability,
    contains_phrase,
    count_words,
)

logger = logging.getLogger(__name__)

Scorable = Union[ContentDraft, GeneratedContent]

DEFAULT_RECOMMENDATIONS = (
    "Optimize content structure with clear headings",
    "Include relevant internal and external links",
    "Add visual elements to improve engagement",
)

INTENT_ADVICE: dict[Intent, str] = {
    Intent.COMMERCIAL: "Commercial intent detected - include comparison tables and CTAs",
    Intent.TRANSACTIONAL: "Transactional intent detected - add pricing details and clear purchase CTAs",
    Intent.INFORMATIONAL: "Informational intent detected - answer key questions early and add a FAQ section",
}


def _tiered(value: float, tiers: tuple[tuple[float, int], ...]) -> int:
    """Points for the first ``(threshold, points)`` tier the value reaches."""
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return 0


class SEOScorer:
    """Score content against keyword statistics.

    The score is a pure function of the content and the analysis; no single
    factor can contribute more than 20 of the 100 points.

    Usage::

        scorer = SEOScorer()
        score = scorer.score(draft, analysis)
        tips = scorer.recommendations(analysis, insights)
    """

    def score(self, content: Scorable, analysis: KeywordAnalysis) -> int:
        breakdown = self.score_breakdown(content, analysis)
        return int(clamp(sum(breakdown.values()), 0, 100))

    def score_breakdown(self, content: Scorable, analysis: KeywordAnalysis) -> dict[str, int]:
        """Points per factor, before clamping."""
        keyword = content.keyword or analysis.keyword
        body = _body(content)

        density = calculate_keyword_density(body, keyword)["density_pct"]
        if 1 <= density <= 3:
            density_points = 20
        elif 0.5 <= density <= 4:
            density_points = 15
        elif density > 0:
            density_points = 10
        else:
            density_points = 0

        related_found = sum(
            1 for r in analysis.related_keywords if contains_phrase(body, r.keyword)
        )

        return {
            "keyword_density": density_points,
            "word_count": _tiered(count_words(body), ((2000, 20), (1500, 15), (1000, 10), (500, 5))),
            "headings": _tiered(len(content.headings), ((6, 15), (4, 12), (2, 8))),
            "entities": _tiered(len(content.entities), ((12, 15), (8, 12), (4, 8))),
            "faqs": _tiered(len(content.faqs), ((3, 10), (1, 5))),
            "title_keyword": 10 if keyword and keyword.lower() in content.title.lower() else 0,
            "related_keywords": _tiered(related_found, ((4, 10), (2, 7), (1, 3))),
        }

    def recommendations(
        self,
        analysis: KeywordAnalysis,
        insights: Optional[CompetitorInsights] = None,
    ) -> list[str]:
        recs: list[str] = []

        if analysis.difficulty > 70:
            recs.append("High competition detected - focus on long-tail variations")
            recs.append("Consider building topical authority with supporting content")

        if analysis.search_volume > 10000:
            recs.append("High search volume opportunity - optimize for featured snippets")
            recs.append("Create comprehensive content to capture related searches")

        if insights and insights.average_length > 2500:
            recs.append("Competitors use long-form content - ensure comprehensive coverage")

        advice = INTENT_ADVICE.get(analysis.intent)
        if advice:
            recs.append(advice)

        if len(analysis.related_keywords) > 5:
            recs.append("Rich semantic opportunity - incorporate related keywords naturally")

        return recs or list(DEFAULT_RECOMMENDATIONS)

    @staticmethod
    def readability(content: Scorable) -> dict[str, float]:
        return calculate_readability(_body(content))


def _body(content: Scorable) -> str:
    if isinstance(content, GeneratedContent):
        return content.content
    return content.body
