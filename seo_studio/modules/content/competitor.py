"""Competitor analysis over the top-ranking SERP results."""

import logging
import re

from seo_studio.models.serp import CompetitorInsights, HeadingPattern, SerpResult
from seo_studio.utils.helpers import dedupe

logger = logging.getLogger(__name__)

TOP_RESULTS = 5
MAX_COMMON_TOPICS = 20
MAX_HEADINGS_PER_LEVEL = 5

_H1_RE = re.compile(r"^(how to|guide|complete|ultimate|best)", re.IGNORECASE)
_H2_RE = re.compile(r"^(step|part|chapter|\d+\.)", re.IGNORECASE)
_ACTION_PATTERNS = (
    re.compile(r"^(learn|discover|understand|explore|master|implement)", re.IGNORECASE),
    re.compile(r"^(why|how|what|when|where)", re.IGNORECASE),
    re.compile(r"(benefits|advantages|features|solutions)", re.IGNORECASE),
)


def default_insights() -> CompetitorInsights:
    """Insights used when no SERP data could be analysed."""
    return CompetitorInsights(
        common_topics=[],
        average_length=1500,
        heading_patterns=[
            HeadingPattern("H1", ["Complete Guide", "Best Practices"], 5),
            HeadingPattern("H2", ["Getting Started", "Advanced Techniques", "Common Mistakes"], 8),
            HeadingPattern("H3", ["Tips and Tricks", "Implementation Steps"], 12),
        ],
        content_gaps=["Comprehensive coverage needed"],
    )


def classify_heading(text: str) -> str:
    if _H1_RE.match(text):
        return "H1"
    if _H2_RE.match(text):
        return "H2"
    return "H3"


def heading_from_sentence(sentence: str) -> str | None:
    """Turn an action-led snippet sentence into a short heading candidate."""
    for pattern in _ACTION_PATTERNS:
        if pattern.search(sentence):
            first_words = " ".join(sentence.split(" ")[:6])
            return re.sub(r"[^a-zA-Z0-9\s]", "", first_words).strip() or None
    return None


def analyze_competitors(results: list[SerpResult]) -> CompetitorInsights:
    """Derive common topics, length and heading patterns from the top results."""
    top = [r for r in results if r.is_organic][:TOP_RESULTS]
    if not top:
        logger.warning("No organic results to analyse, using default competitor insights")
        return default_insights()

    topics: list[str] = []
    headings: dict[str, list[str]] = {}
    total_length = 0

    for result in top:
        text = f"{result.title} {result.snippet}".lower()
        topics.extend(word for word in text.split() if len(word) > 3)

        for part in re.split(r"[-|:]", result.title):
            part = part.strip()
            if len(part) > 5:
                headings.setdefault(classify_heading(part), []).append(part)

        for sentence in re.split(r"[.!?]", result.snippet):
            sentence = sentence.strip()
            if len(sentence) <= 10:
                continue
            candidate = heading_from_sentence(sentence)
            if candidate:
                headings.setdefault("H3", []).append(candidate)

        # Snippets are ~1/10th of a page; scale up for a rough length estimate.
        total_length += len(result.snippet) * 10

    patterns = [
        HeadingPattern(
            level=level,
            common_headings=dedupe(found, limit=MAX_HEADINGS_PER_LEVEL),
            frequency=len(found),
        )
        for level, found in headings.items()
    ]
    return CompetitorInsights(
        common_topics=dedupe(topics, limit=MAX_COMMON_TOPICS),
        average_length=total_length // len(top),
        heading_patterns=patterns,
    )
