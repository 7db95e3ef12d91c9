"""Dataclass models shared across the studio modules."""

from seo_studio.models.keyword import (
    Competition,
    Intent,
    KeywordAnalysis,
    KeywordEstimate,
    RelatedKeyword,
    Trend,
    make_cache_key,
)
from seo_studio.models.serp import (
    CompetitorInsights,
    HeadingPattern,
    SerpResult,
)
from seo_studio.models.content import (
    FAQ,
    BlogRequest,
    ContentDraft,
    ContentRequest,
    ContentType,
    EcommerceRequest,
    FanOutQuery,
    GeneratedContent,
    JourneyStage,
    ServiceRequest,
    build_request,
)
from seo_studio.models.topic import (
    ContentOpportunity,
    TopicCluster,
)

__all__ = [
    "Competition",
    "Intent",
    "KeywordAnalysis",
    "KeywordEstimate",
    "RelatedKeyword",
    "Trend",
    "make_cache_key",
    "CompetitorInsights",
    "HeadingPattern",
    "SerpResult",
    "FAQ",
    "BlogRequest",
    "ContentDraft",
    "ContentRequest",
    "ContentType",
    "EcommerceRequest",
    "FanOutQuery",
    "GeneratedContent",
    "JourneyStage",
    "ServiceRequest",
    "build_request",
    "ContentOpportunity",
    "TopicCluster",
]
