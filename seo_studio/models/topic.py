"""Topic cluster model."""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from seo_studio.models.keyword import Intent


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ContentOpportunity:
    topic: str
    content_type: str
    keywords: list[str]
    priority: str  # high / medium


@dataclass
class TopicCluster:
    """A main topic grouped with its subtopics and supporting keywords.

    ``subtopics`` holds at most 12 and ``keywords`` at most 20 distinct
    entries, in insertion order.
    """
    main_topic: str
    intent: Intent
    subtopics: list[str]
    keywords: list[str]
    semantic_relevance: int
    search_volume: int = 0
    difficulty: int = 0
    competitor_topics: list[str] = field(default_factory=list)
    content_opportunities: list[ContentOpportunity] = field(default_factory=list)
    seasonality: str = "stable"
    trend: str = "stable"
    source: str = "analysis"
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data
