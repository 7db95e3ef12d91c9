"""Keyword analysis data model."""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class Intent(str, Enum):
    INFORMATIONAL = "informational"
    COMMERCIAL = "commercial"
    TRANSACTIONAL = "transactional"
    NAVIGATIONAL = "navigational"


class Trend(str, Enum):
    RISING = "rising"
    STABLE = "stable"
    DECLINING = "declining"


class Competition(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RelatedKeyword:
    """A keyword variant with its own estimated metrics."""
    keyword: str
    search_volume: int
    difficulty: int
    relevance: int  # 0-100 word overlap with the seed keyword


@dataclass(frozen=True)
class KeywordEstimate:
    """Heuristic metrics derived from the keyword string alone."""
    search_volume: int
    difficulty: int
    intent: Intent
    trend: Trend
    seasonality: str


@dataclass(frozen=True)
class KeywordAnalysis:
    """Full analysis of a keyword for one (country, language) market.

    Instances are never mutated; refreshing or updating an analysis
    replaces the cached entry wholesale.
    """
    keyword: str
    search_volume: int
    difficulty: int
    cpc: float
    intent: Intent
    trend: Trend
    seasonality: str
    competition: Competition = Competition.MEDIUM
    related_keywords: list[RelatedKeyword] = field(default_factory=list)
    opportunities: list[str] = field(default_factory=list)
    country: str = "us"
    language: str = "en"
    source: str = "live_analysis"
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def cache_key(self) -> str:
        return make_cache_key(self.keyword, self.country, self.language)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


def make_cache_key(keyword: str, country: str = "us", language: str = "en") -> str:
    """Build the cache key for an analysis, normalising the keyword."""
    return f"{keyword.strip().lower()}-{country.lower()}-{language.lower()}"
