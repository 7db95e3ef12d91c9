"""Generated content, content requests and fan-out query models."""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from seo_studio.models.keyword import Intent


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentType(str, Enum):
    SERVICE = "service"
    BLOG = "blog"
    ECOMMERCE = "ecommerce"

    @classmethod
    def parse(cls, value: "str | ContentType") -> "ContentType":
        """Resolve a content type, defaulting unknown values to BLOG."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.BLOG


class JourneyStage(str, Enum):
    AWARENESS = "awareness"
    CONSIDERATION = "consideration"
    DECISION = "decision"


# ---------------------------------------------------------------------------
# Content requests: one variant per content type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ServiceRequest:
    keyword: str
    content_type: ContentType = field(default=ContentType.SERVICE, init=False)


@dataclass(frozen=True)
class BlogRequest:
    keyword: str
    year: Optional[int] = None  # defaults to the current year
    content_type: ContentType = field(default=ContentType.BLOG, init=False)


@dataclass(frozen=True)
class EcommerceRequest:
    keyword: str
    year: Optional[int] = None
    default_cpc: float = 2.50  # used when the analysis carries no CPC
    content_type: ContentType = field(default=ContentType.ECOMMERCE, init=False)


ContentRequest = Union[ServiceRequest, BlogRequest, EcommerceRequest]


def build_request(keyword: str, content_type: "str | ContentType") -> ContentRequest:
    """Build the request variant for a (possibly free-form) content type."""
    ctype = ContentType.parse(content_type)
    if ctype is ContentType.SERVICE:
        return ServiceRequest(keyword=keyword)
    if ctype is ContentType.ECOMMERCE:
        return EcommerceRequest(keyword=keyword)
    return BlogRequest(keyword=keyword)


# ---------------------------------------------------------------------------
# Generated content
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FAQ:
    question: str
    answer: str


@dataclass(frozen=True)
class ContentDraft:
    """Template output before scoring."""
    keyword: str
    content_type: ContentType
    title: str
    body: str
    headings: list[str]
    faqs: list[FAQ]
    entities: list[str]


@dataclass(frozen=True)
class GeneratedContent:
    """A scored piece of generated content. The body is immutable."""
    keyword: str
    content_type: ContentType
    title: str
    content: str
    entities: list[str]
    headings: list[str]
    faqs: list[FAQ]
    score: int
    recommendations: list[str]
    readability: dict[str, float] = field(default_factory=dict)
    source: str = "template"
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class FanOutQuery:
    """A query variant placed on the buyer journey."""
    query: str
    stage: JourneyStage
    search_volume: int
    difficulty: int
    intent: Intent
    source: str
    relevance: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
