"""SERP result and competitor insight models."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class SerpResult:
    """One ranked entry on a search results page.

    ``position`` starts at 1. Related searches are appended with positions
    from 100 upward so they never collide with organic ranks.
    """
    position: int
    title: str
    url: str
    snippet: str
    keyword: str = ""
    entities: list[str] = field(default_factory=list)
    search_volume: int = 0
    difficulty: int = 0
    ctr: float = 0.0
    source: str = "fallback"

    @property
    def is_organic(self) -> bool:
        return self.position < 100

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class HeadingPattern:
    level: str  # H1, H2 or H3
    common_headings: list[str]
    frequency: int


@dataclass
class CompetitorInsights:
    """Aggregated view of what the top-ranking pages cover."""
    common_topics: list[str] = field(default_factory=list)
    average_length: int = 1500
    heading_patterns: list[HeadingPattern] = field(default_factory=list)
    content_gaps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
