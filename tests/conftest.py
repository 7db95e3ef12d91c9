"""Shared pytest fixtures for SEO Content Studio tests."""

import asyncio
import json
import random
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

# Ensure project root is on sys.path so 'seo_studio' is importable.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from seo_studio.models import (  # noqa: E402
    FAQ,
    ContentType,
    GeneratedContent,
    Intent,
    KeywordAnalysis,
    RelatedKeyword,
    Trend,
)

_CREDENTIAL_VARS = (
    "SERPAPI_KEY",
    "DATAFORSEO_LOGIN",
    "DATAFORSEO_PASSWORD",
    "KEYWORDTOOL_API_KEY",
)


@pytest.fixture(autouse=True)
def _no_credentials(monkeypatch):
    """Autouse fixture: run every test without provider credentials.

    Tests that exercise a live provider pass keys explicitly and route
    requests through ``httpx.MockTransport``.
    """
    for var in _CREDENTIAL_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def rng():
    """Seeded random source so estimates and templates are reproducible."""
    return random.Random(1234)


@pytest.fixture()
def make_analysis() -> Callable[..., KeywordAnalysis]:
    """Factory for KeywordAnalysis objects with sensible defaults."""

    def _make(
        keyword: str = "coffee makers",
        search_volume: int = 1000,
        difficulty: int = 50,
        intent: Intent = Intent.COMMERCIAL,
        related: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> KeywordAnalysis:
        related_keywords = [
            RelatedKeyword(keyword=r, search_volume=500, difficulty=40, relevance=60)
            for r in (related or [])
        ]
        kwargs.setdefault("cpc", 1.75)
        kwargs.setdefault("trend", Trend.STABLE)
        kwargs.setdefault("seasonality", "stable")
        return KeywordAnalysis(
            keyword=keyword,
            search_volume=search_volume,
            difficulty=difficulty,
            intent=intent,
            related_keywords=related_keywords,
            **kwargs,
        )

    return _make


@pytest.fixture()
def make_content() -> Callable[..., GeneratedContent]:
    """Factory for GeneratedContent objects."""

    def _make(
        keyword: str = "seo tools",
        content_type: ContentType = ContentType.BLOG,
        title: str = "SEO Tools: Complete Guide",
        content: str = "# SEO Tools\n\n## Why it matters\n\nSEO tools help you rank.",
        **kwargs: Any,
    ) -> GeneratedContent:
        kwargs.setdefault("entities", [keyword, "analytics"])
        kwargs.setdefault("headings", ["Why it matters"])
        kwargs.setdefault("faqs", [FAQ("What are seo tools?", "Software that helps you rank.")])
        kwargs.setdefault("score", 64)
        kwargs.setdefault("recommendations", [])
        return GeneratedContent(
            keyword=keyword,
            content_type=content_type,
            title=title,
            content=content,
            **kwargs,
        )

    return _make


def json_transport(
    payload: Any,
    status_code: int = 200,
    headers: Optional[dict[str, str]] = None,
    requests: Optional[list[httpx.Request]] = None,
) -> httpx.MockTransport:
    """MockTransport answering every request with the same JSON payload."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(
            status_code,
            content=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json", **(headers or {})},
        )

    return httpx.MockTransport(handler)


def raising_transport(exc_type: type[httpx.HTTPError]) -> httpx.MockTransport:
    """MockTransport whose every request fails with ``exc_type``."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("simulated failure", request=request)

    return httpx.MockTransport(handler)


def slow_transport(delay: float) -> httpx.MockTransport:
    """MockTransport that answers only after sleeping ``delay`` seconds."""

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(delay)
        return httpx.Response(200, json={})

    return httpx.MockTransport(handler)


@pytest.fixture()
def serpapi_payload() -> Callable[..., dict[str, Any]]:
    """Factory for SerpAPI-shaped responses."""

    def _make(snippets: Optional[list[tuple[str, str]]] = None, related: Optional[list[str]] = None):
        snippets = snippets or [
            ("Coffee Makers Guide", "Learn how to pick a coffee maker."),
            ("Top Coffee Makers", "We tested the top coffee makers of the year."),
            ("Coffee Maker Reviews", "Honest reviews of drip and espresso machines."),
        ]
        return {
            "organic_results": [
                {"title": title, "link": f"https://site{i}.example/{i}", "snippet": snippet}
                for i, (title, snippet) in enumerate(snippets, start=1)
            ],
            "related_searches": [{"query": q} for q in (related or [])],
        }

    return _make


@pytest.fixture()
def engine(tmp_path, rng):
    """WorkflowEngine exporting into a temporary directory."""
    from seo_studio.workflows import WorkflowEngine
    return WorkflowEngine(config={"export": {"directory": str(tmp_path / "exports")}}, rng=rng)
