"""Tests for keyword estimation, query expansion and the keyword analyzer."""

import random
from datetime import date

import pytest

from conftest import json_transport
from seo_studio.exceptions import ValidationError
from seo_studio.integrations.keyword_volume import KeywordVolumeClient
from seo_studio.models import Competition, Intent, JourneyStage, Trend, make_cache_key
from seo_studio.modules.keyword_research import (
    KeywordAnalyzer,
    KeywordEstimator,
    QueryExpander,
    classify_stage,
    intent_for_stage,
)
from seo_studio.utils.cache import TTLCache


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# ===========================================================================
# 1. KeywordEstimator
# ===========================================================================
class TestKeywordEstimator:

    @pytest.mark.parametrize("keyword", [
        "", "seo", "best coffee makers", "buy cheap running shoes online 2024",
        "how to write a blog post that ranks on page one", "price?!", "a" * 200,
    ])
    def test_difficulty_and_volume_bounds(self, keyword):
        estimator = KeywordEstimator(rng=random.Random(7))
        for _ in range(25):
            assert 10 <= estimator.estimate_difficulty(keyword) <= 100
            assert estimator.estimate_volume(keyword) >= 10

    def test_head_terms_outrank_long_tail(self):
        estimator = KeywordEstimator(rng=random.Random(0))
        head = estimator.estimate_volume("seo")
        tail = estimator.estimate_volume("how to choose seo software for a small agency")
        assert head > tail

    @pytest.mark.parametrize("keyword,expected", [
        ("buy running shoes", Intent.TRANSACTIONAL),
        ("coffee maker price", Intent.TRANSACTIONAL),
        ("order pizza", Intent.TRANSACTIONAL),
        ("best coffee makers", Intent.COMMERCIAL),
        ("notion vs evernote", Intent.COMMERCIAL),
        ("how to brew espresso", Intent.INFORMATIONAL),
        ("where to surf", Intent.INFORMATIONAL),
        ("facebook", Intent.NAVIGATIONAL),
    ])
    def test_classify_intent(self, keyword, expected):
        assert KeywordEstimator.classify_intent(keyword) is expected

    def test_transactional_checked_before_commercial(self):
        assert KeywordEstimator.classify_intent("best price laptops") is Intent.TRANSACTIONAL

    @pytest.mark.parametrize("difficulty,expected", [
        (71, Competition.HIGH), (70, Competition.MEDIUM), (41, Competition.MEDIUM),
        (40, Competition.LOW), (10, Competition.LOW),
    ])
    def test_competition_level(self, difficulty, expected):
        assert KeywordEstimator.competition_level(difficulty) is expected

    def test_cpc_range(self, rng):
        estimator = KeywordEstimator(rng=rng)
        for _ in range(50):
            assert 0.5 <= estimator.estimate_cpc("seo tools") <= 3.5
            assert 0.75 <= estimator.estimate_cpc("cheap seo tools") <= 5.25

    def test_trend_and_seasonality(self, rng):
        estimator = KeywordEstimator(rng=rng)
        assert estimator.analyze_trend("ai writing tools") is Trend.RISING
        assert estimator.analyze_trend("garden hose") in (Trend.STABLE, Trend.DECLINING)
        assert KeywordEstimator.analyze_seasonality("christmas lights") == "winter_peak"
        assert KeywordEstimator.analyze_seasonality("tax software") == "spring_peak"
        assert KeywordEstimator.analyze_seasonality("garden hose") == "stable"

    def test_relevance_is_word_overlap(self):
        assert KeywordEstimator.relevance("coffee makers", "best coffee makers") == 67
        assert KeywordEstimator.relevance("coffee", "tea") == 0

    def test_find_opportunities(self, rng):
        estimator = KeywordEstimator(rng=rng)
        found = estimator.find_opportunities(
            "best remote project management tools", 20, Intent.COMMERCIAL, Trend.RISING,
        )
        assert found == [
            "Low competition opportunity",
            "Long-tail keyword potential",
            "High conversion potential",
            "Trending topic opportunity",
        ]
        assert estimator.find_opportunities("seo", 60, Intent.NAVIGATIONAL, Trend.STABLE) == [
            "Content optimization", "SERP analysis recommended",
        ]

    def test_seeded_estimates_are_reproducible(self):
        first = KeywordEstimator(rng=random.Random(99)).estimate("seo tools")
        second = KeywordEstimator(rng=random.Random(99)).estimate("seo tools")
        assert first == second


# ===========================================================================
# 2. QueryExpander
# ===========================================================================
class TestQueryExpander:

    def test_expand_excludes_keyword_and_is_distinct(self, rng):
        variants = QueryExpander(rng=rng).expand("coffee makers")
        lowered = [v.lower() for v in variants]
        assert "coffee makers" not in lowered
        assert len(lowered) == len(set(lowered))
        assert "best coffee makers" in variants
        assert "coffee makers guide" in variants
        assert "free coffee makers" in variants and "coffee makers free" in variants
        assert "coffee" in variants and "makers" in variants

    def test_expand_single_word_has_no_removal_variants(self, rng):
        variants = QueryExpander(rng=rng).expand("seo")
        assert len(variants) == 7 + 8 + 12
        assert all("seo" in v for v in variants)

    def test_expand_empty(self, rng):
        assert QueryExpander(rng=rng).expand("   ") == []

    def test_related_keywords_sorted_by_relevance(self, rng):
        related = QueryExpander(rng=rng).related_keywords("coffee makers", limit=10)
        assert len(related) == 10
        relevances = [r.relevance for r in related]
        assert relevances == sorted(relevances, reverse=True)

    @pytest.mark.parametrize("query,stage", [
        ("buy coffee makers", JourneyStage.DECISION),
        ("coffee makers price", JourneyStage.DECISION),
        ("best coffee makers", JourneyStage.CONSIDERATION),
        ("coffee makers vs french press", JourneyStage.CONSIDERATION),
        ("what is a coffee maker", JourneyStage.AWARENESS),
    ])
    def test_classify_stage(self, query, stage):
        assert classify_stage(query) is stage

    def test_intent_for_stage(self):
        assert intent_for_stage(JourneyStage.AWARENESS) is Intent.INFORMATIONAL
        assert intent_for_stage(JourneyStage.CONSIDERATION) is Intent.COMMERCIAL
        assert intent_for_stage(JourneyStage.DECISION) is Intent.TRANSACTIONAL

    def test_seasonal_modifiers_wrap_year(self):
        modifiers = QueryExpander.seasonal_modifiers(date(2026, 12, 5))
        assert modifiers[0] == "december"
        assert "new year" in modifiers

    def test_fan_out_invariants(self, rng, make_analysis):
        expander = QueryExpander(rng=rng)
        analysis = make_analysis(
            "coffee makers", related=["best coffee makers", "coffee makers guide"],
        )
        queries = expander.fan_out("coffee makers", analysis, today=date(2026, 6, 1))

        assert 0 < len(queries) <= 30
        volumes = [q.search_volume for q in queries]
        assert volumes == sorted(volumes, reverse=True)
        texts = [q.query.lower() for q in queries]
        assert len(texts) == len(set(texts))
        for q in queries:
            assert q.stage is classify_stage(q.query)
            assert q.intent is intent_for_stage(q.stage)
            assert 0 <= q.difficulty <= 100
            assert q.search_volume >= 0

    def test_fan_out_keeps_analysis_related_keywords(self, rng, make_analysis):
        analysis = make_analysis("coffee makers", related=["coffee makers guide"])
        queries = QueryExpander(rng=rng).fan_out("coffee makers", analysis, today=date(2026, 6, 1))
        kept = [q for q in queries if q.query == "coffee makers guide"]
        assert len(kept) == 1
        assert kept[0].source == "keyword_analysis"

    def test_fallback_fan_out(self, rng):
        queries = QueryExpander(rng=rng).fallback_fan_out("crm software")
        assert len(queries) == 20
        assert {q.source for q in queries} == {"fallback"}
        for q in queries:
            assert 100 <= q.search_volume <= 5099
            assert 20 <= q.difficulty <= 99
            assert q.intent is intent_for_stage(q.stage)


# ===========================================================================
# 3. KeywordAnalyzer
# ===========================================================================
class TestKeywordAnalyzer:

    @pytest.mark.asyncio
    async def test_analysis_is_cached_per_market(self, rng):
        analyzer = KeywordAnalyzer(rng=rng)
        first = await analyzer.analyze_keyword("SEO tools")
        again = await analyzer.analyze_keyword("  seo   tools ")
        other_market = await analyzer.analyze_keyword("seo tools", country="gb")

        assert again is first
        assert other_market is not first
        assert other_market.country == "gb"
        assert first.source == "live_analysis"
        assert 10 <= first.difficulty <= 100
        assert len(first.related_keywords) <= 10

    @pytest.mark.asyncio
    async def test_cache_expires_after_ttl(self, rng):
        clock = FakeClock()
        analyzer = KeywordAnalyzer(rng=rng, cache=TTLCache(ttl_seconds=3600, clock=clock))
        first = await analyzer.analyze_keyword("seo tools")
        clock.now += 3599
        assert await analyzer.analyze_keyword("seo tools") is first
        clock.now += 2
        assert await analyzer.analyze_keyword("seo tools") is not first

    @pytest.mark.asyncio
    @pytest.mark.parametrize("keyword", ["", "   ", "!!!"])
    async def test_invalid_keyword_raises(self, rng, keyword):
        with pytest.raises(ValidationError):
            await KeywordAnalyzer(rng=rng).analyze_keyword(keyword)

    @pytest.mark.asyncio
    async def test_invalid_market_raises(self, rng):
        with pytest.raises(ValidationError):
            await KeywordAnalyzer(rng=rng).analyze_keyword("seo", country="usa")

    @pytest.mark.asyncio
    async def test_live_volume_used_when_configured(self, rng):
        requests = []
        client = KeywordVolumeClient(
            api_key="kt-key", transport=json_transport({"volume": 12345}, requests=requests),
        )
        analysis = await KeywordAnalyzer(rng=rng, volume_client=client).analyze_keyword("seo")
        assert analysis.search_volume == 12345
        assert requests[0].headers["Authorization"] == "Bearer kt-key"

    @pytest.mark.asyncio
    async def test_volume_failure_falls_back_to_estimate(self, rng):
        client = KeywordVolumeClient(
            api_key="kt-key", transport=json_transport({"error": "down"}, status_code=503),
        )
        analysis = await KeywordAnalyzer(rng=rng, volume_client=client).analyze_keyword("seo")
        assert analysis.search_volume >= 10
        assert analysis.source == "live_analysis"

    @pytest.mark.asyncio
    async def test_unexpected_failure_uses_fallback(self, rng, monkeypatch):
        analyzer = KeywordAnalyzer(rng=rng)

        def broken(*args, **kwargs):
            raise RuntimeError("expander broke")

        monkeypatch.setattr(analyzer.expander, "related_keywords", broken)
        analysis = await analyzer.analyze_keyword("seo tools")
        assert analysis.source == "fallback"
        assert len(analysis.related_keywords) == 8

    @pytest.mark.asyncio
    async def test_analyze_many_skips_invalid(self, rng):
        analyses = await KeywordAnalyzer(rng=rng).analyze_many(["seo", "", "content"])
        assert [a.keyword for a in analyses] == ["seo", "content"]

    @pytest.mark.asyncio
    async def test_get_all_seeds_samples(self, rng):
        analyses = await KeywordAnalyzer(rng=rng).get_all()
        assert len(analyses) == 5

    @pytest.mark.asyncio
    async def test_update_and_delete(self, rng):
        analyzer = KeywordAnalyzer(rng=rng)
        original = await analyzer.analyze_keyword("seo tools")

        updated = analyzer.update(original.id, difficulty=12, id="ignored")
        assert updated is not None
        assert updated.id == original.id
        assert updated.difficulty == 12
        assert analyzer.get_by_id(original.id).difficulty == 12
        assert await analyzer.analyze_keyword("seo tools") is updated

        assert analyzer.update("missing", difficulty=1) is None
        assert analyzer.delete(original.id) is True
        assert analyzer.get_by_id(original.id) is None
        assert analyzer.delete(original.id) is False

    def test_cache_key_normalises_keyword(self):
        assert make_cache_key("  SEO Tools ", "US", "EN") == "seo tools-us-en"
