"""Tests for text processing, helpers, validators and the TTL cache."""

import pytest

from seo_studio.utils.cache import TTLCache
from seo_studio.utils.helpers import clamp, dedupe, hyphenate
from seo_studio.utils.text_processing import (
    calculate_keyword_density,
    calculate_readability,
    contains_phrase,
    count_words,
    jaccard_similarity,
    top_terms,
)
from seo_studio.utils.validators import validate_keyword, validate_market


class TestTextProcessing:

    def test_count_words(self):
        assert count_words("Hello world, this is a test.") == 6
        assert count_words("") == 0

    def test_keyword_density_whole_words(self):
        result = calculate_keyword_density("foo foo bar", "foo")
        assert result == {"density_pct": 66.67, "count": 2, "total_words": 3}

    def test_keyword_density_ignores_partial_matches(self):
        assert calculate_keyword_density("foobar barfoo", "foo")["count"] == 0
        assert calculate_keyword_density("foobar foo", "foo")["count"] == 1

    def test_keyword_density_multi_word(self):
        text = "Best coffee makers are the best coffee makers. Coffee, makers!"
        result = calculate_keyword_density(text, "best coffee makers")
        assert result["count"] == 2
        assert result["total_words"] == 10
        assert result["density_pct"] == 20.0

    def test_keyword_density_empty(self):
        assert calculate_keyword_density("", "seo")["density_pct"] == 0.0
        assert calculate_keyword_density("some text", "  ")["count"] == 0

    def test_contains_phrase(self):
        assert contains_phrase("Try our SEO Tools today", "seo tools")
        assert not contains_phrase("Try our SEO Toolset today", "seo tools")

    def test_calculate_readability(self):
        scores = calculate_readability("The cat sat on the mat. It was a sunny day.")
        assert set(scores) == {"flesch_reading_ease", "flesch_kincaid_grade", "automated_readability_index"}
        assert 0 <= scores["flesch_reading_ease"] <= 100

    def test_jaccard_similarity(self):
        assert jaccard_similarity("a b", "b c") == pytest.approx(1 / 3)
        assert jaccard_similarity("Email Marketing", "email marketing") == 1.0
        assert jaccard_similarity("", "") == 0.0

    def test_top_terms_skip_stop_words_and_short_words(self):
        terms = top_terms(["coffee makers with timers", "coffee grinders and coffee makers"])
        assert terms[0] == "coffee"
        assert "with" not in terms
        assert "and" not in terms
        assert "makers" in terms


class TestHelpers:

    def test_dedupe_case_insensitive_keeps_order(self):
        assert dedupe(["SEO", "seo", " tips ", "", "Tips", "guide"]) == ["SEO", "tips", "guide"]

    def test_dedupe_limit(self):
        assert dedupe(["a", "b", "c", "d"], limit=2) == ["a", "b"]

    def test_hyphenate(self):
        assert hyphenate("  Best  Coffee Makers ") == "best-coffee-makers"

    def test_clamp(self):
        assert clamp(120, 0, 100) == 100
        assert clamp(-3, 0, 100) == 0
        assert clamp(42, 0, 100) == 42


class TestValidators:

    @pytest.mark.parametrize("keyword,ok", [
        ("seo tools", True),
        ("", False),
        ("   ", False),
        ("?!", False),
        ("x" * 201, False),
        (None, False),
    ])
    def test_validate_keyword(self, keyword, ok):
        valid, error = validate_keyword(keyword)
        assert valid is ok
        assert (error == "") is ok

    @pytest.mark.parametrize("country,language,ok", [
        ("us", "en", True),
        ("GB", "en-gb", True),
        ("usa", "en", False),
        ("us", "english", False),
        ("", "en", False),
    ])
    def test_validate_market(self, country, language, ok):
        assert validate_market(country, language)[0] is ok


class TestTTLCache:

    def _clock(self):
        state = {"now": 0.0}
        return state, lambda: state["now"]

    def test_get_set_and_expiry(self):
        state, clock = self._clock()
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", 1)
        state["now"] = 9.9
        assert cache.get("k") == 1
        assert "k" in cache
        state["now"] = 10.0
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_evicts_oldest_when_full(self):
        state, clock = self._clock()
        cache = TTLCache(ttl_seconds=100, max_size=2, clock=clock)
        cache.set("a", 1)
        state["now"] = 1
        cache.set("b", 2)
        state["now"] = 2
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_overwrite_is_last_writer_wins(self):
        cache = TTLCache()
        cache.set("k", "first")
        cache.set("k", "second")
        assert cache.get("k") == "second"
        assert len(cache) == 1

    def test_values_drop_expired_entries(self):
        state, clock = self._clock()
        cache = TTLCache(ttl_seconds=5, clock=clock)
        cache.set("old", 1)
        state["now"] = 4
        cache.set("new", 2)
        state["now"] = 6
        assert cache.values() == [2]

    def test_evict_and_clear(self):
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.evict("a") is True
        assert cache.evict("a") is False
        cache.clear()
        assert len(cache) == 0
