"""Contract tests for the goal analysis services.

ResultCache runs against a fake clock; KeywordMatcher runs against the real
matching engine over the sample vocabulary from conftest.
"""

from __future__ import annotations

import pytest

from src.domains.goal_analysis.core.vocabulary import EmptyVocabularyError
from src.domains.goal_analysis.services.keyword_matcher import KeywordMatcher
from src.domains.goal_analysis.services.result_cache import ResultCache
from src.models.analysis_result import AnalysisResult
from src.models.category import Category, CategoryKind, ImportanceTier
from src.models.config import AnalysisConfig

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _result(text: str) -> AnalysisResult:
    return AnalysisResult(original_text=text, normalized_text=text.lower())


# ===================================================================
# ResultCache
# ===================================================================


class TestResultCache:
    """Tests for the LRU + TTL result cache."""

    def test_miss_then_hit(self) -> None:
        cache = ResultCache()
        result = _result("home")

        assert cache.get("home") is None
        cache.put("home", result)
        assert cache.get("home") is result

        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["size"] == 1

    def test_keyed_by_exact_text(self) -> None:
        cache = ResultCache()
        cache.put("Home", _result("Home"))
        assert cache.get("home") is None
        assert "Home" in cache

    def test_entry_fresh_until_ttl_elapses(self) -> None:
        clock = FakeClock()
        cache = ResultCache(ttl=300.0, clock=clock)
        cache.put("home", _result("home"))

        clock.advance(300.0)
        assert cache.get("home") is not None

        clock.advance(0.5)
        assert cache.get("home") is None
        assert "home" not in cache
        assert cache.stats()["expirations"] == 1

    def test_put_refreshes_timestamp(self) -> None:
        clock = FakeClock()
        cache = ResultCache(ttl=10.0, clock=clock)
        cache.put("home", _result("home"))
        clock.advance(8.0)
        cache.put("home", _result("home"))
        clock.advance(8.0)
        assert cache.get("home") is not None

    def test_least_recently_used_evicted(self) -> None:
        cache = ResultCache(capacity=2)
        cache.put("a", _result("a"))
        cache.put("b", _result("b"))
        cache.get("a")
        cache.put("c", _result("c"))

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2
        assert cache.stats()["evictions"] == 1

    def test_clear(self) -> None:
        cache = ResultCache()
        cache.put("a", _result("a"))
        cache.clear()
        assert len(cache) == 0

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError, match="capacity must be >= 1"):
            ResultCache(capacity=0)


# ===================================================================
# KeywordMatcher
# ===================================================================


class TestKeywordMatcherConstruction:
    """Tests for vocabulary validation and lazy preprocessing."""

    def test_empty_vocabulary_rejected(self) -> None:
        with pytest.raises(EmptyVocabularyError):
            KeywordMatcher(categories=[])

    def test_vocabulary_without_phrases_rejected(self) -> None:
        with pytest.raises(EmptyVocabularyError):
            KeywordMatcher(categories=[Category(name="sex", kind=CategoryKind.UNIVERSAL)])

    def test_vocabulary_built_lazily(self, matcher: KeywordMatcher) -> None:
        assert matcher.is_ready is False
        vocabulary = matcher.vocabulary
        assert matcher.is_ready is True
        assert set(vocabulary) == {
            "fitness_level",
            "location",
            "limitations",
            "equipment",
            "experience",
        }
        assert matcher.vocabulary is vocabulary

    def test_cache_sized_from_config(self, sample_categories: tuple[Category, ...]) -> None:
        config = AnalysisConfig(cache_capacity=7, cache_ttl=12.0)
        matcher = KeywordMatcher(categories=sample_categories, config=config)
        assert matcher.cache.capacity == 7
        assert matcher.cache.ttl == 12.0

    def test_category_lookup(self, matcher: KeywordMatcher) -> None:
        category = matcher.category("location")
        assert category is not None
        assert category.tier == ImportanceTier.CRITICAL
        assert matcher.category("unknown") is None


class TestKeywordMatcherAnalysis:
    """Tests for synchronous analysis and the helper queries."""

    def test_compute(self, matcher: KeywordMatcher) -> None:
        result = matcher.compute("I want to work out at home")
        assert result.normalized_text == "i want to work out at home"
        assert [m.keyword for m in result.matches] == ["home"]
        assert result.suggested_categories == ("location",)
        # mean confidence plus one category of diversity bonus
        assert result.confidence == pytest.approx(0.95 * (1.0 + 4 / 15) / 2 + 0.05)
        assert result.processing_time >= 0.0

    def test_suggested_categories_capped(self, sample_categories: tuple[Category, ...]) -> None:
        config = AnalysisConfig(max_suggested_chips=1)
        matcher = KeywordMatcher(categories=sample_categories, config=config)
        result = matcher.compute("back pain at home with resistance bands")
        assert len(result.matches) == 3
        assert result.suggested_categories == ("equipment",)

    def test_no_matches(self, matcher: KeywordMatcher) -> None:
        result = matcher.compute("xyz123")
        assert result.matches == ()
        assert result.suggested_categories == ()
        assert result.confidence == 0.0

    def test_analyze_caches_result(self, matcher: KeywordMatcher) -> None:
        first = matcher.analyze("I train at home")
        second = matcher.analyze("I train at home")
        assert second is first
        assert matcher.cache_stats()["hits"] == 1

    def test_clear_cache(self, matcher: KeywordMatcher) -> None:
        first = matcher.analyze("I train at home")
        matcher.clear_cache()
        assert matcher.analyze("I train at home") is not first

    def test_fuzzy_matching_can_be_disabled(self, sample_categories: tuple[Category, ...]) -> None:
        loose = AnalysisConfig(min_confidence_threshold=0.0)
        strict = AnalysisConfig(min_confidence_threshold=0.0, enable_fuzzy_matching=False)
        text = "I have dumbells"

        with_fuzzy = KeywordMatcher(categories=sample_categories, config=loose).compute(text)
        without = KeywordMatcher(categories=sample_categories, config=strict).compute(text)

        assert "dumbbells" in [m.keyword for m in with_fuzzy.matches]
        assert "dumbbells" not in [m.keyword for m in without.matches]

    def test_contains_keywords(self, matcher: KeywordMatcher) -> None:
        assert matcher.contains_keywords("location", "Working out at HOME") is True
        assert matcher.contains_keywords("limitations", "Working out at HOME") is False
        assert matcher.contains_keywords("unknown", "home") is False

    def test_relevance_score(self, matcher: KeywordMatcher) -> None:
        expected = 0.95 * (1.0 + 4 / 15) / 2 * ImportanceTier.CRITICAL.weight
        assert matcher.relevance_score("location", "I train at home") == pytest.approx(expected)
        assert matcher.relevance_score("limitations", "I train at home") == 0.0
        assert matcher.relevance_score("unknown", "I train at home") == 0.0


class TestKeywordMatcherAsync:
    """Tests for the worker-thread analysis path."""

    @pytest.mark.asyncio
    async def test_analyze_text_waits_for_vocabulary(self, matcher: KeywordMatcher) -> None:
        result = await matcher.analyze_text("my back pain")
        assert matcher.is_ready is True
        assert result.suggested_categories == ("limitations",)

    @pytest.mark.asyncio
    async def test_analyze_text_uses_cache(self, matcher: KeywordMatcher) -> None:
        first = await matcher.analyze_text("my back pain")
        second = await matcher.analyze_text("my back pain")
        assert second is first
        assert "my back pain" in matcher.cache

    @pytest.mark.asyncio
    async def test_warm_up(self, matcher: KeywordMatcher) -> None:
        await matcher.warm_up()
        assert matcher.is_ready is True

    @pytest.mark.asyncio
    async def test_get_suggested_categories(self, matcher: KeywordMatcher) -> None:
        suggestions = await matcher.get_suggested_categories("back pain at home")
        assert suggestions == ["limitations", "location"]
