"""Keyword matcher service: vocabulary lifecycle, cached analysis and worker offload."""

from __future__ import annotations

import asyncio
import threading
import time
from typing import TYPE_CHECKING

import structlog

from src.domains.goal_analysis.core.matching import find_keyword_matches
from src.domains.goal_analysis.core.quality import calculate_overall_confidence
from src.domains.goal_analysis.core.ranking import rank_categories
from src.domains.goal_analysis.core.text_normalization import normalize_with_offsets
from src.domains.goal_analysis.core.vocabulary import (
    DEFAULT_CATEGORIES,
    build_vocabulary,
    validate_categories,
)
from src.domains.goal_analysis.services.result_cache import ResultCache
from src.models.analysis_result import AnalysisResult
from src.models.config import AnalysisConfig

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from src.domains.goal_analysis.core.vocabulary import KeywordDescriptor
    from src.models.category import Category

logger = structlog.get_logger(__name__)


class KeywordMatcher:
    """Analyzes goal text against a preprocessed vocabulary.

    The category list is validated eagerly so an empty vocabulary fails at
    construction. Preprocessing itself is deferred: ``warm_up`` builds it in a
    worker thread, and every analysis waits for it to exist.
    """

    def __init__(
        self,
        categories: Iterable[Category] = DEFAULT_CATEGORIES,
        config: AnalysisConfig | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.categories: tuple[Category, ...] = validate_categories(categories)
        self.cache = cache or ResultCache(
            capacity=self.config.cache_capacity,
            ttl=self.config.cache_ttl,
        )
        self._vocabulary: Mapping[str, tuple[KeywordDescriptor, ...]] | None = None
        self._vocabulary_lock = threading.Lock()

    # --- Vocabulary lifecycle ---

    @property
    def is_ready(self) -> bool:
        return self._vocabulary is not None

    @property
    def vocabulary(self) -> Mapping[str, tuple[KeywordDescriptor, ...]]:
        """The preprocessed vocabulary, built on first access if needed (blocking)."""
        return self._ensure_vocabulary()

    def _ensure_vocabulary(self) -> Mapping[str, tuple[KeywordDescriptor, ...]]:
        vocabulary = self._vocabulary
        if vocabulary is not None:
            return vocabulary
        with self._vocabulary_lock:
            if self._vocabulary is None:
                start = time.perf_counter()
                self._vocabulary = build_vocabulary(self.categories)
                logger.info(
                    "vocabulary_ready",
                    categories=len(self._vocabulary),
                    elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
                )
            return self._vocabulary

    async def wait_until_ready(self) -> Mapping[str, tuple[KeywordDescriptor, ...]]:
        """Await the vocabulary without blocking the event loop."""
        if self._vocabulary is not None:
            return self._vocabulary
        return await asyncio.to_thread(self._ensure_vocabulary)

    async def warm_up(self) -> None:
        """Build the vocabulary ahead of the first analysis."""
        await self.wait_until_ready()

    def category(self, name: str) -> Category | None:
        """Look up a category definition by name."""
        for category in self.categories:
            if category.name == name:
                return category
        return None

    # --- Analysis ---

    def compute(self, text: str) -> AnalysisResult:
        """Run the full analysis for ``text`` without touching the cache."""
        start = time.perf_counter()
        normalized = normalize_with_offsets(text)
        matches = find_keyword_matches(
            normalized,
            text,
            self._ensure_vocabulary(),
            enable_fuzzy=self.config.enable_fuzzy_matching,
            max_fuzzy_distance=self.config.max_fuzzy_distance,
            min_keyword_length=self.config.min_keyword_length,
            min_confidence=self.config.min_confidence_threshold,
            context_length=self.config.context_length,
        )
        suggested = rank_categories(matches)[: self.config.max_suggested_chips]
        result = AnalysisResult(
            original_text=text,
            normalized_text=normalized.text,
            matches=tuple(matches),
            suggested_categories=tuple(suggested),
            confidence=calculate_overall_confidence(matches),
            processing_time=time.perf_counter() - start,
        )
        logger.debug(
            "text_analyzed",
            text_length=len(text),
            matches=len(matches),
            suggested=list(suggested),
            processing_ms=round(result.processing_time * 1000, 3),
        )
        return result

    def analyze(self, text: str) -> AnalysisResult:
        """Analyze synchronously, serving fresh cached results when available."""
        cached = self.cache.get(text)
        if cached is not None:
            return cached
        result = self.compute(text)
        self.cache.put(text, result)
        return result

    async def analyze_text(self, text: str) -> AnalysisResult:
        """Analyze on a worker thread, serving fresh cached results when available."""
        cached = self.cache.get(text)
        if cached is not None:
            logger.debug("analysis_cache_hit", text_length=len(text))
            return cached
        await self.wait_until_ready()
        result = await asyncio.to_thread(self.compute, text)
        self.cache.put(text, result)
        return result

    async def get_suggested_categories(self, text: str) -> list[str]:
        """Categories suggested for ``text``, most relevant first."""
        result = await self.analyze_text(text)
        return list(result.suggested_categories)

    def contains_keywords(self, category: str, text: str) -> bool:
        """Quick check whether any trigger phrase of ``category`` occurs in ``text``."""
        descriptors = self.vocabulary.get(category, ())
        normalized = normalize_with_offsets(text).text
        return any(d.normalized in normalized for d in descriptors)

    def relevance_score(self, category: str, text: str) -> float:
        """Best match confidence for ``category`` scaled by its tier weight (0.0-1.0)."""
        definition = self.category(category)
        if definition is None:
            return 0.0
        best = self.analyze(text).best_matches_by_category().get(category)
        if best is None:
            return 0.0
        return min(1.0, best.confidence * definition.tier.weight)

    # --- Cache management ---

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> dict[str, int | float]:
        return self.cache.stats()
