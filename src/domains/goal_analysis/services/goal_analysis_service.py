"""Real-time goal analysis: debounced, single-flight pipeline publishing state updates."""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from src.domains.goal_analysis.core.quality import assess_readiness, score_text_quality
from src.domains.goal_analysis.core.ranking import compute_visibility_changes, rank_suggestions
from src.domains.goal_analysis.services.keyword_matcher import KeywordMatcher
from src.models.analysis_state import AnalysisState, AnalysisUpdate
from src.models.category import CategoryKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from src.models.analysis_result import AnalysisResult
    from src.models.analysis_state import VisibilityChange
    from src.models.config import AnalysisConfig
    from src.models.keyword_match import KeywordMatch
    from src.models.quality_assessment import QualityAssessment

logger = structlog.get_logger(__name__)


def _log_warm_up_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("vocabulary_warm_up_failed", error=str(exc))


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Counters describing the analyses published so far."""

    total_analyses: int
    average_processing_time: float
    last_confidence: float


class GoalAnalysisService:
    """Drives keyword analysis from a stream of text changes.

    ``analyze`` debounces: each call cancels the pending request and starts a
    new quiet-period timer, so only the latest text is analyzed. Every request
    (debounced or forced) takes a new generation number, and a result is only
    published if its generation is still the latest when it completes.

    The service is the single writer of the current state, result and
    suggestions. Each transition is pushed onto ``updates`` as an immutable
    ``AnalysisUpdate`` for the host to consume.
    """

    def __init__(
        self,
        matcher: KeywordMatcher | None = None,
        config: AnalysisConfig | None = None,
    ) -> None:
        if config is None:
            config = matcher.config if matcher is not None else None
        self.matcher = matcher or KeywordMatcher(config=config)
        self.config = config or self.matcher.config
        self.updates: asyncio.Queue[AnalysisUpdate] = asyncio.Queue(
            maxsize=self.config.update_queue_size
        )

        self._state = AnalysisState.idle()
        self._current_update: AnalysisUpdate | None = None
        self._current_result: AnalysisResult | None = None
        self._history: deque[AnalysisUpdate] = deque(maxlen=self.config.history_limit)
        self._suggestions: tuple[str, ...] = ()
        self._selected: frozenset[str] = frozenset()
        self._last_analyzed_text: str | None = None
        # Update that settled the last analyzed text (completed or idle)
        self._settled_update: AnalysisUpdate | None = None

        self._generation = 0
        self._pending: asyncio.Task[None] | None = None
        self._warm_up_task: asyncio.Task[None] | None = None

        self._analysis_count = 0
        self._total_processing_time = 0.0

        # Preprocess the vocabulary in the background when constructed inside a loop
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None and not self.matcher.is_ready:
            self._warm_up_task = loop.create_task(self.matcher.warm_up())
            self._warm_up_task.add_done_callback(_log_warm_up_failure)

    # --- Observable state ---

    @property
    def current_state(self) -> AnalysisState:
        return self._state

    @property
    def current_update(self) -> AnalysisUpdate | None:
        return self._current_update

    @property
    def current_result(self) -> AnalysisResult | None:
        return self._current_result

    @property
    def history(self) -> tuple[AnalysisUpdate, ...]:
        return tuple(self._history)

    @property
    def selected_categories(self) -> frozenset[str]:
        return self._selected

    def current_suggestions(self) -> list[str]:
        """Contextual categories the host should currently display."""
        return list(self._suggestions)

    def should_show(self, category: str) -> bool:
        """Universal categories are always shown; contextual ones only while suggested."""
        definition = self.matcher.category(category)
        if definition is not None and definition.kind == CategoryKind.UNIVERSAL:
            return True
        return category in self._suggestions

    # --- Requests ---

    def analyze(self, text: str) -> None:
        """Schedule a debounced analysis of ``text``. Must be called from a running loop."""
        loop = asyncio.get_running_loop()
        self._cancel_pending()
        self._generation += 1
        self._pending = loop.create_task(self._debounced_analysis(text, self._generation))

    async def force_analyze(self, text: str) -> AnalysisResult | None:
        """Analyze immediately, superseding any pending or in-flight request.

        Returns None when the text is too short, the analysis failed, or a
        newer request superseded this one before it finished.
        """
        self._cancel_pending()
        self._generation += 1
        return await self._run_analysis(text, self._generation)

    async def wait_for_pending(self) -> None:
        """Wait until the latest debounced request has been handled."""
        while self._pending is not None and not self._pending.done():
            await asyncio.wait({self._pending})

    def update_selections(self, categories: Iterable[str]) -> dict[str, VisibilityChange]:
        """Record the user's selected categories and re-rank the current suggestions.

        Returns the visibility changes, which are also published as an update.
        """
        self._selected = frozenset(categories)
        result = self._current_result
        if result is None:
            return {}

        suggestions = self._rank(result.matches, len(result.original_text))
        changes = compute_visibility_changes(self._suggestions, suggestions)
        self._suggestions = tuple(suggestions)
        if changes:
            previous = self._current_update
            self._publish(
                AnalysisUpdate(
                    text=result.original_text,
                    state=self._state,
                    quality_score=previous.quality_score if previous else 0.0,
                    processing_time=previous.processing_time if previous else 0.0,
                    suggestions=self._suggestions,
                    visibility_changes=changes,
                )
            )
        return changes

    def quality_assessment(self, current_selections: Iterable[str]) -> QualityAssessment:
        """Readiness of the current goal text combined with ``current_selections``."""
        result = self._current_result
        if result is not None:
            text = result.original_text
            matches: Sequence[KeywordMatch] = result.matches
        else:
            text = self._last_analyzed_text or ""
            matches = ()
        return assess_readiness(
            text,
            matches,
            frozenset(current_selections),
            self.matcher.categories,
            self.config.readiness_threshold,
        )

    def reset(self) -> None:
        """Clear state, history, selections and pending work. The result cache is kept."""
        self._cancel_pending()
        self._generation += 1
        changes = compute_visibility_changes(self._suggestions, ())

        self._current_result = None
        self._history.clear()
        self._suggestions = ()
        self._selected = frozenset()
        self._last_analyzed_text = None
        self._settled_update = None
        self._publish(AnalysisUpdate(text="", state=AnalysisState.idle(), visibility_changes=changes))
        self._current_update = None
        logger.info("analysis_reset")

    def close(self) -> None:
        """Cancel pending work and vocabulary warm-up.

        An analysis interrupted mid-flight hands the state back to the last
        settled analysis rather than leaving it analyzing.
        """
        self._cancel_pending()
        self._generation += 1
        if self._warm_up_task is not None and not self._warm_up_task.done():
            self._warm_up_task.cancel()
        self._warm_up_task = None
        self._restore_settled_state()

    def get_analytics(self) -> AnalyticsSnapshot:
        average = (
            self._total_processing_time / self._analysis_count if self._analysis_count else 0.0
        )
        return AnalyticsSnapshot(
            total_analyses=self._analysis_count,
            average_processing_time=average,
            last_confidence=self._state.confidence,
        )

    # --- Pipeline ---

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _rank(self, matches: Sequence[KeywordMatch], text_length: int) -> list[str]:
        return rank_suggestions(
            matches,
            self._selected,
            text_length,
            max_suggested_chips=self.config.max_suggested_chips,
            text_length_thresholds=self.config.disclosure_text_length_thresholds,
            selection_thresholds=self.config.disclosure_selection_thresholds,
        )

    def _publish(self, update: AnalysisUpdate) -> None:
        self._state = update.state
        self._current_update = update
        # Hosts that never drain the queue only lose the oldest updates
        if self.updates.full():
            self.updates.get_nowait()
            logger.debug("update_dropped", queue_size=self.updates.maxsize)
        self.updates.put_nowait(update)

    def _restore_settled_state(self) -> None:
        """Republish the state of the last settled analysis if a later one never finished."""
        if not self._state.is_analyzing:
            return
        settled = self._settled_update
        state = settled.state if settled is not None else AnalysisState.idle()
        self._publish(
            AnalysisUpdate(
                text=settled.text if settled is not None else "",
                state=state,
                quality_score=settled.quality_score if settled is not None else 0.0,
                processing_time=settled.processing_time if settled is not None else 0.0,
                suggestions=self._suggestions,
            )
        )

    async def _debounced_analysis(self, text: str, generation: int) -> None:
        await asyncio.sleep(self.config.debounce_interval)
        if not self._is_current(generation):
            return
        if text == self._last_analyzed_text:
            logger.debug("duplicate_text_skipped", text_length=len(text))
            self._restore_settled_state()
            return
        await self._run_analysis(text, generation)

    async def _run_analysis(self, text: str, generation: int) -> AnalysisResult | None:
        if len(text) < self.config.min_text_length:
            self._handle_short_text(text)
            return None

        self._publish(
            AnalysisUpdate(text=text, state=AnalysisState.analyzing(), suggestions=self._suggestions)
        )

        try:
            result = await self.matcher.analyze_text(text)
            quality_score = score_text_quality(text, result.matches)
            suggestions = self._rank(result.matches, len(text))
        except asyncio.CancelledError:
            # A superseding request publishes its own outcome
            if self._is_current(generation):
                self._restore_settled_state()
            raise
        except Exception as exc:
            if not self._is_current(generation):
                return None
            logger.error("analysis_failed", text_length=len(text), error=str(exc))
            # Previous suggestions stay visible; the next text change retries
            self._publish(
                AnalysisUpdate(
                    text=text,
                    state=AnalysisState.error(str(exc) or type(exc).__name__),
                    suggestions=self._suggestions,
                )
            )
            return None

        if not self._is_current(generation):
            logger.debug("stale_analysis_discarded", text_length=len(text))
            return None

        changes = compute_visibility_changes(self._suggestions, suggestions)
        self._suggestions = tuple(suggestions)
        self._current_result = result
        self._last_analyzed_text = text
        self._analysis_count += 1
        self._total_processing_time += result.processing_time

        update = AnalysisUpdate(
            text=text,
            state=AnalysisState.completed(result.confidence),
            quality_score=quality_score,
            processing_time=result.processing_time,
            suggestions=self._suggestions,
            visibility_changes=changes,
        )
        self._history.append(update)
        self._settled_update = update
        self._publish(update)
        logger.info(
            "analysis_completed",
            text_length=len(text),
            matches=len(result.matches),
            confidence=round(result.confidence, 3),
            suggestions=list(self._suggestions),
        )
        return result

    def _handle_short_text(self, text: str) -> None:
        changes = compute_visibility_changes(self._suggestions, ())
        self._suggestions = ()
        self._current_result = None
        self._last_analyzed_text = text
        update = AnalysisUpdate(text=text, state=AnalysisState.idle(), visibility_changes=changes)
        self._settled_update = update
        self._publish(update)
