"""Suggestion ranking with progressive disclosure, and visibility diffs for the host UI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.models.analysis_state import VisibilityChange
from src.models.category import ImportanceTier

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from src.models.keyword_match import KeywordMatch

DEFAULT_MAX_SUGGESTED_CHIPS = 3
DEFAULT_TEXT_LENGTH_THRESHOLDS: tuple[int, int] = (50, 100)
DEFAULT_SELECTION_THRESHOLDS: tuple[int, int] = (2, 4)


def sum_confidence_by_category(matches: Iterable[KeywordMatch]) -> dict[str, float]:
    """Total match confidence per category, in order of first appearance."""
    totals: dict[str, float] = {}
    for match in matches:
        totals[match.category] = totals.get(match.category, 0.0) + match.confidence
    return totals


def rank_categories(matches: Iterable[KeywordMatch]) -> list[str]:
    """Categories ordered by summed match confidence, highest first."""
    totals = sum_confidence_by_category(matches)
    return sorted(totals, key=lambda category: totals[category], reverse=True)


def max_to_show(
    text_length: int,
    selected_count: int,
    text_length_thresholds: tuple[int, int] = DEFAULT_TEXT_LENGTH_THRESHOLDS,
    selection_thresholds: tuple[int, int] = DEFAULT_SELECTION_THRESHOLDS,
) -> int:
    """How many suggestions to reveal given the user's engagement so far.

    1 by default, 2 once the text exceeds the first length threshold or the
    selections exceed the first selection threshold, 3 past the second ones.
    """
    first_length, second_length = text_length_thresholds
    first_selection, second_selection = selection_thresholds
    if text_length > second_length or selected_count > second_selection:
        return 3
    if text_length > first_length or selected_count > first_selection:
        return 2
    return 1


def rank_suggestions(
    matches: Sequence[KeywordMatch],
    already_selected: Collection[str],
    text_length: int,
    *,
    max_suggested_chips: int = DEFAULT_MAX_SUGGESTED_CHIPS,
    text_length_thresholds: tuple[int, int] = DEFAULT_TEXT_LENGTH_THRESHOLDS,
    selection_thresholds: tuple[int, int] = DEFAULT_SELECTION_THRESHOLDS,
) -> list[str]:
    """Rank matched categories into a bounded suggestion list.

    1. Group matches by category, summing confidences
    2. Drop categories the user already selected
    3. Sort by summed confidence, highest first
    4. Reveal tier by tier (critical -> high -> medium -> low), truncated to
       the progressive-disclosure limit and then to ``max_suggested_chips``
    """
    tiers: dict[str, ImportanceTier] = {}
    for match in matches:
        tiers.setdefault(match.category, match.tier)

    candidates = [c for c in rank_categories(matches) if c not in already_selected]

    ordered: list[str] = []
    for tier in sorted(ImportanceTier, key=lambda t: t.rank, reverse=True):
        ordered.extend(c for c in candidates if tiers[c] == tier)

    limit = max_to_show(
        text_length,
        len(already_selected),
        text_length_thresholds,
        selection_thresholds,
    )
    return ordered[:limit][:max_suggested_chips]


def compute_visibility_changes(
    previous: Iterable[str],
    current: Iterable[str],
) -> dict[str, VisibilityChange]:
    """Diff two suggestion lists into show/hide instructions.

    Only categories whose visibility actually changes are included.
    """
    previous_set = set(previous)
    current_list = list(current)
    current_set = set(current_list)

    changes: dict[str, VisibilityChange] = {}
    for category in sorted(previous_set - current_set):
        changes[category] = VisibilityChange.HIDE
    for category in current_list:
        if category not in previous_set:
            changes[category] = VisibilityChange.SHOW
    return changes
