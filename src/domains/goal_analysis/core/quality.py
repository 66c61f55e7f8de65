"""Quality scoring and the readiness gate for goal descriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.domains.goal_analysis.core.text_normalization import count_words
from src.models.category import CategoryKind, ImportanceTier
from src.models.quality_assessment import QualityAssessment, QualityComponent

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from src.models.category import Category
    from src.models.keyword_match import KeywordMatch

DEFAULT_READINESS_THRESHOLD = 0.7

# (minimum characters, bonus)
LENGTH_STEPS: tuple[tuple[int, float], ...] = ((20, 0.1), (50, 0.1), (100, 0.1), (200, 0.1))
# (minimum words, bonus)
WORD_COUNT_STEPS: tuple[tuple[int, float], ...] = ((5, 0.05), (10, 0.05), (20, 0.1))
KEYWORD_RELEVANCE_WEIGHT = 0.4

DIVERSITY_BONUS_PER_CATEGORY = 0.05
MAX_DIVERSITY_BONUS = 0.2


def _mean_confidence(matches: Sequence[KeywordMatch]) -> float:
    if not matches:
        return 0.0
    return sum(m.confidence for m in matches) / len(matches)


def _has_digit(text: str) -> bool:
    return any(char.isdigit() for char in text)


def score_text_quality(text: str, matches: Sequence[KeywordMatch]) -> float:
    """Score 0-1 from text length, word count and keyword relevance.

    - length: +0.1 at each of 20/50/100/200 characters (max 0.4)
    - words: +0.05/+0.05/+0.1 at 5/10/20 words (max 0.2)
    - relevance: mean match confidence * 0.4
    """
    length = len(text)
    words = count_words(text)

    score = sum(bonus for threshold, bonus in LENGTH_STEPS if length >= threshold)
    score += sum(bonus for threshold, bonus in WORD_COUNT_STEPS if words >= threshold)
    score += _mean_confidence(matches) * KEYWORD_RELEVANCE_WEIGHT
    return min(1.0, score)


def calculate_overall_confidence(matches: Sequence[KeywordMatch]) -> float:
    """Mean match confidence plus a bonus for touching several categories.

    The diversity bonus is ``min(0.2, distinct_categories * 0.05)``.
    """
    if not matches:
        return 0.0
    distinct_categories = len({m.category for m in matches})
    diversity_bonus = min(MAX_DIVERSITY_BONUS, distinct_categories * DIVERSITY_BONUS_PER_CATEGORY)
    return min(1.0, _mean_confidence(matches) + diversity_bonus)


def assess_text_quality(text: str, matches: Sequence[KeywordMatch]) -> QualityComponent:
    """Score the free text and explain what is missing."""
    trimmed = text.strip()
    if not trimmed:
        return QualityComponent(score=0.0, feedback=("Please describe your goal",))

    score = score_text_quality(trimmed, matches)
    feedback: list[str] = []
    if score < 0.5:
        feedback.append("Add more details about your specific goals")
    if not _has_digit(trimmed):
        feedback.append(
            "Consider adding specific targets (e.g. '5 pounds', 'beat my 25-minute 5K time')"
        )
    return QualityComponent(score=score, feedback=tuple(feedback))


def assess_selection_quality(
    selected: Collection[str],
    categories: Iterable[Category],
) -> QualityComponent:
    """Score the completeness of selected categories, weighting critical ones most."""
    by_name = {category.name: category for category in categories}
    selected_tiers = [by_name[name].tier for name in selected if name in by_name]
    critical_selected = selected_tiers.count(ImportanceTier.CRITICAL)
    high_selected = selected_tiers.count(ImportanceTier.HIGH)

    score = 0.0
    if critical_selected >= 1:
        score += 0.4
    if critical_selected >= 2:
        score += 0.2
    if high_selected >= 1:
        score += 0.2
    if high_selected >= 2:
        score += 0.1
    if len(selected) >= 3:
        score += 0.1

    feedback: list[str] = []
    if critical_selected == 0:
        critical_titles = [
            c.title for c in by_name.values() if c.tier == ImportanceTier.CRITICAL
        ]
        if critical_titles:
            feedback.append(f"Select your {' and '.join(critical_titles)}")
    if len(selected) < 3:
        feedback.append("Fill in more essential information")

    return QualityComponent(score=min(1.0, score), feedback=tuple(feedback))


def generate_improvement_suggestions(
    text: str,
    selected: Collection[str],
    categories: Iterable[Category],
) -> list[str]:
    """Concrete next steps: missing essential categories first, then text hints."""
    suggestions: list[str] = []

    essential = [
        c
        for c in categories
        if c.kind == CategoryKind.UNIVERSAL
        and c.tier in (ImportanceTier.CRITICAL, ImportanceTier.HIGH)
        and c.name not in selected
    ]
    essential.sort(key=lambda c: c.tier.rank, reverse=True)
    suggestions.extend(f"Add {c.title} for better recommendations" for c in essential)

    if len(text) < 50:
        suggestions.append("Add more details about your specific goals and any constraints")
    if not _has_digit(text):
        suggestions.append("Include specific targets or numbers in your goal description")
    return suggestions


def assess_readiness(
    text: str,
    matches: Sequence[KeywordMatch],
    selected: Collection[str],
    categories: Iterable[Category],
    readiness_threshold: float = DEFAULT_READINESS_THRESHOLD,
) -> QualityAssessment:
    """Decide whether the goal is detailed enough to hand off downstream.

    The overall score is the mean of text quality and selection quality;
    the goal is ready once it reaches ``readiness_threshold``.
    """
    category_list = list(categories)
    text_quality = assess_text_quality(text, matches)
    selection_quality = assess_selection_quality(selected, category_list)
    overall_score = (text_quality.score + selection_quality.score) / 2.0

    feedback: list[str] = []
    for item in (
        *text_quality.feedback,
        *selection_quality.feedback,
        *generate_improvement_suggestions(text, selected, category_list),
    ):
        if item not in feedback:
            feedback.append(item)

    return QualityAssessment(
        overall_score=overall_score,
        text_quality=text_quality,
        selection_quality=selection_quality,
        feedback=tuple(feedback),
        is_ready=overall_score >= readiness_threshold,
    )
