"""Category table and keyword preprocessing for goal text analysis."""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

import structlog

from src.domains.goal_analysis.core.text_normalization import normalize_text, tokenize
from src.models.category import Category, CategoryKind, ImportanceTier

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = structlog.get_logger(__name__)

# Phrases this long or longer get the full specificity score
SPECIFICITY_LENGTH = 15

# --- Category Table ---

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    # Universal categories: essential information, always shown
    Category(
        name="fitness_level",
        display_title="Fitness Level",
        tier=ImportanceTier.CRITICAL,
        kind=CategoryKind.UNIVERSAL,
    ),
    Category(
        name="sex",
        display_title="Sex",
        tier=ImportanceTier.HIGH,
        kind=CategoryKind.UNIVERSAL,
    ),
    Category(
        name="physical_stats",
        display_title="Height & Weight",
        tier=ImportanceTier.MEDIUM,
        kind=CategoryKind.UNIVERSAL,
    ),
    Category(
        name="time_available",
        display_title="Time Per Workout",
        tier=ImportanceTier.CRITICAL,
        kind=CategoryKind.UNIVERSAL,
    ),
    Category(
        name="workout_location",
        display_title="Where You'll Work Out",
        tier=ImportanceTier.HIGH,
        kind=CategoryKind.UNIVERSAL,
    ),
    Category(
        name="weekly_frequency",
        display_title="Days Per Week",
        tier=ImportanceTier.MEDIUM,
        kind=CategoryKind.UNIVERSAL,
    ),
    # Contextual categories: surfaced by trigger phrases
    Category(
        name="timeline",
        display_title="Your Timeline",
        tier=ImportanceTier.MEDIUM,
        trigger_phrases=(
            "2 weeks",
            "2-weeks",
            "two weeks",
            "month",
            "months",
            "3 months",
            "6 months",
            "quickly",
            "fast",
            "asap",
            "soon",
            "deadline",
            "by",
            "before",
            "timeline",
            "time frame",
            "timeframe",
            "goal date",
            "target date",
            "urgent",
            "rush",
        ),
    ),
    Category(
        name="limitations",
        display_title="Injuries/Limitations",
        tier=ImportanceTier.HIGH,
        trigger_phrases=(
            "injury",
            "injured",
            "hurt",
            "pain",
            "back pain",
            "knee",
            "shoulder",
            "ankle",
            "wrist",
            "can't",
            "cannot",
            "unable",
            "avoid",
            "limitation",
            "limited",
            "restrict",
            "restricted",
            "medical",
            "doctor",
            "physician",
            "physical therapy",
            "pt",
            "rehab",
            "arthritis",
            "surgery",
            "recovery",
        ),
    ),
    Category(
        name="schedule",
        display_title="Schedule Restrictions",
        tier=ImportanceTier.LOW,
        trigger_phrases=(
            "busy",
            "schedule",
            "time",
            "available",
            "work",
            "job",
            "office",
            "shift",
            "weekends",
            "weekdays",
            "week days",
            "sunday",
            "monday",
            "tuesday",
            "wednesday",
            "thursday",
            "friday",
            "saturday",
            "morning",
            "afternoon",
            "evening",
            "night",
            "free time",
            "spare time",
            "travel",
            "vacation",
            "trip",
        ),
    ),
    Category(
        name="equipment",
        display_title="Available Equipment",
        tier=ImportanceTier.MEDIUM,
        trigger_phrases=(
            "no gym",
            "home",
            "house",
            "apartment",
            "weights",
            "dumbbells",
            "barbells",
            "equipment",
            "gear",
            "machines",
            "kettlebell",
            "resistance bands",
            "bands",
            "treadmill",
            "bike",
            "bicycle",
            "pull up bar",
            "yoga mat",
            "bodyweight",
            "no equipment",
        ),
    ),
    Category(
        name="experience",
        display_title="Past Experience",
        tier=ImportanceTier.LOW,
        trigger_phrases=(
            "used to",
            "before",
            "previously",
            "past",
            "experience",
            "experienced",
            "trained",
            "athlete",
            "athletic",
            "sports",
            "beginner",
            "new to",
            "never",
            "first time",
            "years ago",
            "months ago",
            "college",
            "high school",
            "university",
            "competitive",
            "team",
            "coach",
        ),
    ),
    Category(
        name="preferences",
        display_title="Exercise Preferences",
        tier=ImportanceTier.LOW,
        trigger_phrases=(
            "hate",
            "love",
            "enjoy",
            "like",
            "dislike",
            "don't like",
            "prefer",
            "favorite",
            "favourite",
            "best",
            "boring",
            "fun",
            "exciting",
            "challenging",
            "cardio",
            "strength",
            "yoga",
            "pilates",
            "running",
            "swimming",
            "cycling",
            "outdoor",
            "indoor",
        ),
    ),
)


class EmptyVocabularyError(ValueError):
    """Raised when a vocabulary has no categories or no trigger phrases."""


@dataclass(frozen=True)
class KeywordDescriptor:
    """A preprocessed trigger phrase ready for matching."""

    original: str
    normalized: str
    words: tuple[str, ...]
    category: str
    tier: ImportanceTier
    importance: float
    boundary_pattern: re.Pattern[str]


def compute_importance(phrase: str, tier: ImportanceTier) -> float:
    """Average of the tier weight and the phrase specificity.

    Longer phrases are more specific: specificity is ``min(1, len / 15)``.
    """
    specificity = min(1.0, len(phrase) / SPECIFICITY_LENGTH)
    return (tier.weight + specificity) / 2.0


def build_descriptor(phrase: str, category: Category) -> KeywordDescriptor | None:
    """Preprocess one trigger phrase. Returns None if it normalizes to nothing."""
    normalized = normalize_text(phrase)
    if not normalized:
        return None
    return KeywordDescriptor(
        original=phrase,
        normalized=normalized,
        words=tuple(word for word, _, _ in tokenize(normalized)),
        category=category.name,
        tier=category.tier,
        importance=compute_importance(phrase, category.tier),
        boundary_pattern=re.compile(r"(?<!\w)" + re.escape(normalized) + r"(?!\w)"),
    )


def validate_categories(categories: Iterable[Category]) -> tuple[Category, ...]:
    """Fail fast on a vocabulary that could never produce a match."""
    category_tuple = tuple(categories)
    if not category_tuple:
        msg = "vocabulary must contain at least one category"
        raise EmptyVocabularyError(msg)
    if not any(category.trigger_phrases for category in category_tuple):
        msg = "vocabulary must contain at least one trigger phrase"
        raise EmptyVocabularyError(msg)
    names = [category.name for category in category_tuple]
    if len(set(names)) != len(names):
        msg = "category names must be unique"
        raise ValueError(msg)
    return category_tuple


def build_vocabulary(
    categories: Iterable[Category],
) -> Mapping[str, tuple[KeywordDescriptor, ...]]:
    """Build the read-only category -> descriptors map used by the matching engine."""
    vocabulary: dict[str, tuple[KeywordDescriptor, ...]] = {}
    for category in validate_categories(categories):
        descriptors: list[KeywordDescriptor] = []
        for phrase in category.trigger_phrases:
            descriptor = build_descriptor(phrase, category)
            if descriptor is None:
                logger.warning("empty_trigger_phrase_skipped", category=category.name, phrase=phrase)
                continue
            descriptors.append(descriptor)
        vocabulary[category.name] = tuple(descriptors)

    logger.debug(
        "vocabulary_built",
        categories=len(vocabulary),
        descriptors=sum(len(d) for d in vocabulary.values()),
    )
    return MappingProxyType(vocabulary)
