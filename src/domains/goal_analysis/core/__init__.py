"""Goal analysis domain core -- pure functions for keyword matching, ranking and scoring."""

from __future__ import annotations

from src.domains.goal_analysis.core.matching import (
    find_contains_match,
    find_exact_match,
    find_fuzzy_match,
    find_keyword_matches,
    find_word_boundary_match,
    levenshtein_distance,
    match_descriptor,
)
from src.domains.goal_analysis.core.quality import (
    assess_readiness,
    assess_selection_quality,
    assess_text_quality,
    calculate_overall_confidence,
    generate_improvement_suggestions,
    score_text_quality,
)
from src.domains.goal_analysis.core.ranking import (
    compute_visibility_changes,
    max_to_show,
    rank_categories,
    rank_suggestions,
    sum_confidence_by_category,
)
from src.domains.goal_analysis.core.text_normalization import (
    NormalizedText,
    count_words,
    extract_context,
    normalize_text,
    normalize_with_offsets,
    tokenize,
)
from src.domains.goal_analysis.core.vocabulary import (
    DEFAULT_CATEGORIES,
    EmptyVocabularyError,
    KeywordDescriptor,
    build_descriptor,
    build_vocabulary,
    compute_importance,
    validate_categories,
)

__all__ = [
    # matching
    "find_contains_match",
    "find_exact_match",
    "find_fuzzy_match",
    "find_keyword_matches",
    "find_word_boundary_match",
    "levenshtein_distance",
    "match_descriptor",
    # quality
    "assess_readiness",
    "assess_selection_quality",
    "assess_text_quality",
    "calculate_overall_confidence",
    "generate_improvement_suggestions",
    "score_text_quality",
    # ranking
    "compute_visibility_changes",
    "max_to_show",
    "rank_categories",
    "rank_suggestions",
    "sum_confidence_by_category",
    # text_normalization
    "NormalizedText",
    "count_words",
    "extract_context",
    "normalize_text",
    "normalize_with_offsets",
    "tokenize",
    # vocabulary
    "DEFAULT_CATEGORIES",
    "EmptyVocabularyError",
    "KeywordDescriptor",
    "build_descriptor",
    "build_vocabulary",
    "compute_importance",
    "validate_categories",
]
