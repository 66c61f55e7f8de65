"""Keyword matching with a strategy cascade: exact, word boundary, contains, fuzzy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rapidfuzz.distance import Levenshtein

from src.domains.goal_analysis.core.text_normalization import extract_context, tokenize
from src.models.keyword_match import KeywordMatch, MatchStrategy

if TYPE_CHECKING:
    from collections.abc import Mapping

    from src.domains.goal_analysis.core.text_normalization import NormalizedText
    from src.domains.goal_analysis.core.vocabulary import KeywordDescriptor

DEFAULT_MAX_FUZZY_DISTANCE = 2
DEFAULT_MIN_KEYWORD_LENGTH = 2
DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_CONTEXT_LENGTH = 30


def levenshtein_distance(first: str, second: str) -> int:
    """Minimum number of single-character insertions, deletions and substitutions."""
    return Levenshtein.distance(first, second)


def _build_match(
    descriptor: KeywordDescriptor,
    strategy: MatchStrategy,
    confidence: float,
    normalized: NormalizedText,
    original_text: str,
    start: int,
    end: int,
    context_length: int,
) -> KeywordMatch:
    span_start, span_end = normalized.original_span(start, end)
    return KeywordMatch(
        keyword=descriptor.original,
        category=descriptor.category,
        tier=descriptor.tier,
        strategy=strategy,
        confidence=min(1.0, max(0.0, confidence)),
        span_start=span_start,
        span_end=span_end,
        context=extract_context(original_text, span_start, span_end, context_length),
    )


def find_exact_match(
    descriptor: KeywordDescriptor,
    normalized: NormalizedText,
    original_text: str,
) -> KeywordMatch | None:
    """Whole input equals the keyword."""
    if normalized.text != descriptor.normalized:
        return None
    return KeywordMatch(
        keyword=descriptor.original,
        category=descriptor.category,
        tier=descriptor.tier,
        strategy=MatchStrategy.EXACT,
        confidence=MatchStrategy.EXACT.base_confidence * descriptor.importance,
        span_start=0,
        span_end=len(original_text),
        context=original_text.strip(),
    )


def find_word_boundary_match(
    descriptor: KeywordDescriptor,
    normalized: NormalizedText,
    original_text: str,
    context_length: int = DEFAULT_CONTEXT_LENGTH,
) -> KeywordMatch | None:
    """Keyword occurs as a standalone token sequence."""
    found = descriptor.boundary_pattern.search(normalized.text)
    if found is None:
        return None
    return _build_match(
        descriptor,
        MatchStrategy.WORD_BOUNDARY,
        MatchStrategy.WORD_BOUNDARY.base_confidence * descriptor.importance,
        normalized,
        original_text,
        found.start(),
        found.end(),
        context_length,
    )


def find_contains_match(
    descriptor: KeywordDescriptor,
    normalized: NormalizedText,
    original_text: str,
    context_length: int = DEFAULT_CONTEXT_LENGTH,
) -> KeywordMatch | None:
    """Keyword occurs anywhere, including inside a larger word."""
    position = normalized.text.find(descriptor.normalized)
    if position == -1:
        return None
    return _build_match(
        descriptor,
        MatchStrategy.CONTAINS,
        MatchStrategy.CONTAINS.base_confidence * descriptor.importance,
        normalized,
        original_text,
        position,
        position + len(descriptor.normalized),
        context_length,
    )


def find_fuzzy_match(
    descriptor: KeywordDescriptor,
    normalized: NormalizedText,
    original_text: str,
    max_fuzzy_distance: int = DEFAULT_MAX_FUZZY_DISTANCE,
    min_keyword_length: int = DEFAULT_MIN_KEYWORD_LENGTH,
    context_length: int = DEFAULT_CONTEXT_LENGTH,
    tokens: list[tuple[str, int, int]] | None = None,
) -> KeywordMatch | None:
    """First word within edit distance of the keyword.

    A word is accepted when ``distance <= max_fuzzy_distance`` and
    ``distance < len(keyword) // 2``; confidence is further scaled by
    ``1 - distance / len(keyword)``. Keywords shorter than two characters
    (or ``min_keyword_length``) are never fuzzy matched.

    ``tokens`` may be passed in to avoid re-tokenizing the same text for
    every descriptor.
    """
    keyword = descriptor.normalized
    keyword_length = len(keyword)
    if keyword_length < max(2, min_keyword_length):
        return None

    if tokens is None:
        tokens = tokenize(normalized.text)
    for word, start, end in tokens:
        # Length difference is a lower bound on the distance
        if abs(len(word) - keyword_length) > max_fuzzy_distance:
            continue
        distance = Levenshtein.distance(keyword, word, score_cutoff=max_fuzzy_distance)
        if distance > max_fuzzy_distance or distance >= keyword_length // 2:
            continue
        confidence = (
            MatchStrategy.FUZZY.base_confidence
            * descriptor.importance
            * (1.0 - distance / keyword_length)
        )
        return _build_match(
            descriptor,
            MatchStrategy.FUZZY,
            confidence,
            normalized,
            original_text,
            start,
            end,
            context_length,
        )
    return None


def match_descriptor(
    descriptor: KeywordDescriptor,
    normalized: NormalizedText,
    original_text: str,
    enable_fuzzy: bool = True,
    max_fuzzy_distance: int = DEFAULT_MAX_FUZZY_DISTANCE,
    min_keyword_length: int = DEFAULT_MIN_KEYWORD_LENGTH,
    context_length: int = DEFAULT_CONTEXT_LENGTH,
    tokens: list[tuple[str, int, int]] | None = None,
) -> KeywordMatch | None:
    """Run the strategy cascade for one descriptor; the first strategy that succeeds wins."""
    match = find_exact_match(descriptor, normalized, original_text)
    if match is None:
        match = find_word_boundary_match(descriptor, normalized, original_text, context_length)
    if match is None:
        match = find_contains_match(descriptor, normalized, original_text, context_length)
    if match is None and enable_fuzzy:
        match = find_fuzzy_match(
            descriptor,
            normalized,
            original_text,
            max_fuzzy_distance,
            min_keyword_length,
            context_length,
            tokens,
        )
    return match


def find_keyword_matches(
    normalized: NormalizedText,
    original_text: str,
    vocabulary: Mapping[str, tuple[KeywordDescriptor, ...]],
    *,
    enable_fuzzy: bool = True,
    max_fuzzy_distance: int = DEFAULT_MAX_FUZZY_DISTANCE,
    min_keyword_length: int = DEFAULT_MIN_KEYWORD_LENGTH,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    context_length: int = DEFAULT_CONTEXT_LENGTH,
) -> list[KeywordMatch]:
    """Match every descriptor in the vocabulary against the text.

    At most one match per descriptor. Matches below ``min_confidence`` are
    dropped; the rest are sorted by confidence, highest first.
    """
    if not normalized.text:
        return []

    tokens = tokenize(normalized.text)
    matches: list[KeywordMatch] = []
    for descriptors in vocabulary.values():
        for descriptor in descriptors:
            match = match_descriptor(
                descriptor,
                normalized,
                original_text,
                enable_fuzzy=enable_fuzzy,
                max_fuzzy_distance=max_fuzzy_distance,
                min_keyword_length=min_keyword_length,
                context_length=context_length,
                tokens=tokens,
            )
            if match is not None and match.confidence >= min_confidence:
                matches.append(match)

    matches.sort(key=lambda m: m.confidence, reverse=True)
    return matches
