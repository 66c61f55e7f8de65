"""Keyword match model for goal text analysis results."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from src.models.category import ImportanceTier


class MatchStrategy(StrEnum):
    """Matching strategies, ordered from most to least strict."""

    EXACT = "exact"
    WORD_BOUNDARY = "word_boundary"
    CONTAINS = "contains"
    FUZZY = "fuzzy"

    @property
    def base_confidence(self) -> float:
        """Multiplier applied to a keyword's importance."""
        return _BASE_CONFIDENCE[self]


_BASE_CONFIDENCE: dict[MatchStrategy, float] = {
    MatchStrategy.EXACT: 1.0,
    MatchStrategy.WORD_BOUNDARY: 0.95,
    MatchStrategy.CONTAINS: 0.80,
    MatchStrategy.FUZZY: 0.70,
}


class KeywordMatch(BaseModel):
    """A matched trigger phrase with its span in the original text and surrounding context."""

    model_config = ConfigDict(frozen=True)

    keyword: str
    category: str
    tier: ImportanceTier
    strategy: MatchStrategy
    confidence: float
    span_start: int
    span_end: int
    context: str

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, value: float) -> float:
        """Confidence must be between 0.0 and 1.0."""
        if value < 0.0 or value > 1.0:
            msg = "confidence must be between 0.0 and 1.0"
            raise ValueError(msg)
        return value

    @field_validator("span_start", "span_end")
    @classmethod
    def validate_span_position(cls, value: int) -> int:
        """Span positions must be non-negative."""
        if value < 0:
            msg = "span positions must be >= 0"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def validate_span_order(self) -> KeywordMatch:
        """Span end must not precede span start."""
        if self.span_end < self.span_start:
            msg = "span_end must be >= span_start"
            raise ValueError(msg)
        return self
