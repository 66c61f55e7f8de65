"""Analysis result model for a single piece of goal text."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from src.models.keyword_match import KeywordMatch


class AnalysisResult(BaseModel):
    """Immutable outcome of analyzing one input text."""

    model_config = ConfigDict(frozen=True)

    original_text: str
    normalized_text: str
    matches: tuple[KeywordMatch, ...] = ()
    suggested_categories: tuple[str, ...] = ()
    confidence: float = 0.0
    processing_time: float = 0.0

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, value: float) -> float:
        """Confidence must be between 0.0 and 1.0."""
        if value < 0.0 or value > 1.0:
            msg = "confidence must be between 0.0 and 1.0"
            raise ValueError(msg)
        return value

    @field_validator("processing_time")
    @classmethod
    def validate_processing_time(cls, value: float) -> float:
        """Processing time must be non-negative."""
        if value < 0.0:
            msg = "processing_time must be >= 0"
            raise ValueError(msg)
        return value

    @property
    def has_matches(self) -> bool:
        return bool(self.matches)

    def matches_by_category(self) -> dict[str, list[KeywordMatch]]:
        """Group matches by category, preserving confidence order."""
        grouped: dict[str, list[KeywordMatch]] = {}
        for match in self.matches:
            grouped.setdefault(match.category, []).append(match)
        return grouped

    def best_matches_by_category(self) -> dict[str, KeywordMatch]:
        """Highest-confidence match for each category."""
        return {
            category: max(category_matches, key=lambda m: m.confidence)
            for category, category_matches in self.matches_by_category().items()
        }
