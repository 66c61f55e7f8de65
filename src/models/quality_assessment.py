"""Quality assessment models for goal descriptions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


def _validate_score(value: float) -> float:
    if value < 0.0 or value > 1.0:
        msg = "score must be between 0.0 and 1.0"
        raise ValueError(msg)
    return value


class QualityComponent(BaseModel):
    """Score and improvement feedback for one aspect of the goal."""

    model_config = ConfigDict(frozen=True)

    score: float
    feedback: tuple[str, ...] = ()

    @field_validator("score")
    @classmethod
    def validate_score(cls, value: float) -> float:
        """Score must be between 0.0 and 1.0."""
        return _validate_score(value)


class QualityAssessment(BaseModel):
    """Combined readiness gate over the free text and the selected categories."""

    model_config = ConfigDict(frozen=True)

    overall_score: float
    text_quality: QualityComponent
    selection_quality: QualityComponent
    feedback: tuple[str, ...] = ()
    is_ready: bool = False

    @field_validator("overall_score")
    @classmethod
    def validate_overall_score(cls, value: float) -> float:
        """Overall score must be between 0.0 and 1.0."""
        return _validate_score(value)

    @property
    def score_category(self) -> str:
        """Human-readable label for the overall score."""
        if self.overall_score >= 0.8:
            return "Excellent"
        if self.overall_score >= 0.6:
            return "Good"
        if self.overall_score >= 0.4:
            return "Fair"
        if self.overall_score >= 0.2:
            return "Needs Work"
        return "Just Getting Started"
