"""Analysis state machine values and the updates published to the host."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalysisStatus(StrEnum):
    """Phase of the analysis pipeline."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"


class VisibilityChange(StrEnum):
    """Instruction for the host UI about a single category."""

    SHOW = "show"
    HIDE = "hide"


class AnalysisState(BaseModel):
    """Current state of the analysis pipeline.

    ``confidence`` is only meaningful when completed and ``message`` only when
    errored; use the constructors rather than building instances directly.
    """

    model_config = ConfigDict(frozen=True)

    status: AnalysisStatus
    confidence: float = 0.0
    message: str | None = None

    @classmethod
    def idle(cls) -> AnalysisState:
        return cls(status=AnalysisStatus.IDLE)

    @classmethod
    def analyzing(cls) -> AnalysisState:
        return cls(status=AnalysisStatus.ANALYZING)

    @classmethod
    def completed(cls, confidence: float) -> AnalysisState:
        return cls(status=AnalysisStatus.COMPLETED, confidence=confidence)

    @classmethod
    def error(cls, message: str) -> AnalysisState:
        return cls(status=AnalysisStatus.ERROR, message=message)

    @property
    def is_analyzing(self) -> bool:
        return self.status == AnalysisStatus.ANALYZING

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, value: float) -> float:
        """Confidence must be between 0.0 and 1.0."""
        if value < 0.0 or value > 1.0:
            msg = "confidence must be between 0.0 and 1.0"
            raise ValueError(msg)
        return value


class AnalysisUpdate(BaseModel):
    """Snapshot emitted on every state transition."""

    model_config = ConfigDict(frozen=True)

    text: str
    state: AnalysisState
    quality_score: float = 0.0
    processing_time: float = 0.0
    suggestions: tuple[str, ...] = ()
    visibility_changes: dict[str, VisibilityChange] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
