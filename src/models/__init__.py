"""Pydantic data models for the Goal Analysis Engine."""

from src.models.analysis_result import AnalysisResult
from src.models.analysis_state import (
    AnalysisState,
    AnalysisStatus,
    AnalysisUpdate,
    VisibilityChange,
)
from src.models.category import Category, CategoryKind, ImportanceTier
from src.models.config import AnalysisConfig
from src.models.keyword_match import KeywordMatch, MatchStrategy
from src.models.quality_assessment import QualityAssessment, QualityComponent

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "AnalysisState",
    "AnalysisStatus",
    "AnalysisUpdate",
    "Category",
    "CategoryKind",
    "ImportanceTier",
    "KeywordMatch",
    "MatchStrategy",
    "QualityAssessment",
    "QualityComponent",
    "VisibilityChange",
]
