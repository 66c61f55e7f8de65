"""Shared test fixtures for the Goal Analysis Engine."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from src.domains.goal_analysis.services.keyword_matcher import KeywordMatcher
from src.models.category import Category, CategoryKind, ImportanceTier
from src.models.config import AnalysisConfig


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """CLI tests configure structlog against the runner's streams; undo that after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def sample_categories() -> tuple[Category, ...]:
    """Small vocabulary covering every tier and both category kinds."""
    return (
        Category(
            name="fitness_level",
            display_title="Fitness Level",
            tier=ImportanceTier.CRITICAL,
            kind=CategoryKind.UNIVERSAL,
        ),
        Category(
            name="location",
            display_title="Location",
            tier=ImportanceTier.CRITICAL,
            trigger_phrases=("home", "gym"),
        ),
        Category(
            name="limitations",
            display_title="Injuries/Limitations",
            tier=ImportanceTier.HIGH,
            trigger_phrases=("back pain", "injury", "knee"),
        ),
        Category(
            name="equipment",
            display_title="Available Equipment",
            tier=ImportanceTier.MEDIUM,
            trigger_phrases=("dumbbells", "resistance bands"),
        ),
        Category(
            name="experience",
            display_title="Past Experience",
            tier=ImportanceTier.LOW,
            trigger_phrases=("beginner", "first time running"),
        ),
    )


@pytest.fixture
def fast_config() -> AnalysisConfig:
    """Configuration with a short debounce so async tests stay quick."""
    return AnalysisConfig(debounce_interval=0.05)


@pytest.fixture
def matcher(sample_categories: tuple[Category, ...], fast_config: AnalysisConfig) -> KeywordMatcher:
    """Keyword matcher over the sample vocabulary."""
    return KeywordMatcher(categories=sample_categories, config=fast_config)
