"""Category model for goal-input classification."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class ImportanceTier(StrEnum):
    """Importance of a category for downstream plan quality, lowest to highest."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> float:
        """Tier mapped onto [0, 1]."""
        return _TIER_WEIGHTS[self]

    @property
    def rank(self) -> int:
        """Ordinal position, 0 for LOW up to 3 for CRITICAL."""
        return list(ImportanceTier).index(self)


_TIER_WEIGHTS: dict[ImportanceTier, float] = {
    ImportanceTier.LOW: 0.25,
    ImportanceTier.MEDIUM: 0.50,
    ImportanceTier.HIGH: 0.75,
    ImportanceTier.CRITICAL: 1.00,
}


class CategoryKind(StrEnum):
    """Whether a category is always shown or surfaced by text analysis."""

    UNIVERSAL = "universal"
    CONTEXTUAL = "contextual"


class Category(BaseModel):
    """A named classification that trigger phrases belong to."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_title: str = ""
    tier: ImportanceTier = ImportanceTier.MEDIUM
    kind: CategoryKind = CategoryKind.CONTEXTUAL
    trigger_phrases: tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Name must be non-empty."""
        if not value.strip():
            msg = "name must not be empty"
            raise ValueError(msg)
        return value

    @property
    def title(self) -> str:
        """Display title, falling back to the name."""
        return self.display_title or self.name
