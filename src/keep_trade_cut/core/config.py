"""Configuration schemas and loading for Keep / Trade / Cut."""

from __future__ import annotations

import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from keep_trade_cut.core.errors import ValidationError

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class RatingConfig(BaseModel):
    """Rating engine constants.

    Attributes:
        base_rating: Rating of an item with no ballots.
        min_rating: Lower rating bound.
        max_rating: Upper rating bound.
        keep_impact: Raw impact of a keep ballot.
        trade_impact: Raw impact of a trade ballot.
        cut_impact: Raw impact of a cut ballot.
        k_factor: Scale applied to every rating change.
        full_confidence_votes: Ballot count at which confidence saturates.
        high_threshold: Ratings at or above this halve positive impacts.
        low_threshold: Ratings at or below this halve negative impacts.
        diminishing_factor: Multiplier used by the diminishing-returns rule.
    """

    base_rating: float = 50.0
    min_rating: float = 0.0
    max_rating: float = 100.0
    keep_impact: float = 1.0
    trade_impact: float = -0.3
    cut_impact: float = -1.0
    k_factor: float = Field(default=2.0, gt=0)
    full_confidence_votes: int = Field(default=20, ge=1)
    high_threshold: float = 70.0
    low_threshold: float = 30.0
    diminishing_factor: float = Field(default=0.5, gt=0, le=1)

    @model_validator(mode="after")
    def validate_bounds(self) -> RatingConfig:
        if self.min_rating >= self.max_rating:
            msg = "min_rating must be lower than max_rating"
            raise ValueError(msg)
        if not self.min_rating <= self.base_rating <= self.max_rating:
            msg = "base_rating must lie within [min_rating, max_rating]"
            raise ValueError(msg)
        if self.low_threshold >= self.high_threshold:
            msg = "low_threshold must be lower than high_threshold"
            raise ValueError(msg)
        if self.low_threshold < self.min_rating or self.high_threshold > self.max_rating:
            msg = "Diminishing thresholds must lie within [min_rating, max_rating]"
            raise ValueError(msg)
        return self


class SelectorConfig(BaseModel):
    """Matchup selection configuration."""

    tier_width: float = Field(default=10.0, gt=0)
    min_tier_size: int = Field(default=3, ge=3)
    history_size: int = Field(default=10, ge=0)
    tier_window: int = Field(default=3, ge=1)


class ItemSeed(BaseModel):
    """An item to create when initializing a store."""

    name: str
    color: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            msg = "Item names cannot be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not HEX_COLOR_PATTERN.match(v):
            msg = f"Color must be a hex value like '#DC143C', got {v!r}"
            raise ValueError(msg)
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration."""

    rating: RatingConfig = Field(default_factory=RatingConfig)
    selector: SelectorConfig = Field(default_factory=SelectorConfig)
    items: list[ItemSeed] = Field(default_factory=list)
    seed: int | None = None
    output_dir: str = "./data"
    database: str = "ktc.duckdb"


def load_config(path: str | Path) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If the file is not a YAML mapping.
        pydantic.ValidationError: If config is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValidationError(str(config_path), "The top level of the YAML file must be a mapping.")

    return AppConfig.model_validate(data)
