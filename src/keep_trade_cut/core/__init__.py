"""Core configuration and errors for Keep / Trade / Cut."""

from keep_trade_cut.core.config import (
    AppConfig,
    ItemSeed,
    RatingConfig,
    SelectorConfig,
    load_config,
)
from keep_trade_cut.core.errors import (
    ConfigurationError,
    DuplicateSelection,
    InsufficientItems,
    InvalidOutcome,
    OutOfSet,
    UnknownItemError,
    ValidationError,
    VotingError,
)

__all__ = [
    "AppConfig",
    "ItemSeed",
    "RatingConfig",
    "SelectorConfig",
    "load_config",
    "ConfigurationError",
    "DuplicateSelection",
    "InsufficientItems",
    "InvalidOutcome",
    "OutOfSet",
    "UnknownItemError",
    "ValidationError",
    "VotingError",
]
