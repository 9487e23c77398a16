"""Custom exceptions for configuration and voting errors."""

from __future__ import annotations

from collections.abc import Iterable


class ConfigurationError(Exception):
    """Base exception for configuration errors with optional suggestions."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Configuration Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ValidationError(ConfigurationError):
    """Error when configuration validation fails."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            f"Invalid value for '{field}'",
            f"{reason}",
        )


class VotingError(Exception):
    """Base exception for rejected votes, ratings and matchups."""

    label = "Voting Error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.label}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class InvalidOutcome(VotingError):
    """Error when an unknown outcome tag reaches the rating engine."""

    label = "Invalid Outcome"

    def __init__(self, outcome: object) -> None:
        self.outcome = outcome
        super().__init__(
            f"Unknown outcome {outcome!r}",
            "Use one of 'keep', 'trade' or 'cut'.",
        )


class DuplicateSelection(VotingError):
    """Error when a vote picks the same item for more than one outcome."""

    label = "Duplicate Selection"

    def __init__(self, item_ids: Iterable[str]) -> None:
        self.item_ids = tuple(item_ids)
        super().__init__(
            f"Keep, trade and cut must be three different items, got {list(self.item_ids)}",
            "Assign each outcome to a different item.",
        )


class OutOfSet(VotingError):
    """Error when a vote references an item that was not on offer."""

    label = "Out Of Set"

    def __init__(self, item_id: str, offered: Iterable[str]) -> None:
        self.item_id = item_id
        self.offered = tuple(offered)
        super().__init__(
            f"Item '{item_id}' is not part of the offered matchup {list(self.offered)}",
        )


class InsufficientItems(VotingError):
    """Error when there are not enough items to build a matchup."""

    label = "Insufficient Items"

    def __init__(self, available: int, required: int = 3) -> None:
        self.available = available
        self.required = required
        super().__init__(
            f"A matchup needs {required} items, only {available} available",
            "Add more items before voting.",
        )


class UnknownItemError(VotingError):
    """Error when an item id is not present in the store."""

    label = "Unknown Item"

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"No item with id '{item_id}'")
