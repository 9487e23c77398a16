"""Shared types for the rating engine."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable


class Outcome(str, Enum):
    """Three-way preference signal carried by a ballot entry."""

    KEEP = "keep"
    TRADE = "trade"
    CUT = "cut"


@runtime_checkable
class Ballot(Protocol):
    """Protocol for ballot records that can be replayed.

    Any object exposing an outcome tag and a creation timestamp qualifies,
    including the persisted ``BallotEntry`` rows.
    """

    outcome: str
    created_at: datetime
