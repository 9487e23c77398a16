from .base import BallotStore
from .paths import StoragePaths
from .report_store import ReportStore
from .store import VoteStore

__all__ = ["BallotStore", "ReportStore", "StoragePaths", "VoteStore"]
