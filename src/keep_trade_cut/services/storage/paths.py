"""Path utilities for vote storage artifacts."""

from __future__ import annotations

from pathlib import Path


class StoragePaths:
    """Build and create filesystem paths used by storage services."""

    def __init__(self, base_dir: Path, database: str = "ktc.duckdb") -> None:
        self.base_dir = base_dir
        self.database = database

    def ensure_base_dir(self) -> Path:
        """Create the base directory if needed."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        return self.base_dir

    @property
    def database_path(self) -> Path:
        """Location of the DuckDB database file."""
        return self.ensure_base_dir() / self.database

    @property
    def ballot_log_path(self) -> Path:
        """JSONL backup of every appended ballot entry."""
        return self.ensure_base_dir() / "ballots.jsonl"

    def report_path(self, filename: str) -> Path:
        """Build path to a rankings report file."""
        output_dir = self.base_dir / "reports"
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir / filename
