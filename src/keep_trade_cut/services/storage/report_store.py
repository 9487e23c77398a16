"""Rankings export utilities."""

from __future__ import annotations

import asyncio
import csv
import json
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from keep_trade_cut.services.reporting import RankingRow

    from .paths import StoragePaths

logger = structlog.get_logger()


class ReportStore:
    """Write rankings to Markdown, CSV and JSON files."""

    def __init__(self, paths: StoragePaths) -> None:
        """Initialize report store.

        Args:
            paths: Storage paths providing the reports directory.
        """
        self._paths = paths

    async def save_rankings(self, rows: list[RankingRow]) -> list[Path]:
        """Save rankings to leaderboard.md, leaderboard.csv and leaderboard.json."""

        def _save() -> list[Path]:
            md_path = self._paths.report_path("leaderboard.md")
            with md_path.open("w", encoding="utf-8") as f:
                f.write("# Rankings\n\n")
                f.write("| Rank | Item | Color | Rating | Confidence | Keep | Trade | Cut |\n")
                f.write("|---|---|---|---|---|---|---|---|\n")
                for r in rows:
                    f.write(
                        f"| {r.rank} | {r.name} | {r.color} | {r.rating:.1f} | "
                        f"{r.confidence:.0%} | {r.keep_votes} | {r.trade_votes} | {r.cut_votes} |\n"
                    )

            csv_path = self._paths.report_path("leaderboard.csv")
            with csv_path.open("w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(
                    [
                        "rank",
                        "item_id",
                        "name",
                        "color",
                        "rating",
                        "total_votes",
                        "confidence",
                        "keep_votes",
                        "trade_votes",
                        "cut_votes",
                    ]
                )
                for r in rows:
                    writer.writerow(
                        [
                            r.rank,
                            r.item_id,
                            r.name,
                            r.color,
                            f"{r.rating:.2f}",
                            r.total_votes,
                            f"{r.confidence:.2f}",
                            r.keep_votes,
                            r.trade_votes,
                            r.cut_votes,
                        ]
                    )

            json_path = self._paths.report_path("leaderboard.json")
            with json_path.open("w", encoding="utf-8") as f:
                json.dump([asdict(r) for r in rows], f, indent=2, default=str)

            logger.debug("saved_rankings", path=str(md_path.parent))
            return [md_path, csv_path, json_path]

        return await asyncio.to_thread(_save)
