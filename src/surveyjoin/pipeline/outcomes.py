"""Per-entry outcomes and run reports.

Per-entry failures never propagate as exceptions past the accumulator; they
become EntryOutcome records, aggregated per category into a CategoryReport
so skipped entries are always visible in the run summary.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from surveyjoin.schemas.source import SourceEntry


class EntryOutcome(BaseModel):
    """Result of fetching, reading and tagging one SourceEntry."""

    model_config = ConfigDict(frozen=True)

    category: str
    entry: SourceEntry
    status: Literal["ok", "fetch_failed", "parse_failed"]
    rows: int = 0
    raw_path: Optional[Path] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "ok"


class CategoryReport(BaseModel):
    """Outcome counts for one category pass."""

    category: str
    outcomes: list[EntryOutcome] = Field(default_factory=list)
    rows: int = 0

    @property
    def configured(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def skipped(self) -> int:
        return self.configured - self.succeeded

    @property
    def skipped_entries(self) -> list[str]:
        return [o.entry.remote_identifier for o in self.outcomes if not o.succeeded]

    def summary_line(self) -> str:
        """One-line summary, e.g. ``laboratory: 6/7 succeeded, 1 skipped, 41234 rows``."""
        line = (
            f"{self.category}: {self.succeeded}/{self.configured} succeeded, "
            f"{self.skipped} skipped, {self.rows} rows"
        )
        if self.skipped:
            line += f" (skipped: {', '.join(self.skipped_entries)})"
        return line


class RunSummary(BaseModel):
    """Everything a completed run produced."""

    run_id: str
    reports: dict[str, CategoryReport] = Field(default_factory=dict)
    merged_rows: Optional[int] = None
    artifacts: dict[str, Path] = Field(default_factory=dict)
