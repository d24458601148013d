"""Per-category accumulation: fetch, read, tag and stack survey tables.

For each configured SourceEntry, in order, the accumulator downloads the
raw file, parses it, appends the provenance columns, and finally stacks the
surviving tables row-wise. Entries whose fetch or parse fails are logged,
recorded as outcomes, and left out of the combined table.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, TYPE_CHECKING

import pandas as pd

from surveyjoin.contracts import SourceError, FetchError, assert_tagged
from surveyjoin.pipeline.outcomes import CategoryReport, EntryOutcome
from surveyjoin.sources.fetcher import XptFetcher
from surveyjoin.sources.reader import XptTableReader

if TYPE_CHECKING:
    from surveyjoin.schemas import InternalConfig, CategoryConfig, SourceEntry

__all__ = ['tag_table', 'combine_tables', 'CategoryAccumulator']

logger = logging.getLogger(__name__)


def tag_table(
    df: pd.DataFrame,
    label: str,
    source_file: str,
    cycle_column: str = "Cycle",
    source_column: str = "SourceFile",
) -> pd.DataFrame:
    """Return a copy of ``df`` with constant provenance columns appended.

    Examples
    --------
    >>> tag_table(pd.DataFrame({"SEQN": [1.0, 2.0]}), "2017-2018", "GHB_J.xpt")
       SEQN      Cycle SourceFile
    0   1.0  2017-2018  GHB_J.xpt
    1   2.0  2017-2018  GHB_J.xpt
    """
    tagged = df.copy()
    tagged[cycle_column] = pd.Series([label] * len(tagged), index=tagged.index, dtype=object)
    tagged[source_column] = pd.Series([source_file] * len(tagged), index=tagged.index, dtype=object)
    return tagged


def combine_tables(tables: list, empty_columns=()) -> pd.DataFrame:
    """Stack tables row-wise in order, aligning columns by name.

    Columns appear in order of first appearance; cells for columns a table
    lacks are null. No tables gives an empty frame with ``empty_columns``.
    """
    if not tables:
        return pd.DataFrame(columns=list(empty_columns))
    return pd.concat(tables, ignore_index=True, sort=False)


class CategoryAccumulator:
    """Builds the combined table for one category.

    Example usage (typically called by PipelineOrchestrator)::

        accumulator = CategoryAccumulator(config, output_dirs)
        combined, report = accumulator.accumulate(config.laboratory)
        print(report.summary_line())
    """

    def __init__(
        self,
        config: "InternalConfig",
        output_dirs: Dict[str, Path],
        fetcher: Optional[XptFetcher] = None,
        reader: Optional[XptTableReader] = None,
        tracker=None,
        run_id: Optional[str] = None,
    ):
        """Initialize accumulator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        output_dirs : dict
            Output directory paths (from setup_output_directories); must
            contain one entry per category name.
        fetcher, reader : optional
            Injectable for testing. Built from config if None.
        tracker : SourceTracker, optional
            If provided, every EntryOutcome is recorded under ``run_id``.
        run_id : str, optional
            Run identifier used for tracker records.
        """
        self.config = config
        self.output_dirs = output_dirs
        self.fetcher = fetcher or XptFetcher(config)
        self.reader = reader or XptTableReader(config)
        self.tracker = tracker
        self.run_id = run_id
        self.cycle_column = config.tagging.cycle_column
        self.source_column = config.tagging.source_column

    def accumulate(self, category: "CategoryConfig") -> tuple[pd.DataFrame, CategoryReport]:
        """Run fetch, read and tag for every entry, then stack the survivors.

        Never raises for per-entry failures; an all-failure run returns an
        empty DataFrame holding only the provenance columns.

        Returns
        -------
        (pd.DataFrame, CategoryReport)
            Combined table and per-entry outcome report.
        """
        dest_dir = Path(self.output_dirs[category.name])
        report = CategoryReport(category=category.name)
        tables = []

        logger.info("Accumulating %s: %d configured sources", category.name, len(category.sources))

        for entry in category.sources:
            table, outcome = self.process_entry(category, entry, dest_dir)
            report.outcomes.append(outcome)
            if self.tracker is not None and self.run_id is not None:
                self.tracker.record_outcome(self.run_id, outcome)
            if table is not None:
                tables.append(table)

        combined = combine_tables(tables, empty_columns=(self.cycle_column, self.source_column))
        report.rows = len(combined)

        assert_tagged(
            combined,
            self.cycle_column,
            self.source_column,
            allowed_labels=[e.label for e in category.sources],
        )

        if report.skipped:
            logger.warning("%s", report.summary_line())
        else:
            logger.info("%s", report.summary_line())
        return combined, report

    def process_entry(
        self, category: "CategoryConfig", entry: "SourceEntry", dest_dir: Path
    ) -> tuple[Optional[pd.DataFrame], EntryOutcome]:
        """Fetch, read and tag one entry.

        Returns
        -------
        (pd.DataFrame or None, EntryOutcome)
            Tagged table (None on failure) and its outcome.
        """
        raw_path = None
        try:
            raw_path = self.fetcher.fetch(entry, dest_dir)
            table = self.reader.read(raw_path)
        except SourceError as e:
            logger.warning("Skipping %s (%s): %s", entry.remote_identifier, entry.label, e)
            outcome = EntryOutcome(
                category=category.name,
                entry=entry,
                status=e.status,
                raw_path=raw_path,
                status_code=e.status_code if isinstance(e, FetchError) else None,
                error=str(e),
            )
            return None, outcome

        tagged = tag_table(
            table,
            entry.label,
            raw_path.name,
            cycle_column=self.cycle_column,
            source_column=self.source_column,
        )
        logger.info("Tagged %s: %d rows as %s", raw_path.name, len(tagged), entry.label)

        outcome = EntryOutcome(
            category=category.name,
            entry=entry,
            status="ok",
            rows=len(tagged),
            raw_path=raw_path,
        )
        return tagged, outcome
