"""Pipeline orchestration.

Runs the two category passes and the join pass in sequence, persisting each
intermediate so the passes can also be run on their own. Sets up logging and
the outcome ledger, and logs a per-category run summary.
"""

import time
import logging
from pathlib import Path
from typing import Dict, Literal, Optional, TYPE_CHECKING

import pandas as pd

from surveyjoin.contracts import ContractViolation, PersistenceError
from surveyjoin.pipeline.accumulator import CategoryAccumulator
from surveyjoin.pipeline.joiner import join_categories
from surveyjoin.pipeline.outcomes import CategoryReport, RunSummary
from surveyjoin.pipeline.persister import TablePersister
from surveyjoin.pipeline.source_tracker import SourceTracker
from surveyjoin.setup_directories import generate_run_id, get_log_path
from surveyjoin.sources.fetcher import XptFetcher

if TYPE_CHECKING:
    from surveyjoin.schemas import InternalConfig, CategoryConfig

__all__ = ['PipelineOrchestrator', 'PHASES']

logger = logging.getLogger(__name__)

PHASES = ("all", "laboratory", "demographics", "join")


class PipelineOrchestrator:
    """Runs the download-tag-stack-join pipeline.

    **Passes:**

    1. **Category passes** (laboratory, then demographics): fetch every
       configured file, parse, tag with ``Cycle``/``SourceFile``, stack, and
       persist as ``combined_<category>.{parquet,csv}``.

    2. **Join pass**: re-read both Parquet snapshots, inner-join on the key
       column, persist as ``merged.{parquet,csv}``.

    Each pass can run alone (``phase=``); the join pass only needs the two
    snapshots on disk.

    **Failures:**

    Fetch and parse failures skip the entry and show up in the category
    report. PersistenceError and ContractViolation propagate to the caller.

    **Logging:**

    Console and ``logs/surveyjoin_<run_id>.log``, level from config.

    Example usage::

        orch = PipelineOrchestrator(config, output_dirs)
        summary = orch.start()
        print(summary.reports["laboratory"].summary_line())
    """

    def __init__(
        self,
        config: "InternalConfig",
        output_dirs: Dict[str, Path],
        session=None,
        run_id: Optional[str] = None,
        configure_logging: bool = True,
    ):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        output_dirs : dict
            Output directory paths (from setup_output_directories).
        session : requests.Session, optional
            HTTP session handed to the fetcher. Allows injection for testing.
        run_id : str, optional
            Run identifier. Generated if None.
        configure_logging : bool, optional
            If True (default), attach console and file handlers to the root
            logger for the duration of start().
        """
        self.config = config
        self.output_dirs = output_dirs
        self.run_id = run_id or generate_run_id()
        self.configure_logging = configure_logging

        self.persister = TablePersister(output_dirs["base"], compression=config.output.compression)
        self.fetcher = XptFetcher(config, session=session)
        self.tracker = None

        self._handlers = []
        self._start_time = None

    def _setup_logging(self):
        """Attach file and console handlers to the root logger."""
        log_level = getattr(logging, self.config.logging.level, logging.INFO)
        log_path = get_log_path(self.output_dirs, self.run_id)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        root = logging.getLogger()
        root.setLevel(log_level)

        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)

        for handler in (fh, ch):
            root.addHandler(handler)
            self._handlers.append(handler)

        logger.info("Logging: level=%s, file=%s", self.config.logging.level, log_path)

    def _teardown_logging(self):
        root = logging.getLogger()
        for handler in self._handlers:
            root.removeHandler(handler)
            handler.close()
        self._handlers = []

    def _setup_tracker(self):
        if self.config.tracking.enabled:
            tracker_path = Path(self.output_dirs["logs"]) / self.config.tracking.db_filename
            self.tracker = SourceTracker(tracker_path)

    def start(self, phase: Literal["all", "laboratory", "demographics", "join"] = "all") -> RunSummary:
        """Run the requested phase(s) and return the run summary.

        Parameters
        ----------
        phase : str
            "all" (default), one category name, or "join".

        Raises
        ------
        ValueError
            If phase is unknown.
        PersistenceError
            If an output artifact cannot be written, or the join pass cannot
            find a category snapshot.
        """
        if phase not in PHASES:
            raise ValueError(f"Unknown phase: {phase}. Must be one of {PHASES}")

        if self.configure_logging:
            self._setup_logging()
        self._setup_tracker()

        self._start_time = time.time()
        summary = RunSummary(run_id=self.run_id)

        logger.info("=" * 60)
        logger.info("Starting survey merge pipeline (run %s, phase %s)", self.run_id, phase)
        logger.info("=" * 60)

        try:
            for category in self.config.categories:
                if phase in ("all", category.name):
                    report = self.run_category(category, summary)
                    summary.reports[category.name] = report

            if phase in ("all", "join"):
                merged = self.run_join(summary)
                summary.merged_rows = len(merged)

            self._log_summary(summary)
            return summary
        except (PersistenceError, ContractViolation) as e:
            logger.critical("Pipeline aborted: %s", e)
            raise
        finally:
            self.stop()

    def run_category(self, category: "CategoryConfig", summary: Optional[RunSummary] = None) -> CategoryReport:
        """Accumulate one category and persist its combined table."""
        logger.info("--- Category: %s ---", category.name)
        accumulator = CategoryAccumulator(
            self.config,
            self.output_dirs,
            fetcher=self.fetcher,
            tracker=self.tracker,
            run_id=self.run_id,
        )
        combined, report = accumulator.accumulate(category)

        paths = self.persister.persist(combined, category.output_name)
        if summary is not None:
            summary.artifacts.update({f"{category.output_name}.{fmt}": p for fmt, p in paths.items()})
        return report

    def run_join(self, summary: Optional[RunSummary] = None) -> pd.DataFrame:
        """Reload both category snapshots, join them, persist the result."""
        logger.info("--- Join on %s ---", self.config.join.key)
        left_cfg, right_cfg = self.config.categories

        left = self.persister.load(left_cfg.output_name)
        right = self.persister.load(right_cfg.output_name)

        merged = join_categories(
            left,
            right,
            self.config.join.key,
            left_name=left_cfg.name,
            right_name=right_cfg.name,
        )

        paths = self.persister.persist(merged, self.config.join.output_name)
        if summary is not None:
            summary.artifacts.update({f"{self.config.join.output_name}.{fmt}": p for fmt, p in paths.items()})
        return merged

    def _log_summary(self, summary: RunSummary):
        elapsed = time.time() - self._start_time if self._start_time else 0
        logger.info("=" * 60)
        logger.info("Run %s finished in %.1f seconds", summary.run_id, elapsed)
        for report in summary.reports.values():
            if report.skipped:
                logger.warning("  %s", report.summary_line())
            else:
                logger.info("  %s", report.summary_line())
        if summary.merged_rows is not None:
            logger.info("  merged: %d rows", summary.merged_rows)
        for name, path in summary.artifacts.items():
            logger.info("  wrote %s", path)
        logger.info("=" * 60)

    def stop(self):
        """Close the outcome ledger and detach log handlers. Safe to call twice."""
        if self.tracker:
            stats = self.tracker.get_statistics(self.run_id)
            for category, counts in stats.items():
                logger.debug("Tracker %s: %s", category, counts)
            self.tracker.close()
            self.tracker = None
        self._teardown_logging()
