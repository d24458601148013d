"""SQLite-based ledger of per-entry outcomes.

Records what happened to every configured source on every run (fetched and
parsed, fetch failed, parse failed), so skipped entries remain visible
after the run and across runs.
"""

import sqlite3
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from surveyjoin.pipeline.outcomes import EntryOutcome

logger = logging.getLogger(__name__)


class SourceTracker:
    """Tracks per-entry outcomes by run.

    **Database Schema:**

    SQLite table `source_outcomes` (one row per run, category and source):

    - run_id, category, remote_identifier: composite primary key
    - label, cycle_year: SourceEntry metadata
    - status: ok, fetch_failed, parse_failed
    - rows, raw_path, status_code, error_message
    - recorded_at: ISO timestamp (UTC)

    **Thread Safety:**

    All methods are thread-safe via internal locking.

    **Typical Usage:**

        tracker = SourceTracker(db_path)
        tracker.record_outcome(run_id, outcome)

        stats = tracker.get_statistics(run_id)
        print(stats["laboratory"])   # {'configured': 7, 'succeeded': 6, 'skipped': 1, 'rows': ...}

        tracker.close()
    """

    def __init__(self, db_path: Path | str):
        """Initialize tracker.

        Parameters
        ----------
        db_path : Path or str
            Path to SQLite database file. Created if doesn't exist.
            Typically: logs/source_outcomes.db
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = None
        self._lock = threading.Lock()

        self._init_database()
        logger.info("Source tracker initialized: %s", self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        conn = self._get_connection()

        with self._lock:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS source_outcomes (
                    run_id TEXT NOT NULL,
                    category TEXT NOT NULL,
                    remote_identifier TEXT NOT NULL,
                    label TEXT NOT NULL,
                    cycle_year TEXT NOT NULL,

                    status TEXT NOT NULL,
                    rows INTEGER DEFAULT 0,
                    raw_path TEXT,
                    status_code INTEGER,
                    error_message TEXT,

                    recorded_at TEXT NOT NULL,
                    PRIMARY KEY (run_id, category, remote_identifier)
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_status ON source_outcomes(status)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_category ON source_outcomes(category)")
            conn.commit()

    def record_outcome(self, run_id: str, outcome: EntryOutcome) -> None:
        """Insert or replace the outcome of one entry for ``run_id``."""
        conn = self._get_connection()
        entry = outcome.entry

        with self._lock:
            conn.execute("""
                INSERT OR REPLACE INTO source_outcomes
                (run_id, category, remote_identifier, label, cycle_year,
                 status, rows, raw_path, status_code, error_message, recorded_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                run_id,
                outcome.category,
                entry.remote_identifier,
                entry.label,
                entry.cycle_year,
                outcome.status,
                outcome.rows,
                str(outcome.raw_path) if outcome.raw_path else None,
                outcome.status_code,
                outcome.error,
                datetime.now(timezone.utc).isoformat(),
            ))
            conn.commit()

        logger.debug("Recorded %s/%s: %s", outcome.category, entry.remote_identifier, outcome.status)

    def get_outcomes(self, run_id: str, category: Optional[str] = None) -> List[Dict]:
        """All recorded outcomes of a run, optionally for one category."""
        conn = self._get_connection()
        query = "SELECT * FROM source_outcomes WHERE run_id = ?"
        params = [run_id]
        if category is not None:
            query += " AND category = ?"
            params.append(category)
        query += " ORDER BY category, cycle_year, remote_identifier"

        with self._lock:
            cursor = conn.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

    def get_failed(self, run_id: str) -> List[Dict]:
        """Outcomes of a run that were skipped."""
        return [o for o in self.get_outcomes(run_id) if o["status"] != "ok"]

    def get_statistics(self, run_id: str) -> Dict[str, Dict[str, int]]:
        """Per-category counts for one run.

        Returns
        -------
        dict
            ``{category: {"configured", "succeeded", "skipped", "rows"}}``
        """
        conn = self._get_connection()

        with self._lock:
            cursor = conn.execute("""
                SELECT
                    category,
                    COUNT(*) AS configured,
                    SUM(CASE WHEN status = 'ok' THEN 1 ELSE 0 END) AS succeeded,
                    SUM(CASE WHEN status != 'ok' THEN 1 ELSE 0 END) AS skipped,
                    SUM(rows) AS rows
                FROM source_outcomes
                WHERE run_id = ?
                GROUP BY category
            """, (run_id,))
            return {
                row["category"]: {
                    "configured": row["configured"],
                    "succeeded": row["succeeded"] or 0,
                    "skipped": row["skipped"] or 0,
                    "rows": row["rows"] or 0,
                }
                for row in cursor.fetchall()
            }

    def close(self):
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.debug("Source tracker closed")
