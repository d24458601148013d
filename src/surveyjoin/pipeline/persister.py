"""Write tables as a Parquet snapshot and a CSV rendering.

Each artifact is written to a temporary sibling and atomically renamed into
place, so a failure on one artifact never leaves a truncated file under its
final name and never touches the other artifact.
"""

import logging
import os
from pathlib import Path
from typing import Dict

import pandas as pd

from surveyjoin.contracts import PersistenceError

__all__ = ['TablePersister']

logger = logging.getLogger(__name__)


def _normalize_mixed_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Render object columns holding both numbers and text as text.

    A variable coded numeric in one cycle and character in another stacks
    into such a column, which Parquet cannot store. Nulls stay null.
    """
    mixed = [
        col for col in df.columns
        if df[col].dtype == object
        and pd.api.types.infer_dtype(df[col], skipna=True) in ("mixed", "mixed-integer")
    ]
    if not mixed:
        return df

    logger.warning("Storing mixed-type columns as text: %s", ", ".join(map(str, mixed)))
    df = df.copy()
    for col in mixed:
        df[col] = df[col].map(lambda v: v if pd.isna(v) else str(v)).astype(object)
    return df


class TablePersister:
    """Persists and reloads tables under one output directory.

    Artifacts
    ---------
    - ``<base_name>.parquet``: binary snapshot via pyarrow, preserving
      column dtypes and null markers. Re-read by the join pass.
    - ``<base_name>.csv``: header row plus one record per line; nulls are
      written as empty fields.

    Examples
    --------
    >>> persister = TablePersister("/data/surveyjoin", compression="snappy")
    >>> paths = persister.persist(df, "combined_laboratory")
    >>> sorted(paths)
    ['csv', 'parquet']
    >>> persister.load("combined_laboratory").equals(df)
    True
    """

    def __init__(self, output_dir, compression: str = "snappy"):
        self.output_dir = Path(output_dir)
        self.compression = None if compression == "none" else compression

    def paths_for(self, base_name: str) -> Dict[str, Path]:
        return {
            "parquet": self.output_dir / f"{base_name}.parquet",
            "csv": self.output_dir / f"{base_name}.csv",
        }

    def persist(self, df: pd.DataFrame, base_name: str) -> Dict[str, Path]:
        """Write both artifacts for ``df``.

        Returns
        -------
        dict
            ``{"parquet": Path, "csv": Path}``

        Raises
        ------
        PersistenceError
            If either artifact cannot be written. The artifact written
            before the failure, if any, is left intact.
        """
        paths = self.paths_for(base_name)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create output directory {self.output_dir}: {e}") from e

        df = _normalize_mixed_columns(df)

        self._atomic_write(
            paths["parquet"],
            lambda tmp: df.to_parquet(tmp, engine="pyarrow", compression=self.compression, index=False),
        )
        self._atomic_write(
            paths["csv"],
            lambda tmp: df.to_csv(tmp, index=False, lineterminator="\n"),
        )

        logger.info(
            "Saved %s: %d rows x %d columns -> %s, %s",
            base_name, len(df), len(df.columns), paths["parquet"].name, paths["csv"].name,
        )
        return paths

    def load(self, base_name: str) -> pd.DataFrame:
        """Read back the Parquet snapshot written by persist().

        Raises
        ------
        PersistenceError
            If the snapshot is missing or unreadable.
        """
        path = self.paths_for(base_name)["parquet"]
        if not path.exists():
            raise PersistenceError(
                f"Snapshot not found: {path}. Run the category pass before the join pass."
            )
        try:
            df = pd.read_parquet(path, engine="pyarrow")
        except Exception as e:
            raise PersistenceError(f"Could not read snapshot {path}: {e}") from e

        logger.debug("Loaded %s: %d rows", path.name, len(df))
        return df

    def _atomic_write(self, path: Path, writer) -> None:
        """Run ``writer(tmp_path)`` then rename tmp over ``path``."""
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            writer(tmp_path)
            os.replace(tmp_path, path)
        except Exception as e:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass
            raise PersistenceError(f"Failed to write {path}: {e}") from e
