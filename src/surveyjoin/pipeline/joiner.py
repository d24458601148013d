"""Inner join of the two combined category tables on the participant key."""

import logging

import pandas as pd

from surveyjoin.contracts import assert_joined

__all__ = ['join_categories']

logger = logging.getLogger(__name__)


def join_categories(
    left: pd.DataFrame,
    right: pd.DataFrame,
    key: str,
    left_name: str = "left",
    right_name: str = "right",
) -> pd.DataFrame:
    """Inner-join two combined tables on ``key``.

    Rows follow the left table's order; each left row is followed by its
    matches in right-table order. Duplicate keys on either side expand to
    every matching pair. Rows whose key is null never match.

    Same-named non-key columns are kept from both sides, suffixed with
    ``_<left_name>`` and ``_<right_name>`` respectively. The provenance
    columns always collide, so a default run yields ``Cycle_laboratory`` and
    ``Cycle_demographics``.

    If either table lacks the key column (for example, every entry of a
    category failed), the result is an empty table rather than an error.

    Parameters
    ----------
    left, right : pd.DataFrame
        Combined category tables.
    key : str
        Shared identifier column, e.g. ``"SEQN"``.
    left_name, right_name : str
        Category names used as collision suffixes.

    Returns
    -------
    pd.DataFrame
        Merged table, possibly with zero rows.
    """
    if key not in left.columns or key not in right.columns:
        missing = [name for name, df in ((left_name, left), (right_name, right)) if key not in df.columns]
        logger.warning("Join key '%s' missing from %s; merged table is empty", key, ", ".join(missing))
        return _empty_merge(left, right, key, left_name, right_name)

    left_keyed = _drop_null_keys(left, key, left_name)
    right_keyed = _drop_null_keys(right, key, right_name)

    merged = left_keyed.merge(
        right_keyed,
        on=key,
        how="inner",
        sort=False,
        suffixes=(f"_{left_name}", f"_{right_name}"),
    )

    assert_joined(merged, left_keyed, right_keyed, key)

    if merged.empty:
        logger.warning("Join on '%s' produced no matching rows", key)
    else:
        logger.info(
            "Joined on '%s': %d x %d rows -> %d rows, %d columns",
            key, len(left), len(right), len(merged), len(merged.columns),
        )
    return merged


def _drop_null_keys(df: pd.DataFrame, key: str, name: str) -> pd.DataFrame:
    null_keys = df[key].isna()
    if null_keys.any():
        logger.warning("Dropping %d %s rows with null '%s'", int(null_keys.sum()), name, key)
        return df.loc[~null_keys]
    return df


def _empty_merge(left, right, key, left_name, right_name) -> pd.DataFrame:
    """Zero-row frame with the columns a real merge would have produced."""
    left_cols = [c for c in left.columns if c != key]
    right_cols = [c for c in right.columns if c != key]
    shared = set(left_cols) & set(right_cols)

    columns = [key] if (key in left.columns or key in right.columns) else []
    columns += [f"{c}_{left_name}" if c in shared else c for c in left_cols]
    columns += [f"{c}_{right_name}" if c in shared else c for c in right_cols]
    return pd.DataFrame(columns=columns)
