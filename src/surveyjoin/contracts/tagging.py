"""Tagging stage contract.

Every row of a combined category table carries non-null provenance values,
and those values belong to the category's configured sources.
"""

import pandas as pd

from surveyjoin.contracts.base import require


def assert_tagged(
    df: pd.DataFrame,
    cycle_column: str,
    source_column: str,
    allowed_labels=None,
) -> None:
    """Enforce tagging contract on a combined table.

    An empty table with no columns (all entries failed) satisfies the
    contract trivially.

    Parameters
    ----------
    df : pd.DataFrame
        Combined category table.
    cycle_column, source_column : str
        Provenance column names (from config).
    allowed_labels : iterable of str, optional
        Cycle labels configured for the category.

    Raises
    ------
    ContractViolation
        If a provenance column is missing or holds null or unknown values.
    """
    require(
        isinstance(df, pd.DataFrame),
        f"Tagging contract violated: output is {type(df)}, expected DataFrame"
    )

    if df.empty and len(df.columns) == 0:
        return

    for col in (cycle_column, source_column):
        require(
            col in df.columns,
            f"Tagging contract violated: missing provenance column '{col}'"
        )
        require(
            not df[col].isna().any(),
            f"Tagging contract violated: '{col}' has {int(df[col].isna().sum())} null values"
        )

    if allowed_labels is not None:
        unknown = set(df[cycle_column].unique()) - set(allowed_labels)
        require(
            not unknown,
            f"Tagging contract violated: unconfigured cycle labels {sorted(unknown)}"
        )
