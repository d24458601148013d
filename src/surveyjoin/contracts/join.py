"""Join stage contract.

Every merged row's key value exists in both input tables.
"""

import pandas as pd

from surveyjoin.contracts.base import require


def assert_joined(merged: pd.DataFrame, left: pd.DataFrame, right: pd.DataFrame, key: str) -> None:
    """Enforce join contract.

    Parameters
    ----------
    merged : pd.DataFrame
        Output from join_categories().
    left, right : pd.DataFrame
        Combined category tables that were joined.
    key : str
        Join key column.

    Raises
    ------
    ContractViolation
        If a merged key is absent from either input.
    """
    if merged.empty:
        return

    require(
        key in merged.columns,
        f"Join contract violated: merged table lacks key column '{key}'"
    )

    require(
        not merged[key].isna().any(),
        f"Join contract violated: merged table has null '{key}' values"
    )

    merged_keys = set(merged[key].unique())
    missing_left = merged_keys - set(left[key].dropna().unique())
    missing_right = merged_keys - set(right[key].dropna().unique())
    require(
        not missing_left,
        f"Join contract violated: {len(missing_left)} merged keys absent from left table"
    )
    require(
        not missing_right,
        f"Join contract violated: {len(missing_right)} merged keys absent from right table"
    )
