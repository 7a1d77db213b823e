"""Merged table contract.

Enforces the output schema handed to downstream spatial models.
"""

import pandas as pd
from sonargrid.contracts.base import require

MERGED_COLUMNS = (
    "x",
    "y",
    "transect_id",
    "thickness",
    "min_depth",
    "max_depth",
    "seafloor_depth",
    "survey_date",
    "site_code",
)


def assert_merged_table(df: pd.DataFrame) -> None:
    """Enforce merged table contract.

    Parameters
    ----------
    df : pd.DataFrame
        Output of GridMerger.merge()

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        isinstance(df, pd.DataFrame),
        f"Merged contract violated: expected DataFrame, got {type(df)}"
    )

    missing = [c for c in MERGED_COLUMNS if c not in df.columns]
    require(
        not missing,
        f"Merged contract violated: missing columns {missing}"
    )

    if df.empty:
        return

    require(
        df["thickness"].notna().all(),
        "Merged contract violated: rows with undefined thickness"
    )
    require(
        (df["thickness"] >= 0).all(),
        "Merged contract violated: negative thickness"
    )
    require(
        not df.duplicated(["transect_id", "x", "y"]).any(),
        "Merged contract violated: duplicate (transect, cell) rows"
    )
