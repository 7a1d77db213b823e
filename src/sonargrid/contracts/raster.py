"""Transect raster contract.

Enforces the guarantee that a finished transect raster distinguishes
"surveyed, nothing found" from "not surveyed".
"""

import numpy as np
import xarray as xr
from sonargrid.contracts.base import require

RASTER_VARIABLES = ("thickness", "min_depth", "max_depth", "coverage")


def assert_transect_raster(ds: xr.Dataset) -> None:
    """Enforce transect raster contract.

    Called by TransectProcessor on the DONE transition.

    Parameters
    ----------
    ds : xr.Dataset
        Masked transect raster.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for var in RASTER_VARIABLES:
        require(
            var in ds.data_vars,
            f"Raster contract violated: missing '{var}' variable"
        )
    require(
        "transect_id" in ds.attrs,
        "Raster contract violated: missing 'transect_id' attribute"
    )

    coverage = ds["coverage"].values
    require(
        coverage.dtype == bool,
        f"Raster contract violated: coverage is {coverage.dtype}, expected bool"
    )

    thickness = ds["thickness"].values
    defined = np.isfinite(thickness)
    require(
        not (defined & ~coverage).any(),
        "Raster contract violated: thickness defined outside coverage"
    )
    require(
        (thickness[defined] >= 0).all(),
        "Raster contract violated: negative thickness"
    )
    require(
        np.array_equal(thickness[defined], np.round(thickness[defined])),
        "Raster contract violated: thickness is not a whole count"
    )

    min_depth = ds["min_depth"].values
    max_depth = ds["max_depth"].values
    both = np.isfinite(min_depth) & np.isfinite(max_depth)
    require(
        (min_depth[both] <= max_depth[both]).all(),
        "Raster contract violated: min_depth > max_depth"
    )
    require(
        not (np.isfinite(min_depth) & ~defined).any(),
        "Raster contract violated: min_depth defined where thickness is undefined"
    )
