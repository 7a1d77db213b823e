"""Grid addressing contract.

Enforces the guarantee that a transect raster sits on the survey's shared
grid, so merging never needs to resample or re-project.
"""

from typing import TYPE_CHECKING

import numpy as np
import xarray as xr
from sonargrid.contracts.base import require

if TYPE_CHECKING:
    from sonargrid.survey.grid_rasterizer import GridSpec


def assert_grid_aligned(ds: xr.Dataset, grid: "GridSpec") -> None:
    """Enforce grid addressing contract.

    Called by the merger before a transect raster is flattened. A mismatch
    means the raster was built with a different grid configuration, which
    is a configuration bug rather than a data condition.

    Parameters
    ----------
    ds : xr.Dataset
        Transect raster from TransectProcessor.

    grid : GridSpec
        The survey's shared grid.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    transect = ds.attrs.get("transect_id", "?")

    require(
        "x" in ds.coords and "y" in ds.coords,
        f"Grid contract violated: transect {transect} raster missing 'x'/'y' coordinates"
    )

    for key, expected in grid.attrs().items():
        actual = ds.attrs.get(key)
        require(
            actual is not None and np.isclose(actual, expected, rtol=0, atol=1e-9),
            f"Grid contract violated: transect {transect} has {key}={actual}, "
            f"survey grid has {expected}"
        )

    require(
        ds.sizes.get("y") == grid.nrows and ds.sizes.get("x") == grid.ncols,
        f"Grid contract violated: transect {transect} raster shape "
        f"{dict(ds.sizes)} != grid shape {grid.shape}"
    )
    require(
        np.array_equal(ds["x"].values, grid.x_centers)
        and np.array_equal(ds["y"].values, grid.y_centers),
        f"Grid contract violated: transect {transect} cell centers differ from survey grid"
    )
