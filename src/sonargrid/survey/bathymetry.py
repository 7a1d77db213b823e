"""Seafloor depth lookup from a gridded bathymetric surface.

The surface is built elsewhere; this module only samples it. Depths are
returned positive-down regardless of whether the raster stores depths or
(negative) elevations. Points outside the raster or in raster holes get NaN,
which downstream code treats as "seafloor unknown".
"""

import logging
from typing import TYPE_CHECKING

import numpy as np
import xarray as xr
from scipy.interpolate import RegularGridInterpolator

if TYPE_CHECKING:
    from sonargrid.survey.grid_rasterizer import GridSpec

__all__ = ['BathymetryLookup']

logger = logging.getLogger(__name__)


class BathymetryLookup:
    """Sample seafloor depth at planar coordinates.

    Parameters
    ----------
    surface : xr.DataArray
        2D raster with ``x`` and ``y`` dimension coordinates in the same
        planar frame as the samples. Either sign convention is accepted.
    method : {"nearest", "linear"}
        Interpolation between raster nodes.

    Notes
    -----
    Read-only after construction, so one instance is shared by all transect
    workers of a survey.

    Examples
    --------
    >>> bathy = BathymetryLookup(ds["depth"], method="nearest")
    >>> bathy.depth_at([5.0, 10.0], [0.0, 0.0])
    array([20., 20.])
    """

    def __init__(self, surface: xr.DataArray, method: str = "nearest"):
        if not isinstance(surface, xr.DataArray):
            raise TypeError(f"surface must be an xarray.DataArray, got {type(surface)}")
        missing = {"x", "y"} - set(surface.dims)
        if missing or surface.ndim != 2:
            raise ValueError(
                f"Bathymetry surface must be 2D with dims ('y', 'x'), got {surface.dims}"
            )

        surface = surface.sortby("x").sortby("y").transpose("y", "x")
        self.method = method
        self.x = surface["x"].values.astype(float)
        self.y = surface["y"].values.astype(float)
        self.values = np.abs(surface.values.astype(float))

        self._interp = RegularGridInterpolator(
            (self.y, self.x),
            self.values,
            method=method,
            bounds_error=False,
            fill_value=np.nan,
        )
        logger.debug("BathymetryLookup: %dx%d nodes, method=%s, %d no-data",
                     len(self.y), len(self.x), method,
                     int(np.count_nonzero(~np.isfinite(self.values))))

    @classmethod
    def from_array(cls, x, y, values, method: str = "nearest") -> "BathymetryLookup":
        """Build from 1D node coordinates and a (len(y), len(x)) array."""
        surface = xr.DataArray(
            np.asarray(values, dtype=float),
            dims=("y", "x"),
            coords={"y": np.asarray(y, dtype=float), "x": np.asarray(x, dtype=float)},
            name="depth",
        )
        return cls(surface, method=method)

    def depth_at(self, x, y) -> np.ndarray:
        """Seafloor depth (positive down) at points; NaN where unknown."""
        x = np.atleast_1d(np.asarray(x, dtype=float))
        y = np.atleast_1d(np.asarray(y, dtype=float))
        if x.size == 0:
            return np.empty(x.shape)
        points = np.column_stack([y.ravel(), x.ravel()])
        return self._interp(points).reshape(x.shape)

    __call__ = depth_at

    def cell_depths(self, grid: "GridSpec") -> np.ndarray:
        """Seafloor depth at every cell center of ``grid``, shape (nrows, ncols)."""
        xx, yy = np.meshgrid(grid.x_centers, grid.y_centers)
        return self.depth_at(xx, yy)
