"""Fixed-origin survey grid and point/polygon rasterization.

Every transect of a survey is rasterized onto the same GridSpec, so a cell
(col, row) has the same center (x, y) in every transect raster and in the
merged table. Nothing downstream resamples.

Point rasterization aggregates the values falling in each cell with a
configurable function. Cells without contributing points are left undefined
(NaN), never zero: "no returns" and "not surveyed" are told apart later by the
coverage mask, not by the aggregation.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Union, TYPE_CHECKING

import numpy as np
import pandas as pd
import shapely
from shapely.geometry.base import BaseGeometry

if TYPE_CHECKING:
    from sonargrid.schemas import InternalConfig

__all__ = ['GridSpec', 'GridRasterizer', 'AGGREGATIONS']

logger = logging.getLogger(__name__)

# Named cell aggregations. "distinct_count" counts distinct depth bins.
AGGREGATIONS = ("distinct_count", "min", "max", "count", "mean")


@dataclass(frozen=True)
class GridSpec:
    """Shared grid addressing for one survey.

    Cells are addressed by (col, row) with col increasing east and row
    increasing north from the lower-left ``origin``. Cell centers sit at
    ``origin + (index + 0.5) * cell_size``.
    """
    origin_x: float
    origin_y: float
    cell_size: float
    ncols: int
    nrows: int

    @classmethod
    def from_config(cls, config: "InternalConfig") -> "GridSpec":
        """Build the grid from ``config.grid`` (origin, extent, cell size)."""
        (x0, y0) = config.grid.origin
        (width, height) = config.grid.extent
        cell = config.grid.cell_size
        # round() guards against 1000 / 0.1 style float noise adding a column
        ncols = int(np.ceil(round(width / cell, 9)))
        nrows = int(np.ceil(round(height / cell, 9)))
        return cls(float(x0), float(y0), float(cell), max(ncols, 1), max(nrows, 1))

    @property
    def shape(self) -> tuple:
        return (self.nrows, self.ncols)

    @property
    def x_centers(self) -> np.ndarray:
        return self.origin_x + (np.arange(self.ncols) + 0.5) * self.cell_size

    @property
    def y_centers(self) -> np.ndarray:
        return self.origin_y + (np.arange(self.nrows) + 0.5) * self.cell_size

    def cell_index(self, x, y):
        """Map planar points to (col, row) and an inside-grid mask.

        Points on the east/north outer edge fall outside; points on the
        west/south edge are inside (half-open cells).
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        col = np.floor((x - self.origin_x) / self.cell_size)
        row = np.floor((y - self.origin_y) / self.cell_size)
        inside = (
            np.isfinite(col) & np.isfinite(row)
            & (col >= 0) & (col < self.ncols)
            & (row >= 0) & (row < self.nrows)
        )
        col = np.where(inside, col, -1).astype(np.int64)
        row = np.where(inside, row, -1).astype(np.int64)
        return col, row, inside

    def cell_center(self, col, row):
        """Center (x, y) of cell(s) (col, row)."""
        col = np.asarray(col)
        row = np.asarray(row)
        return (
            self.origin_x + (col + 0.5) * self.cell_size,
            self.origin_y + (row + 0.5) * self.cell_size,
        )

    def coords(self) -> dict:
        """Coordinates for an xarray object on this grid (dims: y, x)."""
        return {"y": self.y_centers, "x": self.x_centers}

    def attrs(self) -> dict:
        """Grid signature stored on every raster built on this grid."""
        return {
            "grid_origin_x": self.origin_x,
            "grid_origin_y": self.origin_y,
            "grid_cell_size": self.cell_size,
            "grid_ncols": self.ncols,
            "grid_nrows": self.nrows,
        }


class GridRasterizer:
    """Rasterize points and polygons onto a GridSpec.

    Parameters
    ----------
    grid : GridSpec
        Shared survey grid.
    depth_bin_size : float, optional
        Bin size used by the "distinct_count" aggregation (default 1.0):
        a value v falls in bin ``floor(v / depth_bin_size)``.

    Examples
    --------
    >>> rasterizer = GridRasterizer(grid)
    >>> thickness = rasterizer.rasterize_points(df.x, df.y, df.depth, "distinct_count")
    >>> mask = rasterizer.rasterize_polygon(coverage_polygon)
    """

    def __init__(self, grid: GridSpec, depth_bin_size: float = 1.0):
        self.grid = grid
        self.depth_bin_size = float(depth_bin_size)

    def rasterize_points(self, x, y, values,
                         fun: Union[str, Callable] = "distinct_count") -> np.ndarray:
        """Aggregate point values per cell.

        Parameters
        ----------
        x, y : array-like
            Planar point coordinates.
        values : array-like
            Value per point (depth for the thickness/min/max rasters).
        fun : str or callable
            One of AGGREGATIONS, or any callable accepted by
            ``pandas.core.groupby.SeriesGroupBy.agg``.

        Returns
        -------
        np.ndarray
            Float array of shape (nrows, ncols); NaN where no point
            contributed.
        """
        values = np.asarray(values, dtype=float)
        col, row, inside = self.grid.cell_index(x, y)
        keep = inside & np.isfinite(values)

        n_outside = int(np.count_nonzero(~inside))
        if n_outside:
            logger.debug("Rasterize: %d points outside grid ignored", n_outside)

        flat = np.full(self.grid.nrows * self.grid.ncols, np.nan)
        if not keep.any():
            return flat.reshape(self.grid.shape)

        frame = pd.DataFrame({
            "cell": row[keep] * self.grid.ncols + col[keep],
            "value": values[keep],
        })

        if fun == "distinct_count":
            frame["value"] = np.floor(frame["value"] / self.depth_bin_size)
            agg = frame.groupby("cell")["value"].nunique()
        elif isinstance(fun, str) and fun not in AGGREGATIONS:
            raise ValueError(f"Unknown aggregation: {fun}")
        else:
            agg = frame.groupby("cell")["value"].agg(fun)

        flat[agg.index.to_numpy()] = agg.to_numpy(dtype=float)
        return flat.reshape(self.grid.shape)

    def rasterize_polygon(self, polygon: BaseGeometry) -> np.ndarray:
        """Boolean mask of cells whose center lies in or on ``polygon``.

        Only the cells inside the polygon's bounding box are tested.
        """
        mask = np.zeros(self.grid.shape, dtype=bool)
        if polygon is None or polygon.is_empty:
            return mask

        minx, miny, maxx, maxy = polygon.bounds
        xc = self.grid.x_centers
        yc = self.grid.y_centers
        cols = np.nonzero((xc >= minx) & (xc <= maxx))[0]
        rows = np.nonzero((yc >= miny) & (yc <= maxy))[0]
        if cols.size == 0 or rows.size == 0:
            return mask

        sub_x, sub_y = np.meshgrid(xc[cols], yc[rows])
        mask[np.ix_(rows, cols)] = shapely.intersects_xy(polygon, sub_x, sub_y)
        return mask
