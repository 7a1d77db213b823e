"""Fold transect rasters into one long-form survey table.

Every raster is first checked against the shared grid; a raster on a
different grid aborts the merge. Cells are then flattened to one row per
(cell, transect) with defined thickness, and the seafloor depth at the cell
center is attached from the bathymetry surface. No resampling happens: the
(x, y) of a row is exactly the grid cell center.
"""

import logging
from typing import Iterable, TYPE_CHECKING

import numpy as np
import pandas as pd
import xarray as xr

from sonargrid.contracts import MERGED_COLUMNS, assert_grid_aligned, assert_merged_table

if TYPE_CHECKING:
    from sonargrid.schemas import InternalConfig
    from sonargrid.survey.bathymetry import BathymetryLookup
    from sonargrid.survey.grid_rasterizer import GridSpec

__all__ = ['GridMerger', 'empty_merged_table']

logger = logging.getLogger(__name__)

MERGED_DTYPES = {
    "x": "float64",
    "y": "float64",
    "transect_id": "string",
    "thickness": "Int64",
    "min_depth": "Float64",
    "max_depth": "Float64",
    "seafloor_depth": "Float64",
    "survey_date": "string",
    "site_code": "string",
}


def empty_merged_table() -> pd.DataFrame:
    """Zero-row table with the merged schema."""
    return pd.DataFrame({c: pd.Series(dtype=MERGED_DTYPES[c]) for c in MERGED_COLUMNS})


class GridMerger:
    """Merge TransectRasters into the survey table.

    Parameters
    ----------
    grid : GridSpec
        Shared survey grid the rasters must sit on.
    bathymetry : BathymetryLookup
        Seafloor surface sampled at cell centers.
    config : InternalConfig
        Uses ``survey.site_code`` and ``survey.survey_date``, stamped on
        every row.

    Examples
    --------
    >>> merger = GridMerger(grid, bathymetry, config)
    >>> table = merger.merge([r.raster for r in results if r.done])
    """

    def __init__(self, grid: "GridSpec", bathymetry: "BathymetryLookup",
                 config: "InternalConfig"):
        self.grid = grid
        self.site_code = config.survey.site_code
        self.survey_date = config.survey.survey_date
        self.cell_seafloor = bathymetry.cell_depths(grid)

    def flatten(self, raster: xr.Dataset) -> pd.DataFrame:
        """Rows for the cells of one raster with defined thickness."""
        thickness = raster["thickness"].values
        rows, cols = np.nonzero(np.isfinite(thickness))
        x, y = self.grid.cell_center(cols, rows)

        return pd.DataFrame({
            "x": x.astype(float),
            "y": y.astype(float),
            "transect_id": raster.attrs["transect_id"],
            "thickness": thickness[rows, cols],
            "min_depth": raster["min_depth"].values[rows, cols],
            "max_depth": raster["max_depth"].values[rows, cols],
            "seafloor_depth": self.cell_seafloor[rows, cols],
            "_row": rows,
            "_col": cols,
        })

    def merge(self, rasters: Iterable[xr.Dataset]) -> pd.DataFrame:
        """Concatenate rasters into the merged table.

        Returns
        -------
        pd.DataFrame
            Columns x, y, transect_id, thickness (Int64), min_depth,
            max_depth, seafloor_depth (Float64), survey_date, site_code.
            Sorted by transect, row, col.

        Raises
        ------
        ContractViolation
            If a raster does not match the shared grid.
        """
        frames = []
        for raster in rasters:
            assert_grid_aligned(raster, self.grid)
            frames.append(self.flatten(raster))

        frames = [f for f in frames if not f.empty]
        if not frames:
            logger.info("Merge: no defined cells in any transect")
            return empty_merged_table()

        merged = (
            pd.concat(frames, ignore_index=True)
            .sort_values(["transect_id", "_row", "_col"], kind="mergesort")
            .drop(columns=["_row", "_col"])
            .reset_index(drop=True)
        )
        merged["survey_date"] = self.survey_date
        merged["site_code"] = self.site_code

        # NaN becomes <NA> in the nullable dtypes
        merged["thickness"] = merged["thickness"].round().astype("Int64")
        merged = merged[list(MERGED_COLUMNS)].astype(MERGED_DTYPES)

        assert_merged_table(merged)
        logger.info("Merge: %d rows from %d transects",
                    len(merged), merged["transect_id"].nunique())
        return merged
