"""Per-transect processing: filter, rasterize, mask.

One transect moves through a fixed sequence of states::

    LOADED -> FILTERED -> RASTERIZED -> MASKED -> DONE
       |                      |
       +------> SKIPPED <-----+

and comes out as a TransectResult holding an immutable TransectRaster
(an xarray.Dataset on the shared survey grid). Processing is a pure
function of (samples, track, bathymetry, grid, config), so the processor
holds no per-transect state and one instance is safely shared by worker
threads.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TYPE_CHECKING

import numpy as np
import pandas as pd
import xarray as xr

from sonargrid.survey.grid_rasterizer import GridRasterizer
from sonargrid.survey.swath_buffer import SwathBufferBuilder
from sonargrid.contracts import (
    DegenerateCoverage,
    EmptyTransect,
    TransectSkipped,
    assert_transect_raster,
    require,
)

if TYPE_CHECKING:
    from sonargrid.schemas import InternalConfig
    from sonargrid.survey.bathymetry import BathymetryLookup
    from sonargrid.survey.grid_rasterizer import GridSpec

__all__ = ['TransectProcessor', 'TransectResult', 'TransectState']

logger = logging.getLogger(__name__)


class TransectState(str, Enum):
    """Processing state of one transect."""
    LOADED = "loaded"
    FILTERED = "filtered"
    RASTERIZED = "rasterized"
    MASKED = "masked"
    DONE = "done"
    SKIPPED = "skipped"


ALLOWED_TRANSITIONS = {
    TransectState.LOADED: {TransectState.FILTERED, TransectState.SKIPPED},
    TransectState.FILTERED: {TransectState.RASTERIZED},
    TransectState.RASTERIZED: {TransectState.MASKED, TransectState.SKIPPED},
    TransectState.MASKED: {TransectState.DONE},
    TransectState.DONE: set(),
    TransectState.SKIPPED: set(),
}


@dataclass(frozen=True)
class TransectResult:
    """Outcome of processing one transect.

    ``raster`` is None unless ``state`` is DONE; ``reason`` is set when
    ``state`` is SKIPPED.
    """
    transect_id: str
    state: TransectState
    raster: Optional[xr.Dataset] = None
    reason: Optional[str] = None
    n_samples: int = 0
    n_retained: int = 0
    n_covered_cells: int = 0
    history: tuple = field(default_factory=tuple)

    @property
    def done(self) -> bool:
        return self.state == TransectState.DONE


class _Progress:
    """State history of one transect run; rejects out-of-order transitions."""

    def __init__(self, transect_id: str):
        self.transect_id = transect_id
        self.history = [TransectState.LOADED]

    @property
    def state(self) -> TransectState:
        return self.history[-1]

    def advance(self, new_state: TransectState) -> None:
        require(
            new_state in ALLOWED_TRANSITIONS[self.state],
            f"Transect {self.transect_id}: illegal transition "
            f"{self.state.value} -> {new_state.value}"
        )
        logger.debug("Transect %s: %s -> %s", self.transect_id,
                     self.state.value, new_state.value)
        self.history.append(new_state)


class TransectProcessor:
    """Turn one transect's samples and track into a masked TransectRaster.

    Parameters
    ----------
    config : InternalConfig
        Uses ``filter`` (depth thresholds), ``rasterizer`` (depth bin size),
        ``swath`` (via SwathBufferBuilder) and ``processor`` (skip/mask
        switches).
    grid : GridSpec
        Shared survey grid; every raster is built on it.
    bathymetry : BathymetryLookup
        Seafloor depth surface, shared read-only across transects.

    Notes
    -----
    Per-transect data problems (no track, no samples, degenerate coverage)
    end in a SKIPPED result, never an exception. Contract violations are
    not caught here: they indicate a bug and abort the survey.

    Examples
    --------
    >>> processor = TransectProcessor(config, grid, bathymetry)
    >>> result = processor.process("T01", samples_t01, track_t01)
    >>> result.state
    <TransectState.DONE: 'done'>
    >>> result.raster["thickness"]
    """

    def __init__(self, config: "InternalConfig", grid: "GridSpec",
                 bathymetry: "BathymetryLookup"):
        self.config = config
        self.grid = grid
        self.bathymetry = bathymetry

        self.min_depth = config.filter.min_depth_threshold
        self.clearance = config.filter.bottom_clearance_threshold
        self.skip_without_samples = config.processor.skip_transects_without_samples
        self.mask_missing_seafloor = config.processor.mask_missing_seafloor

        self.rasterizer = GridRasterizer(grid, config.rasterizer.depth_bin_size)
        self.swath = SwathBufferBuilder(config)

        # Transect-independent, computed once per survey
        self._cell_seafloor = bathymetry.cell_depths(grid)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def filter_samples(self, samples: pd.DataFrame) -> pd.DataFrame:
        """Keep samples deep enough and clearly above the seafloor.

        A sample is kept when ``depth >= min_depth_threshold`` and
        ``depth < seafloor - bottom_clearance_threshold``. Samples where the
        seafloor is unknown cannot be checked and are dropped.
        """
        depth = samples["depth"].to_numpy(dtype=float)
        seafloor = self.bathymetry.depth_at(samples["x"], samples["y"])

        known = np.isfinite(seafloor)
        deep_enough = depth >= self.min_depth
        above_bottom = depth < seafloor - self.clearance
        keep = known & deep_enough & above_bottom

        logger.debug(
            "Filter: %d samples, %d unknown seafloor, %d too shallow, "
            "%d too close to bottom, %d kept",
            len(samples), int(np.count_nonzero(~known)),
            int(np.count_nonzero(known & ~deep_enough)),
            int(np.count_nonzero(known & deep_enough & ~above_bottom)),
            int(np.count_nonzero(keep)),
        )
        return samples.loc[keep].assign(seafloor_depth=seafloor[keep])

    def attach_seafloor(self, track: pd.DataFrame) -> pd.DataFrame:
        """Copy of the track with seafloor depth under every point."""
        return track.assign(seafloor_depth=self.bathymetry.depth_at(track["x"], track["y"]))

    def rasterize(self, retained: pd.DataFrame) -> dict:
        """Raw thickness/min/max rasters; NaN where no sample contributed."""
        x, y, depth = retained["x"], retained["y"], retained["depth"]
        return {
            "thickness": self.rasterizer.rasterize_points(x, y, depth, "distinct_count"),
            "min_depth": self.rasterizer.rasterize_points(x, y, depth, "min"),
            "max_depth": self.rasterizer.rasterize_points(x, y, depth, "max"),
        }

    def mask(self, stats: dict, coverage: np.ndarray) -> dict:
        """Apply the coverage mask.

        Covered cells without samples get thickness 0; everything outside
        coverage is undefined.
        """
        thickness = np.where(coverage, np.nan_to_num(stats["thickness"], nan=0.0), np.nan)
        min_depth = np.where(coverage, stats["min_depth"], np.nan)
        max_depth = np.where(coverage, stats["max_depth"], np.nan)

        if self.mask_missing_seafloor:
            unknown = ~np.isfinite(self._cell_seafloor)
            thickness[unknown] = np.nan
            min_depth[unknown] = np.nan
            max_depth[unknown] = np.nan

        return {"thickness": thickness, "min_depth": min_depth, "max_depth": max_depth}

    def build_raster(self, transect_id: str, masked: dict, coverage: np.ndarray) -> xr.Dataset:
        dims = ("y", "x")
        ds = xr.Dataset(
            {
                "thickness": (dims, masked["thickness"]),
                "min_depth": (dims, masked["min_depth"]),
                "max_depth": (dims, masked["max_depth"]),
                "coverage": (dims, coverage),
            },
            coords=self.grid.coords(),
        )
        ds.attrs.update(self.grid.attrs())
        ds.attrs["transect_id"] = transect_id
        ds["thickness"].attrs.update(long_name="school thickness", units="depth bins")
        ds["min_depth"].attrs.update(long_name="shallowest retained sample", units="m")
        ds["max_depth"].attrs.update(long_name="deepest retained sample", units="m")
        ds["coverage"].attrs.update(long_name="cell center inside swath coverage")
        return ds

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def process(self, transect_id, samples: pd.DataFrame, track: pd.DataFrame) -> TransectResult:
        """Run one transect through all states.

        Parameters
        ----------
        transect_id : str
            Transect identifier, stored on the raster.
        samples : pd.DataFrame
            This transect's samples (``x, y, depth``). May be empty; None
            counts as no samples.
        track : pd.DataFrame
            This transect's track points (``x, y, sequence_index``).

        Returns
        -------
        TransectResult
            DONE with a raster, or SKIPPED with a reason.
        """
        transect_id = str(transect_id)
        progress = _Progress(transect_id)
        counts = {"n_samples": 0 if samples is None else len(samples)}

        try:
            if track is None or len(track) == 0:
                raise EmptyTransect(transect_id, "no track points")
            if samples is None or (len(samples) == 0 and self.skip_without_samples):
                raise EmptyTransect(transect_id, "no samples")

            retained = self.filter_samples(samples)
            counts["n_retained"] = len(retained)
            progress.advance(TransectState.FILTERED)

            polygon = self.swath.build(self.attach_seafloor(track))
            stats = self.rasterize(retained)
            progress.advance(TransectState.RASTERIZED)

            if polygon.is_empty:
                raise DegenerateCoverage(
                    transect_id,
                    f"empty coverage polygon ({len(track)} track points)"
                )
            if not polygon.is_valid or polygon.area <= 0:
                raise DegenerateCoverage(transect_id, "invalid coverage polygon")

            coverage = self.rasterizer.rasterize_polygon(polygon)
            counts["n_covered_cells"] = int(np.count_nonzero(coverage))
            if not coverage.any():
                raise DegenerateCoverage(transect_id, "coverage polygon covers no grid cell")

            masked = self.mask(stats, coverage)
            progress.advance(TransectState.MASKED)

            raster = self.build_raster(transect_id, masked, coverage)
            assert_transect_raster(raster)
            progress.advance(TransectState.DONE)

        except TransectSkipped as e:
            progress.advance(TransectState.SKIPPED)
            logger.warning("Transect %s skipped at %s: %s", transect_id,
                           progress.history[-2].value, e.reason)
            return TransectResult(
                transect_id=transect_id,
                state=TransectState.SKIPPED,
                reason=e.reason,
                history=tuple(progress.history),
                **counts,
            )

        n_defined = int(np.count_nonzero(np.isfinite(raster["thickness"].values)))
        logger.info(
            "Transect %s: %d/%d samples retained, %d covered cells, %d with thickness > 0",
            transect_id, counts["n_retained"], counts["n_samples"],
            counts["n_covered_cells"],
            int(np.count_nonzero(raster["thickness"].values > 0)),
        )
        logger.debug("Transect %s: %d defined cells", transect_id, n_defined)

        return TransectResult(
            transect_id=transect_id,
            state=TransectState.DONE,
            raster=raster,
            history=tuple(progress.history),
            **counts,
        )
