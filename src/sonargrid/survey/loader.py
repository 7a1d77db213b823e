"""Read survey inputs from disk into in-memory tables and rasters.

Samples and cruise tracks are tabular (CSV or Parquet); the bathymetric
surface is either a NetCDF grid or a long-form ``x, y, depth`` table.
Column names are normalized through the mappings in ``config.inputs`` so
exports from different echo-integration tools load the same way.

Unlike the per-transect stages, the loader raises on bad input: a survey
that cannot be read is a configuration problem and aborts before any
transect is processed.
"""

from pathlib import Path
from typing import TYPE_CHECKING
import logging

import numpy as np
import pandas as pd
import xarray as xr

from sonargrid.survey.bathymetry import BathymetryLookup
from sonargrid.survey.geoframe import GeoFrame

if TYPE_CHECKING:
    from sonargrid.schemas import InternalConfig

__all__ = ['SurveyDataLoader', 'SAMPLE_COLUMNS', 'TRACK_COLUMNS']

logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = ("x", "y", "depth", "transect_id")
TRACK_COLUMNS = ("x", "y", "sequence_index", "transect_id")

_TABLE_READERS = {
    ".csv": pd.read_csv,
    ".txt": pd.read_csv,
    ".parquet": pd.read_parquet,
    ".pq": pd.read_parquet,
}


class SurveyDataLoader:
    """Load samples, track points and bathymetry for one survey.

    Parameters
    ----------
    config : InternalConfig
        Uses ``config.inputs`` (paths and column mappings),
        ``config.bathymetry`` (variable name, interpolation method) and
        ``config.survey.reference_point`` (optional local frame origin).

    Notes
    -----
    When a reference point is configured, samples, track and bathymetry are
    all shifted into the same site-local frame, so the grid origin is given
    in local coordinates too.

    Examples
    --------
    >>> loader = SurveyDataLoader(config)
    >>> samples, track, bathymetry = loader.load_all()
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.sample_columns = dict(config.inputs.sample_columns)
        self.track_columns = dict(config.inputs.track_columns)
        self.var_name = config.bathymetry.var_name
        self.method = config.bathymetry.method

        reference = config.survey.reference_point
        self.frame = GeoFrame(*reference) if reference is not None else None

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    @staticmethod
    def _require_path(path, what: str) -> Path:
        if path is None:
            raise ValueError(f"No {what} path configured")
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"{what.capitalize()} file not found: {path}")
        return path

    @staticmethod
    def read_table(path: Path) -> pd.DataFrame:
        """Read a CSV or Parquet table, chosen by file suffix."""
        reader = _TABLE_READERS.get(path.suffix.lower())
        if reader is None:
            raise ValueError(
                f"Unsupported table format '{path.suffix}' for {path} "
                f"(expected one of {sorted(_TABLE_READERS)})"
            )
        return reader(path)

    @staticmethod
    def normalize(df: pd.DataFrame, mapping: dict, required, what: str) -> pd.DataFrame:
        """Rename columns through ``mapping`` and check required ones exist.

        Rows with non-finite numeric values in the required columns are
        dropped; ``transect_id`` is cast to string.
        """
        df = df.rename(columns=mapping)
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise ValueError(
                f"{what} table is missing columns {missing} "
                f"(have {list(df.columns)})"
            )

        numeric = [c for c in required if c != "transect_id"]
        for col in numeric:
            df[col] = pd.to_numeric(df[col], errors="coerce")

        finite = np.isfinite(df[numeric].to_numpy(dtype=float)).all(axis=1)
        finite &= df["transect_id"].notna().to_numpy()
        n_dropped = int(np.count_nonzero(~finite))
        if n_dropped:
            logger.info("%s: dropped %d rows with missing coordinates or values",
                        what, n_dropped)

        df = df.loc[finite].reset_index(drop=True)
        df["transect_id"] = df["transect_id"].astype(str)
        return df

    def load_samples(self, path=None) -> pd.DataFrame:
        """Echo samples with columns ``x, y, depth, transect_id`` (+ extras)."""
        path = self._require_path(path or self.config.inputs.samples_path, "samples")
        samples = self.normalize(self.read_table(path), self.sample_columns,
                                 SAMPLE_COLUMNS, "Samples")
        if self.frame is not None:
            samples = self.frame.localize_frame(samples)
        logger.info("Loaded %d samples in %d transects from %s",
                    len(samples), samples["transect_id"].nunique(), path.name)
        return samples

    def load_track(self, path=None) -> pd.DataFrame:
        """Track points with columns ``x, y, sequence_index, transect_id``."""
        path = self._require_path(path or self.config.inputs.track_path, "track")
        track = self.normalize(self.read_table(path), self.track_columns,
                               TRACK_COLUMNS, "Track")
        track["sequence_index"] = track["sequence_index"].astype(np.int64)
        if self.frame is not None:
            track = self.frame.localize_frame(track)
        logger.info("Loaded %d track points in %d transects from %s",
                    len(track), track["transect_id"].nunique(), path.name)
        return track

    # ------------------------------------------------------------------
    # Bathymetry
    # ------------------------------------------------------------------

    def read_surface(self, path: Path) -> xr.DataArray:
        """Bathymetry raster as a (y, x) DataArray."""
        if path.suffix.lower() in (".nc", ".nc4", ".netcdf"):
            with xr.open_dataset(path) as ds:
                if self.var_name not in ds:
                    raise ValueError(
                        f"Variable '{self.var_name}' not found in {path} "
                        f"(have {list(ds.data_vars)})"
                    )
                return ds[self.var_name].load()

        table = self.read_table(path)
        missing = [c for c in ("x", "y", self.var_name) if c not in table.columns]
        if missing:
            raise ValueError(f"Bathymetry table {path} is missing columns {missing}")
        if table.duplicated(["x", "y"]).any():
            raise ValueError(f"Bathymetry table {path} has duplicate (x, y) nodes")
        return table.set_index(["y", "x"])[self.var_name].to_xarray()

    def load_bathymetry(self, path=None) -> BathymetryLookup:
        path = self._require_path(path or self.config.inputs.bathymetry_path, "bathymetry")
        surface = self.read_surface(path)
        if self.frame is not None:
            surface = self.frame.localize_surface(surface)
        logger.info("Loaded bathymetry %s from %s", dict(surface.sizes), path.name)
        return BathymetryLookup(surface, method=self.method)

    def load_all(self):
        """Load (samples, track, bathymetry) from the configured paths."""
        return self.load_samples(), self.load_track(), self.load_bathymetry()
