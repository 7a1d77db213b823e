"""Local planar frame centered on a site reference point.

Survey coordinates (e.g. UTM meters) are large numbers; shifting them to a
site-centered frame keeps grid arithmetic well conditioned. Translation only,
no reprojection.
"""

import numpy as np
import pandas as pd
import xarray as xr

__all__ = ['GeoFrame']


class GeoFrame:
    """Translate between world and site-local planar coordinates."""

    def __init__(self, origin_x: float, origin_y: float):
        self.origin_x = float(origin_x)
        self.origin_y = float(origin_y)

    def to_local(self, x, y):
        return np.asarray(x, dtype=float) - self.origin_x, np.asarray(y, dtype=float) - self.origin_y

    def to_world(self, x, y):
        return np.asarray(x, dtype=float) + self.origin_x, np.asarray(y, dtype=float) + self.origin_y

    def localize_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """Copy of ``df`` with its ``x``/``y`` columns in the local frame."""
        x, y = self.to_local(df["x"], df["y"])
        return df.assign(x=x, y=y)

    def localize_surface(self, surface: xr.DataArray) -> xr.DataArray:
        """Copy of a raster with shifted ``x``/``y`` coordinates."""
        return surface.assign_coords(
            x=surface["x"].values - self.origin_x,
            y=surface["y"].values - self.origin_y,
        )

    def __repr__(self):
        return f"GeoFrame(origin_x={self.origin_x}, origin_y={self.origin_y})"
