"""Sonar swath coverage from a transect's cruise track.

At each track point the sonar fan is assumed to hit a flat seafloor at the
local depth d, so the insonified strip extends w = |d| * tan(angle / 2) to
either side of the vessel. The coverage polygon is the union of disks of
radius w centered at every k-th track point with a known seafloor depth,
plus the last such point.

The union is a set union: where disks overlap the area is counted once.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
import shapely
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

if TYPE_CHECKING:
    from sonargrid.schemas import InternalConfig

__all__ = ['SwathBufferBuilder', 'swath_half_width']

logger = logging.getLogger(__name__)


def swath_half_width(seafloor_depth, swath_angle_deg: float) -> np.ndarray:
    """Half-swath width on a flat seafloor.

    Parameters
    ----------
    seafloor_depth : array-like
        Seafloor depth under the vessel; sign is ignored.
    swath_angle_deg : float
        Fan opening angle in degrees (60 gives w = |d| * tan(30 deg)).

    Returns
    -------
    np.ndarray
        Half width in the same units as the depth. NaN where depth is NaN.

    Examples
    --------
    >>> round(float(swath_half_width(-20.0, 60.0)), 2)
    11.55
    """
    depth = np.abs(np.asarray(seafloor_depth, dtype=float))
    return depth * np.tan(np.radians(swath_angle_deg) / 2.0)


class SwathBufferBuilder:
    """Build the coverage polygon of one transect.

    Expects a track DataFrame with ``x``, ``y``, ``sequence_index`` and
    ``seafloor_depth`` columns (seafloor depth attached beforehand from the
    bathymetry surface).

    Parameters
    ----------
    config : InternalConfig
        Uses ``config.swath``: ``half_angle_deg`` (fan angle),
        ``subsample_stride`` (k), ``disk_quad_segs`` (disk resolution) and
        ``min_track_points``.

    Notes
    -----
    Never raises on bad data: too few track points, or no point with a known
    seafloor, yields an empty polygon. The caller decides whether that is a
    skip.
    """

    def __init__(self, config: "InternalConfig"):
        self.swath_angle_deg = config.swath.half_angle_deg
        self.stride = config.swath.subsample_stride
        self.quad_segs = config.swath.disk_quad_segs
        self.min_track_points = config.swath.min_track_points

    def retained_points(self, track: pd.DataFrame) -> pd.DataFrame:
        """Track points in sequence order with a usable seafloor depth."""
        ordered = track.sort_values("sequence_index", kind="mergesort")
        depth = ordered["seafloor_depth"].to_numpy(dtype=float)
        usable = np.isfinite(depth) & (depth != 0)
        return ordered.loc[usable]

    def buffer_points(self, track: pd.DataFrame) -> pd.DataFrame:
        """Every k-th retained point with its buffer width in column ``width``.

        The last retained point is always kept so coverage reaches the end
        of the transect.
        """
        retained = self.retained_points(track)
        positions = list(range(0, len(retained), self.stride))
        if len(retained) and positions[-1] != len(retained) - 1:
            positions.append(len(retained) - 1)
        subsampled = retained.iloc[positions]
        return subsampled.assign(
            width=swath_half_width(subsampled["seafloor_depth"], self.swath_angle_deg)
        )

    def build(self, track: pd.DataFrame) -> BaseGeometry:
        """Union of the buffer disks; empty Polygon when coverage is undefined."""
        if len(track) < self.min_track_points:
            logger.debug("Swath: %d track points (< %d), no coverage",
                         len(track), self.min_track_points)
            return Polygon()

        points = self.buffer_points(track)
        if points.empty:
            logger.debug("Swath: seafloor depth undefined at every track point")
            return Polygon()

        centers = shapely.points(points["x"].to_numpy(float), points["y"].to_numpy(float))
        disks = shapely.buffer(centers, points["width"].to_numpy(float),
                               quad_segs=self.quad_segs)
        coverage = unary_union(disks)

        logger.debug("Swath: %d disks, width %.2f-%.2f, area %.1f",
                     len(points), points["width"].min(), points["width"].max(),
                     coverage.area)
        return coverage
