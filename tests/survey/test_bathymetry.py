"""Tests for BathymetryLookup."""

import numpy as np
import pytest
import xarray as xr

from sonargrid.survey.bathymetry import BathymetryLookup
from sonargrid.survey.grid_rasterizer import GridSpec

pytestmark = pytest.mark.unit


@pytest.fixture
def ramp():
    """Depth 10 m at x=0 rising linearly to 20 m at x=10; y in [0, 10]."""
    x = np.array([0.0, 10.0])
    y = np.array([0.0, 10.0])
    values = np.array([[10.0, 20.0], [10.0, 20.0]])
    return x, y, values


class TestBathymetryLookup:

    def test_elevations_become_depths(self, flat_bathymetry):
        bathy = flat_bathymetry(depth=20.0)
        np.testing.assert_allclose(bathy.depth_at([0.0, 33.3], [0.0, -71.0]), [20.0, 20.0])

    def test_outside_raster_is_nan(self, flat_bathymetry):
        bathy = flat_bathymetry(half_width=50.0)
        assert np.isnan(bathy.depth_at(500.0, 0.0)).all()

    def test_holes_are_nan(self):
        values = np.array([[20.0, np.nan], [20.0, 20.0]])
        bathy = BathymetryLookup.from_array([0.0, 10.0], [0.0, 10.0], values)

        assert np.isnan(bathy.depth_at(9.0, 1.0)).all()
        assert bathy.depth_at(1.0, 1.0)[0] == 20.0

    def test_linear_interpolation(self, ramp):
        bathy = BathymetryLookup.from_array(*ramp, method="linear")
        assert bathy.depth_at(5.0, 5.0)[0] == pytest.approx(15.0)

    def test_nearest_interpolation(self, ramp):
        bathy = BathymetryLookup.from_array(*ramp, method="nearest")
        assert bathy.depth_at(7.0, 5.0)[0] == 20.0

    def test_callable_and_shape(self, flat_bathymetry):
        bathy = flat_bathymetry()
        xx, yy = np.meshgrid([0.0, 1.0, 2.0], [0.0, 1.0])

        assert bathy(xx, yy).shape == (2, 3)

    def test_unsorted_coordinates_are_accepted(self):
        surface = xr.DataArray(
            np.array([[20.0, 10.0], [20.0, 10.0]]),
            dims=("y", "x"),
            coords={"y": [10.0, 0.0], "x": [10.0, 0.0]},
        )
        bathy = BathymetryLookup(surface, method="nearest")

        assert bathy.depth_at(1.0, 1.0)[0] == 10.0

    def test_cell_depths(self, flat_bathymetry):
        grid = GridSpec(-20.0, -20.0, 10.0, 4, 3)
        depths = flat_bathymetry(depth=35.0).cell_depths(grid)

        assert depths.shape == grid.shape
        np.testing.assert_allclose(depths, 35.0)

    def test_rejects_wrong_dims(self):
        surface = xr.DataArray(np.zeros((2, 2)), dims=("lat", "lon"))
        with pytest.raises(ValueError, match="2D"):
            BathymetryLookup(surface)

    def test_rejects_non_dataarray(self):
        with pytest.raises(TypeError):
            BathymetryLookup(np.zeros((2, 2)))
