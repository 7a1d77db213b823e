"""Root-level pytest fixtures for the sonargrid test suite.

Provides shared configuration fixtures following Pydantic-based architecture,
plus small synthetic surveys (flat seafloor, straight tracks) whose expected
coverage and thickness can be worked out by hand.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

import numpy as np
import pandas as pd

from sonargrid.schemas import ParamConfig, UserConfig, resolve_config
from sonargrid.survey.bathymetry import BathymetryLookup
from sonargrid.survey.grid_rasterizer import GridSpec


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_cell(make_config):
    ...     config = make_config(grid_cell_size=25)
    ...     assert config.grid.cell_size == 25.0
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


@pytest.fixture
def survey_config(make_config):
    """Small worked-example survey: 100 m square grid centered on the origin.

    10 m cells, every track point buffered, 60 degree swath, samples kept
    between 10 m and 1 m above the seafloor.
    """
    return make_config(
        grid_origin=(-50.0, -50.0),
        grid_extent=(100.0, 100.0),
        grid_cell_size=10.0,
        swath_half_angle_deg=60.0,
        track_subsample_stride=1,
        min_depth_threshold=10.0,
        bottom_clearance_threshold=1.0,
        site_code="TEST",
        survey_date="2024-06-03",
        max_workers=2,
    )


@pytest.fixture
def survey_grid(survey_config):
    return GridSpec.from_config(survey_config)


# =============================================================================
# Synthetic survey builders
# =============================================================================

@pytest.fixture
def flat_bathymetry():
    """Factory: uniform seafloor over [-100, 100] m, stored as elevation."""
    def _make(depth=20.0, half_width=100.0, step=5.0, method="nearest"):
        nodes = np.arange(-half_width, half_width + step, step)
        values = np.full((nodes.size, nodes.size), -abs(depth))
        return BathymetryLookup.from_array(nodes, nodes, values, method=method)
    return _make


@pytest.fixture
def make_track():
    """Factory: track DataFrame from a list of (x, y) points."""
    def _make(points, transect_id="T1"):
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        return pd.DataFrame({
            "x": points[:, 0],
            "y": points[:, 1],
            "sequence_index": np.arange(len(points), dtype=np.int64),
            "transect_id": transect_id,
        })
    return _make


@pytest.fixture
def make_samples():
    """Factory: samples DataFrame from a list of (x, y, depth) tuples."""
    def _make(rows, transect_id="T1"):
        rows = np.asarray(rows, dtype=float).reshape(-1, 3)
        return pd.DataFrame({
            "x": rows[:, 0],
            "y": rows[:, 1],
            "depth": rows[:, 2],
            "backscatter": np.full(len(rows), -60.0),
            "transect_id": transect_id,
        })
    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def output_dirs(temp_dir):
    """Standard sonargrid output directory structure (base, analysis, logs)."""
    dirs = {
        "base": temp_dir,
        "analysis": temp_dir / "analysis",
        "logs": temp_dir / "logs",
    }

    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)

    return dirs
