"""Survey data and geometry modules.

- geoframe: World to site-local planar offsets
- bathymetry: Seafloor depth lookup from a gridded surface
- swath_buffer: Swath coverage polygon from the cruise track
- grid_rasterizer: Shared grid addressing, point and polygon rasterization
- loader: Read samples, track and bathymetry from disk
"""

from sonargrid.survey.geoframe import GeoFrame
from sonargrid.survey.bathymetry import BathymetryLookup
from sonargrid.survey.swath_buffer import SwathBufferBuilder, swath_half_width
from sonargrid.survey.grid_rasterizer import GridSpec, GridRasterizer, AGGREGATIONS
from sonargrid.survey.loader import SurveyDataLoader

__all__ = [
    "GeoFrame",
    "BathymetryLookup",
    "SwathBufferBuilder",
    "swath_half_width",
    "GridSpec",
    "GridRasterizer",
    "AGGREGATIONS",
    "SurveyDataLoader",
]
