"""ParamConfig: Expert defaults for the sonargrid pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from sonargrid.schemas.base import SonargridBaseModel


def normalize_survey_date(v):
    """Accept date, datetime or ISO string; store as YYYY-MM-DD."""
    if v is None:
        return v
    if isinstance(v, datetime):
        return v.date().isoformat()
    if isinstance(v, date):
        return v.isoformat()
    if isinstance(v, str):
        v = v.strip()
        return datetime.fromisoformat(v.replace('Z', '+00:00')).date().isoformat()
    return v


# =============================================================================
# Nested Configuration Models
# =============================================================================

class GridConfig(SonargridBaseModel):
    """Shared survey grid: lower-left origin, extent and cell size (meters)."""
    origin: tuple[float, float] = (0.0, 0.0)
    extent: tuple[float, float] = (1000.0, 1000.0)
    cell_size: float = Field(10.0, gt=0, description="Cell edge length in meters")

    @field_validator("cell_size", mode="before")
    @classmethod
    def coerce_cell_size_to_float(cls, v):
        """Allow int or float for cell size."""
        return float(v)

    @model_validator(mode="after")
    def check_extent_positive(self):
        width, height = self.extent
        if width <= 0 or height <= 0:
            raise ValueError(f"grid extent must be positive, got {self.extent}")
        return self


class SwathConfig(SonargridBaseModel):
    """Sonar swath footprint configuration."""
    half_angle_deg: float = Field(60.0, gt=0, lt=180, description="Swath angle in degrees")
    subsample_stride: int = Field(10, ge=1, description="Buffer every k-th track point")
    disk_quad_segs: int = Field(32, ge=1, description="Segments per quarter circle")
    min_track_points: int = Field(2, ge=2)

    @field_validator("half_angle_deg", mode="before")
    @classmethod
    def coerce_angle_to_float(cls, v):
        """Allow int or float for the swath angle."""
        return float(v)


class FilterConfig(SonargridBaseModel):
    """Sample filtering thresholds (meters, positive down)."""
    min_depth_threshold: float = Field(5.0, ge=0, description="Drop samples shallower than this")
    bottom_clearance_threshold: float = Field(1.0, ge=0, description="Required height above seafloor")


class RasterizerConfig(SonargridBaseModel):
    """Cell aggregation settings."""
    depth_bin_size: float = Field(1.0, gt=0, description="Depth bin size for thickness")


class BathymetryConfig(SonargridBaseModel):
    """Seafloor surface sampling."""
    method: Literal["nearest", "linear"] = "nearest"
    var_name: str = "depth"


class ProcessorConfig(SonargridBaseModel):
    """Per-transect processing."""
    max_workers: int = Field(4, ge=1)
    skip_transects_without_samples: bool = True
    mask_missing_seafloor: bool = True


class SurveyConfig(SonargridBaseModel):
    """Survey metadata stamped on every output row."""
    site_code: Optional[str] = None
    survey_date: Optional[str] = None
    reference_point: Optional[tuple[float, float]] = None

    @field_validator("survey_date", mode="before")
    @classmethod
    def coerce_survey_date(cls, v):
        return normalize_survey_date(v)


class InputConfig(SonargridBaseModel):
    """Input file locations and column mappings."""
    samples_path: Optional[str] = None
    track_path: Optional[str] = None
    bathymetry_path: Optional[str] = None
    sample_columns: dict[str, str] = Field(
        default_factory=lambda: {
            "X": "x",
            "Y": "y",
            "Depth": "depth",
            "Sv": "backscatter",
            "Transect": "transect_id",
        }
    )
    track_columns: dict[str, str] = Field(
        default_factory=lambda: {
            "X": "x",
            "Y": "y",
            "Index": "sequence_index",
            "Transect": "transect_id",
        }
    )


class OutputConfig(SonargridBaseModel):
    """Merged table output."""
    format: Literal["parquet", "csv"] = "parquet"
    compression: Literal["snappy", "gzip", "lz4", "none"] = "snappy"
    filename_pattern: str = "{site_code}_{survey_date}_thickness"


class LoggingConfig(SonargridBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(SonargridBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    base_dir: Optional[str] = None
    grid: GridConfig = Field(default_factory=GridConfig)
    swath: SwathConfig = Field(default_factory=SwathConfig)
    filter: FilterConfig = Field(default_factory=FilterConfig)
    rasterizer: RasterizerConfig = Field(default_factory=RasterizerConfig)
    bathymetry: BathymetryConfig = Field(default_factory=BathymetryConfig)
    processor: ProcessorConfig = Field(default_factory=ProcessorConfig)
    survey: SurveyConfig = Field(default_factory=SurveyConfig)
    inputs: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
