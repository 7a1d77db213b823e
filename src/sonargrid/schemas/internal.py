"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from sonargrid.schemas.base import SonargridBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalGridConfig(SonargridBaseModel):
    """Runtime grid configuration."""
    origin: tuple[float, float]
    extent: tuple[float, float]
    cell_size: float = Field(gt=0)


class InternalSwathConfig(SonargridBaseModel):
    """Runtime swath configuration."""
    half_angle_deg: float = Field(gt=0, lt=180)
    subsample_stride: int = Field(ge=1)
    disk_quad_segs: int = Field(ge=1)
    min_track_points: int = Field(ge=2)


class InternalFilterConfig(SonargridBaseModel):
    """Runtime sample filter thresholds."""
    min_depth_threshold: float = Field(ge=0)
    bottom_clearance_threshold: float = Field(ge=0)


class InternalRasterizerConfig(SonargridBaseModel):
    """Runtime rasterizer configuration."""
    depth_bin_size: float = Field(gt=0)


class InternalBathymetryConfig(SonargridBaseModel):
    """Runtime bathymetry sampling."""
    method: Literal["nearest", "linear"]
    var_name: str


class InternalProcessorConfig(SonargridBaseModel):
    """Runtime processor configuration."""
    max_workers: int = Field(ge=1)
    skip_transects_without_samples: bool
    mask_missing_seafloor: bool


class InternalSurveyConfig(SonargridBaseModel):
    """Runtime survey metadata. Site and date may legitimately be unknown."""
    site_code: Optional[str]
    survey_date: Optional[str]
    reference_point: Optional[tuple[float, float]]


class InternalInputConfig(SonargridBaseModel):
    """Runtime input locations (validated by the loader before use)."""
    samples_path: Optional[str]
    track_path: Optional[str]
    bathymetry_path: Optional[str]
    sample_columns: dict[str, str]
    track_columns: dict[str, str]


class InternalOutputConfig(SonargridBaseModel):
    """Runtime output configuration."""
    format: Literal["parquet", "csv"]
    compression: Literal["snappy", "gzip", "lz4", "none"]
    filename_pattern: str


class InternalLoggingConfig(SonargridBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(SonargridBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.stride = config.swath.subsample_stride  # NOT .get()
            self.min_depth = config.filter.min_depth_threshold

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO type checking
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    base_dir: Optional[str]
    grid: InternalGridConfig
    swath: InternalSwathConfig
    filter: InternalFilterConfig
    rasterizer: InternalRasterizerConfig
    bathymetry: InternalBathymetryConfig
    processor: InternalProcessorConfig
    survey: InternalSurveyConfig
    inputs: InternalInputConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
