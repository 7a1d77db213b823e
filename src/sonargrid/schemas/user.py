"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., GRID_CELL_SIZE → grid_cell_size,
SITE_CODE → site_code).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Optional, Any
from pydantic import Field, field_validator
from sonargrid.schemas.base import SonargridBaseModel
from sonargrid.schemas.param import normalize_survey_date


class UserSwathConfig(SonargridBaseModel):
    """User-facing swath config."""
    half_angle_deg: Optional[float] = None
    subsample_stride: Optional[int] = None
    disk_quad_segs: Optional[int] = None
    min_track_points: Optional[int] = None


class UserFilterConfig(SonargridBaseModel):
    """User-facing filter config."""
    min_depth_threshold: Optional[float] = None
    bottom_clearance_threshold: Optional[float] = None


class UserProcessorConfig(SonargridBaseModel):
    """User-facing processor config."""
    max_workers: Optional[int] = None
    skip_transects_without_samples: Optional[bool] = None
    mask_missing_seafloor: Optional[bool] = None


class UserInputConfig(SonargridBaseModel):
    """User-facing input config."""
    samples_path: Optional[str] = None
    track_path: Optional[str] = None
    bathymetry_path: Optional[str] = None
    sample_columns: Optional[dict[str, str]] = None
    track_columns: Optional[dict[str, str]] = None


class UserConfig(SonargridBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            grid_origin=(500000, 4100000),
            grid_extent=(4000, 3000),
            grid_cell_size=25,
            swath_half_angle_deg=60,
            site_code="MB01",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    site_code: Optional[str] = Field(None, alias="SITE_CODE")
    survey_date: Optional[str] = Field(None, alias="SURVEY_DATE")
    reference_point: Optional[tuple[float, float]] = Field(None, alias="REFERENCE_POINT")

    # Inputs
    samples_path: Optional[str] = Field(None, alias="SAMPLES_PATH")
    track_path: Optional[str] = Field(None, alias="TRACK_PATH")
    bathymetry_path: Optional[str] = Field(None, alias="BATHYMETRY_PATH")

    # Grid settings (flat aliases)
    grid_origin: Optional[tuple[float, float]] = Field(None, alias="GRID_ORIGIN")
    grid_extent: Optional[tuple[float, float]] = Field(None, alias="GRID_EXTENT")
    grid_cell_size: Optional[float] = Field(None, alias="GRID_CELL_SIZE")

    # Swath settings (flat aliases)
    swath_half_angle_deg: Optional[float] = Field(None, alias="SWATH_HALF_ANGLE_DEG")
    track_subsample_stride: Optional[int] = Field(None, alias="TRACK_SUBSAMPLE_STRIDE")

    # Filter settings (flat aliases)
    min_depth_threshold: Optional[float] = Field(None, alias="MIN_DEPTH_THRESHOLD")
    bottom_clearance_threshold: Optional[float] = Field(None, alias="BOTTOM_CLEARANCE_THRESHOLD")

    # Rasterizer / processor settings (flat aliases)
    depth_bin_size: Optional[float] = Field(None, alias="DEPTH_BIN_SIZE")
    max_workers: Optional[int] = Field(None, alias="MAX_WORKERS")
    output_format: Optional[str] = Field(None, alias="OUTPUT_FORMAT")

    # Nested overrides (advanced users)
    swath: Optional[UserSwathConfig] = None
    filter: Optional[UserFilterConfig] = None
    processor: Optional[UserProcessorConfig] = None
    inputs: Optional[UserInputConfig] = None
    bathymetry: Optional[dict[str, Any]] = None
    output: Optional[dict[str, Any]] = None

    model_config = SonargridBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator(
        "grid_cell_size", "swath_half_angle_deg", "min_depth_threshold",
        "bottom_clearance_threshold", "depth_bin_size", mode="before"
    )
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("survey_date", mode="before")
    @classmethod
    def coerce_survey_date(cls, v):
        return normalize_survey_date(v)

    @field_validator("output_format", mode="before")
    @classmethod
    def normalize_output_format(cls, v):
        """Normalize format names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        # Survey section
        survey = {}
        if self.site_code is not None:
            survey["site_code"] = self.site_code
        if self.survey_date is not None:
            survey["survey_date"] = self.survey_date
        if self.reference_point is not None:
            survey["reference_point"] = self.reference_point
        if survey:
            overrides["survey"] = survey

        # Grid section
        grid = {}
        if self.grid_origin is not None:
            grid["origin"] = self.grid_origin
        if self.grid_extent is not None:
            grid["extent"] = self.grid_extent
        if self.grid_cell_size is not None:
            grid["cell_size"] = self.grid_cell_size
        if grid:
            overrides["grid"] = grid

        # Swath section
        swath = {}
        if self.swath_half_angle_deg is not None:
            swath["half_angle_deg"] = self.swath_half_angle_deg
        if self.track_subsample_stride is not None:
            swath["subsample_stride"] = self.track_subsample_stride
        if self.swath is not None:
            swath.update(self.swath.model_dump(exclude_none=True))
        if swath:
            overrides["swath"] = swath

        # Filter section
        filter_cfg = {}
        if self.min_depth_threshold is not None:
            filter_cfg["min_depth_threshold"] = self.min_depth_threshold
        if self.bottom_clearance_threshold is not None:
            filter_cfg["bottom_clearance_threshold"] = self.bottom_clearance_threshold
        if self.filter is not None:
            filter_cfg.update(self.filter.model_dump(exclude_none=True))
        if filter_cfg:
            overrides["filter"] = filter_cfg

        if self.depth_bin_size is not None:
            overrides["rasterizer"] = {"depth_bin_size": self.depth_bin_size}

        # Processor section
        processor = {}
        if self.max_workers is not None:
            processor["max_workers"] = self.max_workers
        if self.processor is not None:
            processor.update(self.processor.model_dump(exclude_none=True))
        if processor:
            overrides["processor"] = processor

        # Inputs section
        inputs = {}
        if self.samples_path is not None:
            inputs["samples_path"] = str(self.samples_path)
        if self.track_path is not None:
            inputs["track_path"] = str(self.track_path)
        if self.bathymetry_path is not None:
            inputs["bathymetry_path"] = str(self.bathymetry_path)
        if self.inputs is not None:
            inputs.update(self.inputs.model_dump(exclude_none=True))
        if inputs:
            overrides["inputs"] = inputs

        if self.bathymetry:
            overrides["bathymetry"] = dict(self.bathymetry)

        output = {}
        if self.output_format is not None:
            output["format"] = self.output_format
        if self.output:
            output.update(self.output)
        if output:
            overrides["output"] = output

        return overrides
