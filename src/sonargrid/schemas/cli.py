"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: input paths, site, survey date, output paths, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import field_validator
from sonargrid.schemas.base import SonargridBaseModel
from sonargrid.schemas.param import normalize_survey_date


class CLIConfig(SonargridBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            samples_path="data/mb01_samples.parquet",
            base_dir="/scratch/sonargrid_output",
            site_code="MB01",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    samples_path: Optional[str] = None
    track_path: Optional[str] = None
    bathymetry_path: Optional[str] = None
    base_dir: Optional[str] = None
    site_code: Optional[str] = None
    survey_date: Optional[str] = None
    max_workers: Optional[int] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("survey_date", mode="before")
    @classmethod
    def coerce_survey_date(cls, v):
        return normalize_survey_date(v)

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        inputs = {}
        if self.samples_path is not None:
            inputs["samples_path"] = self.samples_path
        if self.track_path is not None:
            inputs["track_path"] = self.track_path
        if self.bathymetry_path is not None:
            inputs["bathymetry_path"] = self.bathymetry_path
        if inputs:
            overrides["inputs"] = inputs

        survey = {}
        if self.site_code is not None:
            survey["site_code"] = self.site_code
        if self.survey_date is not None:
            survey["survey_date"] = self.survey_date
        if survey:
            overrides["survey"] = survey

        if self.max_workers is not None:
            overrides["processor"] = {"max_workers": self.max_workers}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
