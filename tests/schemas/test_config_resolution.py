"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from sonargrid.schemas import ParamConfig, UserConfig, CLIConfig, InternalConfig
from sonargrid.schemas.resolve import resolve_config, deep_merge

pytestmark = pytest.mark.unit


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.grid.origin == (0.0, 0.0)
        assert config.grid.cell_size == 10.0
        assert config.swath.half_angle_deg == 60.0
        assert config.swath.subsample_stride == 10
        assert config.filter.min_depth_threshold == 5.0
        assert config.filter.bottom_clearance_threshold == 1.0
        assert config.rasterizer.depth_bin_size == 1.0
        assert config.survey.site_code is None

    def test_user_config_overrides_param_config(self):
        """UserConfig values override ParamConfig defaults."""
        user = UserConfig(GRID_CELL_SIZE=25, MIN_DEPTH_THRESHOLD=8)
        config = resolve_config(ParamConfig(), user, None)

        assert config.grid.cell_size == 25.0
        assert config.filter.min_depth_threshold == 8.0
        # Untouched sibling keeps its default
        assert config.filter.bottom_clearance_threshold == 1.0

    def test_precedence_param_user_cli(self):
        """Full precedence: CLI > User > Param."""
        user = UserConfig(SITE_CODE="MB01", MAX_WORKERS=2, BASE_DIR="/tmp/user")
        cli = CLIConfig(site_code="MB02")
        config = resolve_config(ParamConfig(), user, cli)

        assert config.survey.site_code == "MB02"
        assert config.processor.max_workers == 2
        assert config.base_dir == "/tmp/user"

    def test_dict_inputs_are_validated(self):
        """Raw dicts are accepted for every layer."""
        config = resolve_config(
            {},
            {"GRID_EXTENT": (500, 300), "TRACK_SUBSAMPLE_STRIDE": 3},
            {"log_level": "DEBUG"},
        )

        assert config.grid.extent == (500.0, 300.0)
        assert config.swath.subsample_stride == 3
        assert config.logging.level == "DEBUG"

    def test_nested_user_overrides(self):
        """Nested sections reach fields without a flat alias."""
        user = UserConfig.model_validate({
            "swath": {"disk_quad_segs": 8, "min_track_points": 3},
            "processor": {"mask_missing_seafloor": False},
            "bathymetry": {"method": "linear"},
            "output": {"format": "csv", "compression": "none"},
        })
        config = resolve_config(ParamConfig(), user, None)

        assert config.swath.disk_quad_segs == 8
        assert config.swath.min_track_points == 3
        assert config.processor.mask_missing_seafloor is False
        assert config.bathymetry.method == "linear"
        assert config.output.format == "csv"

    def test_internal_config_is_frozen(self):
        config = resolve_config(ParamConfig(), None, None)

        with pytest.raises(ValidationError):
            config.base_dir = "/elsewhere"


class TestConfigValidation:
    """Invalid values fail at resolution time, never at runtime."""

    @pytest.mark.parametrize("overrides", [
        {"GRID_CELL_SIZE": 0},
        {"GRID_CELL_SIZE": -5},
        {"GRID_EXTENT": (0, 100)},
        {"TRACK_SUBSAMPLE_STRIDE": 0},
        {"SWATH_HALF_ANGLE_DEG": 0},
        {"SWATH_HALF_ANGLE_DEG": 180},
        {"DEPTH_BIN_SIZE": 0},
        {"MIN_DEPTH_THRESHOLD": -1},
        {"MAX_WORKERS": 0},
        {"OUTPUT_FORMAT": "xlsx"},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig.model_validate(overrides), None)

    def test_survey_date_is_normalized(self):
        user = UserConfig(SURVEY_DATE="2024-06-03T14:22:00Z")
        config = resolve_config(ParamConfig(), user, None)

        assert config.survey.survey_date == "2024-06-03"

    def test_bad_survey_date_rejected(self):
        with pytest.raises(ValueError):
            UserConfig(SURVEY_DATE="third of June")


class TestDeepMerge:

    def test_nested_dicts_are_merged(self):
        base = {"a": 1, "b": {"c": 2, "d": 3}}
        override = {"b": {"d": 4, "e": 5}, "f": 6}

        assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}

    def test_base_is_not_mutated(self):
        base = {"b": {"c": 2}}
        deep_merge(base, {"b": {"c": 3}})

        assert base == {"b": {"c": 2}}
