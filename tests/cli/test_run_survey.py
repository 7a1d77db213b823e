import logging

import numpy as np
import pandas as pd
import pytest

from sonargrid.cli.run_survey import load_user_config_dict, run_survey_pipeline

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def reset_root_logger():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)


def test_load_user_config_dict(tmp_path):
    path = tmp_path / "user_config.py"
    path.write_text('CONFIG = {"SITE_CODE": "MB01", "GRID_CELL_SIZE": 25}\n')

    assert load_user_config_dict(path) == {"SITE_CODE": "MB01", "GRID_CELL_SIZE": 25}


def test_load_user_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_user_config_dict(tmp_path / "nope.py")


def test_load_user_config_without_config_dict(tmp_path):
    path = tmp_path / "user_config.py"
    path.write_text("SETTINGS = {}\n")

    with pytest.raises(ValueError, match="No CONFIG dict"):
        load_user_config_dict(path)


def test_run_survey_pipeline(tmp_path, capsys):
    pd.DataFrame({
        "X": [5.0, 5.0], "Y": [0.0, 0.0], "Depth": [15.0, 16.0],
        "Sv": [-60.0, -61.0], "Transect": ["A", "A"],
    }).to_csv(tmp_path / "samples.csv", index=False)
    pd.DataFrame({
        "X": [0.0, 10.0, 20.0], "Y": [0.0, 0.0, 0.0],
        "Index": [0, 1, 2], "Transect": ["A", "A", "A"],
    }).to_csv(tmp_path / "track.csv", index=False)
    nodes = np.arange(-100.0, 101.0, 10.0)
    xx, yy = np.meshgrid(nodes, nodes)
    pd.DataFrame({"x": xx.ravel(), "y": yy.ravel(), "depth": 20.0}).to_csv(
        tmp_path / "bathy.csv", index=False)

    config_path = tmp_path / "user_config.py"
    config_path.write_text(
        "CONFIG = {\n"
        "    'SITE_CODE': 'MB01',\n"
        "    'SURVEY_DATE': '2024-06-03',\n"
        "    'GRID_ORIGIN': (-50, -50),\n"
        "    'GRID_EXTENT': (100, 100),\n"
        "    'TRACK_SUBSAMPLE_STRIDE': 1,\n"
        "    'MIN_DEPTH_THRESHOLD': 10,\n"
        f"    'SAMPLES_PATH': r'{tmp_path / 'samples.csv'}',\n"
        f"    'TRACK_PATH': r'{tmp_path / 'track.csv'}',\n"
        f"    'BATHYMETRY_PATH': r'{tmp_path / 'bathy.csv'}',\n"
        "}\n"
    )

    table = run_survey_pipeline(
        str(config_path),
        cli_args={"base_dir": str(tmp_path / "out"), "max_workers": 1, "site_code": None},
    )

    row = table[(table["x"] == 5.0) & (table["y"] == 5.0)].iloc[0]
    assert row["thickness"] == 2
    assert row["site_code"] == "MB01"
    assert (tmp_path / "out" / "analysis" / "MB01_20240603_thickness.parquet").exists()
    assert "sonargrid Survey Thickness Pipeline" in capsys.readouterr().out
