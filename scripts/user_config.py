"""sonargrid User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Advanced settings are in sonargrid/schemas/param.py

Usage:
    python scripts/run_survey_pipeline.py scripts/user_config.py
    python scripts/run_survey_pipeline.py scripts/user_config.py --site-code MB02
"""

CONFIG = {
    # ========================================================================
    # SURVEY & OUTPUT
    # ========================================================================
    "SITE_CODE": "MB01",            # Site identifier stamped on every row
    "SURVEY_DATE": "2024-06-03",    # YYYY-MM-DD
    "BASE_DIR": "./output",         # All outputs go here
    "OUTPUT_FORMAT": "parquet",     # "parquet" or "csv"

    # ========================================================================
    # INPUTS
    # ========================================================================
    "SAMPLES_PATH": "data/mb01_samples.csv",       # x, y, Depth, Sv, transect_id
    "TRACK_PATH": "data/mb01_track.csv",           # x, y, sequence index, transect_id
    "BATHYMETRY_PATH": "data/mb01_bathymetry.nc",  # 2D grid, variable "depth"
    "REFERENCE_POINT": None,        # (x0, y0) to shift everything to a local frame

    # ========================================================================
    # GRID SETTINGS (meters, in the local frame if REFERENCE_POINT is set)
    # ========================================================================
    "GRID_ORIGIN": (0.0, 0.0),      # lower-left corner
    "GRID_EXTENT": (2000.0, 2000.0),
    "GRID_CELL_SIZE": 10.0,

    # ========================================================================
    # SWATH & FILTER SETTINGS
    # ========================================================================
    "SWATH_HALF_ANGLE_DEG": 60,     # fan angle; half width = |depth| * tan(angle / 2)
    "TRACK_SUBSAMPLE_STRIDE": 10,   # buffer every k-th track point
    "MIN_DEPTH_THRESHOLD": 5.0,     # drop samples shallower than this
    "BOTTOM_CLEARANCE_THRESHOLD": 1.0,  # samples must sit this far above the seafloor

    "MAX_WORKERS": 4,
}
