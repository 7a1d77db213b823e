"""Formal pipeline invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "config": [
        "Grid cell size and extent are positive",
        "Swath angle is in (0, 180) degrees; subsample stride >= 1",
        "Runtime code only sees a frozen InternalConfig",
    ],

    "swath": [
        "Coverage is the set union of per-point disks (overlap counted once)",
        "Fewer than 2 track points or no known seafloor gives empty coverage, not an error",
    ],

    "raster": [
        "Variables thickness, min_depth, max_depth (float) and coverage (bool) exist",
        "Coordinates are the shared grid's cell centers; grid signature in attrs",
        "Thickness is a non-negative whole count",
        "Thickness is undefined (NaN) outside coverage and 0 for covered empty cells",
        "Identical inputs give identical rasters",
    ],

    "merge": [
        "Every raster matches the shared grid signature (else the run aborts)",
        "One row per (cell, transect) with defined thickness",
        "Seafloor depth comes from the cell center, independent of transect",
        "Rows sorted by transect, then row, then col",
    ],

    "output": [
        "Columns x, y, transect_id, thickness, min_depth, max_depth, "
        "seafloor_depth, survey_date, site_code",
        "Nullable dtypes; no numeric sentinel for missing values",
    ],
}
