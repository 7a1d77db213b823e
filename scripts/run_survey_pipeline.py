#!/usr/bin/env python3
"""``sonargrid`` survey thickness pipeline runner.

Usage:
    python scripts/run_survey_pipeline.py scripts/user_config.py
    python scripts/run_survey_pipeline.py scripts/user_config.py --site-code MB02
    python scripts/run_survey_pipeline.py scripts/user_config.py --samples data/mb02.parquet -v

Note: User config in scripts/user_config.py, expert defaults in
sonargrid.schemas.param.ParamConfig
"""

import argparse

from sonargrid.cli import run_survey_pipeline


def main():
    parser = argparse.ArgumentParser(description="Run the sonargrid survey thickness pipeline")
    parser.add_argument("config", nargs="?", help="Path to user config file")
    parser.add_argument("--samples", dest="samples_path", help="Samples table (CSV/Parquet)")
    parser.add_argument("--track", dest="track_path", help="Track table (CSV/Parquet)")
    parser.add_argument("--bathymetry", dest="bathymetry_path", help="Bathymetry grid (NetCDF/CSV)")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--site-code", help="Override site code")
    parser.add_argument("--survey-date", help="Override survey date (YYYY-MM-DD)")
    parser.add_argument("--max-workers", type=int, help="Transect worker threads")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    cli_args = {
        "samples_path": args.samples_path,
        "track_path": args.track_path,
        "bathymetry_path": args.bathymetry_path,
        "base_dir": args.base_dir,
        "site_code": args.site_code,
        "survey_date": args.survey_date,
        "max_workers": args.max_workers,
    }

    table = run_survey_pipeline(args.config, cli_args=cli_args, verbose=args.verbose)
    print(f"Merged rows: {len(table)}")


if __name__ == "__main__":
    main()
