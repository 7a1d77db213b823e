"""
Directory setup for survey pipeline runs.

One base directory per run configuration:
- analysis/ holds merged thickness tables and the resolved runtime config
- logs/ holds pipeline log files
- Filenames carry site code and survey date for easy sorting
"""

from pathlib import Path
from datetime import datetime, timezone


def setup_output_directories(base_output_dir=None):
    """
    Set up organized output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, uses ``./output``.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'analysis', 'logs'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "analysis": base_output_dir / "analysis",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories


def _label(value, default):
    return str(value) if value else default


def get_analysis_path(output_dirs, site_code=None, survey_date=None,
                      analysis_type="parquet", filename_pattern=None):
    """
    Get merged table path.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    site_code : str, optional
        Site identifier (e.g. 'MB01'); 'site' if unknown.
    survey_date : str, optional
        Survey date as YYYY-MM-DD; 'undated' if unknown.
    analysis_type : str
        File extension: 'parquet', 'csv' or 'json'.
    filename_pattern : str, optional
        Stem pattern with {site_code} and {survey_date} fields.

    Returns
    -------
    Path
        Full path: analysis/<stem>.<ext>

    Example
    -------
    >>> get_analysis_path(dirs, 'MB01', '2024-06-03', 'parquet')
    Path('output/analysis/MB01_20240603_thickness.parquet')
    """
    pattern = filename_pattern or "{site_code}_{survey_date}_thickness"
    date_label = _label(survey_date, "undated").replace("-", "")
    stem = pattern.format(site_code=_label(site_code, "site"), survey_date=date_label)

    analysis_dir = Path(output_dirs["analysis"])
    analysis_dir.mkdir(parents=True, exist_ok=True)

    ext = analysis_type[1:] if analysis_type.startswith('.') else analysis_type
    return analysis_dir / f"{stem}.{ext}"


def get_log_path(output_dirs, site_code=None):
    """
    Get timestamped log file path.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    site_code : str, optional
        Site identifier

    Returns
    -------
    Path
        Full path to log file
    """
    log_dir = Path(output_dirs["logs"])
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return log_dir / f"pipeline_{_label(site_code, 'survey')}_{timestamp}.log"
