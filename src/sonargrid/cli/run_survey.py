"""Core survey pipeline execution logic.

This module contains the actual pipeline runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any

import pandas as pd

from sonargrid.setup_directories import setup_output_directories
from sonargrid.pipeline.orchestrator import SurveyOrchestrator
from sonargrid.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_survey_pipeline(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False
) -> pd.DataFrame:
    """Execute the survey thickness pipeline.

    This is the core pipeline execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories
    3. Runs the orchestrator: load, process transects, merge, save

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict). If None,
        only expert defaults and CLI overrides are used.

    cli_args : dict, optional
        CLI argument overrides. Keys: samples_path, track_path,
        bathymetry_path, base_dir, site_code, survey_date, max_workers,
        log_level. All optional; None values are ignored.

    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    pd.DataFrame
        The merged thickness table.

    Raises
    ------
    FileNotFoundError
        If the user config or an input file does not exist.
    pydantic.ValidationError
        If configuration validation fails.
    ContractViolation
        If a pipeline contract is violated.

    Examples
    --------
    Run with user config only::

        run_survey_pipeline("config/mb01_2024.py")

    Run with CLI overrides::

        run_survey_pipeline(
            "config/mb01_2024.py",
            cli_args={"site_code": "MB02", "max_workers": 8},
        )
    """
    param_cfg = ParamConfig()

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and not cli_args.get("log_level"):
        cli_args["log_level"] = "DEBUG"

    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    output_dirs = setup_output_directories(config.base_dir)

    print(f"\n{'='*60}")
    print("sonargrid Survey Thickness Pipeline")
    print('='*60)
    print(f"Config:  {user_config_path or '(defaults)'}")
    print(f"Site:    {config.survey.site_code}")
    print(f"Date:    {config.survey.survey_date}")
    print(f"Samples: {config.inputs.samples_path}")
    print(f"Output:  {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2, default=str))
        print('='*60)

    orchestrator = SurveyOrchestrator(config, output_dirs)
    return orchestrator.start()
