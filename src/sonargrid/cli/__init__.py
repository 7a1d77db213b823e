"""Command-line interface modules for sonargrid pipeline execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from sonargrid.cli.run_survey import run_survey_pipeline, load_user_config_dict

__all__ = ['run_survey_pipeline', 'load_user_config_dict']
