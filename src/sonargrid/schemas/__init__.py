"""Pydantic configuration schemas for the sonargrid pipeline.

This module provides strictly typed configuration models for the survey
gridding pipeline. All configuration validation, coercion, and
normalization happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from sonargrid.schemas.resolve import resolve_config
from sonargrid.schemas.internal import InternalConfig
from sonargrid.schemas.param import ParamConfig
from sonargrid.schemas.user import UserConfig
from sonargrid.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
