"""Pipeline modules.

- orchestrator: Survey-level controller (thread pool map, ordered merge)
- processor: Per-transect state machine
- merger: Fold transect rasters into the survey table
"""

from sonargrid.pipeline.orchestrator import SurveyOrchestrator
from sonargrid.pipeline.processor import TransectProcessor, TransectResult, TransectState
from sonargrid.pipeline.merger import GridMerger

__all__ = [
    "SurveyOrchestrator",
    "TransectProcessor",
    "TransectResult",
    "TransectState",
    "GridMerger",
]
