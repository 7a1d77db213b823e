"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- TransectSkipped covers per-transect data conditions (empty, degenerate)
"""

from sonargrid.contracts.failure import (
    ContractViolation,
    TransectSkipped,
    EmptyTransect,
    DegenerateCoverage,
)
from sonargrid.contracts.base import require
from sonargrid.contracts.grid import assert_grid_aligned
from sonargrid.contracts.raster import assert_transect_raster
from sonargrid.contracts.merged import assert_merged_table, MERGED_COLUMNS
from sonargrid.contracts.invariants import PIPELINE_INVARIANTS

__all__ = [
    "ContractViolation",
    "TransectSkipped",
    "EmptyTransect",
    "DegenerateCoverage",
    "require",
    "assert_grid_aligned",
    "assert_transect_raster",
    "assert_merged_table",
    "MERGED_COLUMNS",
    "PIPELINE_INVARIANTS",
]
