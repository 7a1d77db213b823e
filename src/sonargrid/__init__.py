"""`sonargrid` - coverage-aware school-thickness gridding for sonar surveys.

Subpackages:
- survey: Geometry, bathymetry, rasterization, input loading
- pipeline: Transect processor, merger, orchestrator
- schemas: Layered pydantic configuration
- contracts: Stage invariants
"""

__version__ = "0.1.0"
