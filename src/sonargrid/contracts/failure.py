"""Failure types for the survey pipeline.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing caller to handle pipeline bugs uniformly.

Per-transect data conditions are a different family: they raise a
TransectSkipped subclass, which the processor turns into a SKIPPED
result so the rest of the survey keeps going.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic or an inconsistent configuration,
    not bad survey data. It means a pipeline stage did not produce the
    invariants it promised, e.g. a transect raster built on a different grid.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Pipeline bug (programmer error), aborts the run
    - TransectSkipped: Recoverable data condition, skips one transect
    """
    pass


class TransectSkipped(Exception):
    """A transect cannot be processed; it contributes no rows."""

    def __init__(self, transect_id: str, reason: str):
        super().__init__(f"Transect {transect_id} skipped: {reason}")
        self.transect_id = transect_id
        self.reason = reason


class EmptyTransect(TransectSkipped):
    """No track points (or no samples) for the transect."""
    pass


class DegenerateCoverage(TransectSkipped):
    """The swath coverage polygon is empty or invalid."""
    pass
