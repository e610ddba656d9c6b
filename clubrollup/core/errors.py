"""Typed errors raised by the rollup engine.

Every error carries a machine-readable ``code`` class attribute and keeps its
context as attributes, so run reports and API responses never parse messages.

    RollupError
    +-- GrainViolation             row is misaligned with its period grain
    +-- ReferenceNotFound          row points at an unknown amenity/enrollment
    +-- IntegrityViolation         summary store refused the write
    +-- ReferenceStoreUnavailable  reference/event reads failed; run aborted
    +-- InvalidRecomputeWindow     malformed recompute request

A zero-usage period has no cost per use. That is represented as ``None`` on
the estimate and is never raised.
"""

from typing import Any


class RollupError(Exception):
    """Base exception for all rollup engine errors."""

    code: str = "ROLLUP_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "detail": str(self)}


class GrainViolation(RollupError):
    """Aggregate row does not match exactly one (entity, calendar month)."""

    code: str = "GRAIN_VIOLATION"

    def __init__(self, period_key: tuple[Any, int, int], reason: str):
        self.period_key = period_key
        self.reason = reason
        super().__init__(f"Grain violation for {period_key}: {reason}")


class ReferenceNotFound(RollupError):
    """Row references an entity missing from the reference store."""

    code: str = "REFERENCE_NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} '{entity_id}' not found")


class IntegrityViolation(RollupError):
    """Summary store rejected the write with a constraint failure."""

    code: str = "INTEGRITY_VIOLATION"

    def __init__(self, period_key: tuple[Any, int, int], detail: str):
        self.period_key = period_key
        self.detail = detail
        super().__init__(f"Integrity violation for {period_key}: {detail}")


class ReferenceStoreUnavailable(RollupError):
    """Reference or event data could not be read; the whole run is aborted."""

    code: str = "REFERENCE_STORE_UNAVAILABLE"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Reference store unavailable: {detail}")


class InvalidRecomputeWindow(RollupError):
    code: str = "INVALID_RECOMPUTE_WINDOW"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)
