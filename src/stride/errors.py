"""Error taxonomy for the progress engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


class StrideError(Exception):
    code = "stride_error"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFoundError(StrideError, LookupError):
    """Goal or habit does not exist or belongs to another user."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(StrideError, ValueError):
    """Rejected input or schedule rule; nothing was written."""

    code = "validation_error"


class TransientStoreError(StrideError, RuntimeError):
    """The underlying store failed a read or write."""

    code = "store_error"


@dataclass(frozen=True, slots=True)
class CascadeFailure:
    """One entity that could not be finalized during a cascade."""

    entity: str
    entity_id: int
    error: str


class PartialCascadeFailure(StrideError):
    code = "partial_cascade_failure"

    def __init__(self, failures: Sequence[CascadeFailure]):
        summary = ", ".join(f"{f.entity} {f.entity_id}" for f in failures)
        super().__init__(f"{len(failures)} entities failed to finalize: {summary}")
        self.failures = tuple(failures)


__all__ = [
    "CascadeFailure",
    "NotFoundError",
    "PartialCascadeFailure",
    "StrideError",
    "TransientStoreError",
    "ValidationError",
]
