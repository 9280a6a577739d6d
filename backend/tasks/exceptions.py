"""
Error taxonomy for the priority ordering engine.

Every failure a reorder can produce is a ``ReorderError`` carrying an
``ErrorCode``, so the API layer can build its response envelope without
inspecting messages.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional


class ErrorCode(Enum):
    """Error codes for API responses."""
    SUCCESS = "SUCCESS"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_NO_OP = "ERR_NO_OP"
    ERR_PERSISTENCE_FAILURE = "ERR_PERSISTENCE_FAILURE"
    ERR_INVARIANT_VIOLATION = "ERR_INVARIANT_VIOLATION"
    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_INVALID_MODE = "ERR_INVALID_MODE"


class ReorderError(Exception):
    """Base class for all reorder failures."""

    code = ErrorCode.ERR_INVALID_INPUT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict:
        return {
            'error_code': self.code.value,
            'message': self.message
        }


class NotFound(ReorderError):
    """A referenced record is missing from the owner's active list."""

    code = ErrorCode.ERR_NOT_FOUND

    def __init__(self, record_id, message: Optional[str] = None):
        super().__init__(message or f"Task {record_id} is not in the active list")
        self.record_id = record_id


class NoOp(ReorderError):
    """Degenerate drag (dropped onto itself). Callers treat it as cancelled."""

    code = ErrorCode.ERR_NO_OP


class PersistenceFailure(ReorderError):
    """The write path failed; nothing from the batch was committed."""

    code = ErrorCode.ERR_PERSISTENCE_FAILURE


class InvariantViolation(ReorderError):
    """A computed coordinate broke the bounds or ordering contract."""

    code = ErrorCode.ERR_INVARIANT_VIOLATION


class RebalanceRequired(Exception):
    """
    Raised by the allocator when a neighbor gap is too tight for a midpoint.

    This is a signal, not an error: the orchestrator catches it and switches
    to a full rebalance of the list.
    """

    def __init__(self, axes: FrozenSet[str]):
        super().__init__(f"Gap below threshold on: {', '.join(sorted(axes))}")
        self.axes = axes
