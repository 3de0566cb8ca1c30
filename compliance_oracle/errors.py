"""
Compliance Oracle error taxonomy.

Every public operation validates its pre-conditions before mutating state
and reports failure by raising one of the typed errors below.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Failure codes surfaced to callers."""
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_ORACLE = "INVALID_ORACLE"
    INVALID_DATA = "INVALID_DATA"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    ARITHMETIC_RANGE = "ARITHMETIC_RANGE"
    # Reserved for the balance-gated and escalation-resolution workflows.
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INVALID_TIMEFRAME = "INVALID_TIMEFRAME"
    ESCALATION_PENDING = "ESCALATION_PENDING"


class ComplianceError(Exception):
    """Base class for every typed failure raised by the engine."""

    code: ErrorCode = ErrorCode.INVALID_DATA

    def __init__(self, detail: str = "", code: Optional[ErrorCode] = None):
        if code is not None:
            self.code = code
        self.detail = detail
        super().__init__(f"{self.code.value}: {detail}" if detail else self.code.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code.value, "detail": self.detail}


class UnauthorizedError(ComplianceError):
    """Capability check failed, including writes while paused."""
    code = ErrorCode.UNAUTHORIZED


class InvalidOracleError(ComplianceError):
    """Oracle target is unknown or already inactive."""
    code = ErrorCode.INVALID_ORACLE


class InvalidDataError(ComplianceError):
    """Malformed or missing input."""
    code = ErrorCode.INVALID_DATA


class NotFoundError(ComplianceError):
    code = ErrorCode.NOT_FOUND


class AlreadyExistsError(ComplianceError):
    code = ErrorCode.ALREADY_EXISTS


class CapacityExceededError(ComplianceError):
    """Authorized-oracle slots are exhausted."""
    code = ErrorCode.CAPACITY_EXCEEDED


class ArithmeticRangeError(ComplianceError):
    """An unsigned quantity would leave its range (e.g. reputation below zero)."""
    code = ErrorCode.ARITHMETIC_RANGE


class InsufficientBalanceError(ComplianceError):
    code = ErrorCode.INSUFFICIENT_BALANCE


class InvalidTimeframeError(ComplianceError):
    code = ErrorCode.INVALID_TIMEFRAME


class EscalationPendingError(ComplianceError):
    code = ErrorCode.ESCALATION_PENDING
