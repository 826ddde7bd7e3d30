"""Exception types for the accrual kernel and the engine around it.

Every fault aborts the whole triggering operation; the engine never catches
these to recover locally.
"""

from __future__ import annotations


class AccrualError(Exception):
    """Base class for every fault raised by the accrual engine."""


class Unauthorized(AccrualError):
    """Raised when the caller lacks the privilege an operation requires."""


class ArithmeticFault(AccrualError):
    """Raised on any unsigned fixed-width arithmetic fault."""


class Overflow(ArithmeticFault):
    """Raised when an addition or multiplication exceeds the integer width."""


class Underflow(ArithmeticFault):
    """Raised when a subtraction's subtrahend exceeds its minuend."""


class DivisionByZero(ArithmeticFault):
    """Raised on division by zero."""


class TransferFailed(AccrualError):
    """Raised when the token ledger rejects a vault transfer."""


class InvariantViolation(AccrualError):
    """Raised when state contradicts the accounting model.

    This means tampering or a bug, never a normal runtime path.
    """

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


class Reentrancy(AccrualError):
    """Raised when an engine operation is entered from inside another one."""
