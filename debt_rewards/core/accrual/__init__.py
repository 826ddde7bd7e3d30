"""`accrual`: pure-Python, integer-only reward accrual kernel.

Distributes a dripping reward stream across a changing set of weighted
participants with a global accumulator and per-participant baselines:
- deterministic, integer-only transitions (RAY-scaled accumulator),
- immutable state (frozen dataclasses),
- checked 256-bit arithmetic; every fault raises.

Public API:
- `initial_state() -> GlobalAccrualState`
- pure transitions in `updates` (`accrue`, `pending_reward`, `rebase`, ...)
- `check_all(state, participants) -> list[str]`
"""

from .errors import (
    AccrualError,
    ArithmeticFault,
    DivisionByZero,
    InvariantViolation,
    Overflow,
    Reentrancy,
    TransferFailed,
    Unauthorized,
    Underflow,
)
from .invariants import check_all, check_rows, check_transition
from .math import RAY, UINT256_MAX, WAD
from .state import (
    initial_state,
    participant_from_dict,
    participant_to_dict,
    state_from_dict,
    state_to_dict,
)
from .types import Event, GlobalAccrualState, Notification, ParticipantState, PoolUpdate, Settlement

__all__ = [
    "RAY",
    "WAD",
    "UINT256_MAX",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
    "participant_from_dict",
    "participant_to_dict",
    "check_all",
    "check_rows",
    "check_transition",
    "Event",
    "GlobalAccrualState",
    "Notification",
    "ParticipantState",
    "PoolUpdate",
    "Settlement",
    "AccrualError",
    "ArithmeticFault",
    "DivisionByZero",
    "InvariantViolation",
    "Overflow",
    "Reentrancy",
    "TransferFailed",
    "Unauthorized",
    "Underflow",
]
