"""
Core reward accrual algorithms
"""

from .accrual import (
    RAY,
    WAD,
    GlobalAccrualState,
    ParticipantState,
    check_all,
    initial_state,
)

__all__ = [
    "RAY",
    "WAD",
    "GlobalAccrualState",
    "ParticipantState",
    "check_all",
    "initial_state",
]
