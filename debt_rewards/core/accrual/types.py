"""Data types for the accrual kernel.

All types are frozen dataclasses (immutable). Transitions build new values with
``dataclasses.replace()``; nothing here is mutated in place.

Units/conventions:
- weights and token amounts are raw unsigned integers.
- `acc_reward_per_weight` is scaled by RAY (1e27).
- blocks are heights from the environment's monotonic block clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Mapping

from .math import require_uint


@unique
class Event(Enum):
    """Observable notifications emitted by the engine after a commit."""
    WEIGHT_SET = "WeightSet"
    REWARDS_PAID = "RewardsPaid"
    POOL_UPDATED = "PoolUpdated"
    CALLER_AUTHORIZED = "CallerAuthorized"
    CALLER_DEAUTHORIZED = "CallerDeauthorized"


@dataclass(frozen=True)
class GlobalAccrualState:
    """The single global accrual record."""

    total_weight: int = 0
    acc_reward_per_weight: int = 0
    tracked_vault_balance: int = 0
    last_update_block: int = 0

    def __post_init__(self) -> None:
        require_uint(self.total_weight, "total_weight")
        require_uint(self.acc_reward_per_weight, "acc_reward_per_weight")
        require_uint(self.tracked_vault_balance, "tracked_vault_balance")
        require_uint(self.last_update_block, "last_update_block")


@dataclass(frozen=True)
class ParticipantState:
    """Per-participant row. The zero value is the implicit default."""

    weight: int = 0
    reward_baseline: int = 0

    def __post_init__(self) -> None:
        require_uint(self.weight, "weight")
        require_uint(self.reward_baseline, "reward_baseline")


@dataclass(frozen=True)
class PoolUpdate:
    """Outcome of one pool update.

    `updated` is False for the same-block no-op; `delivered` is the measured
    vault delta folded into the accumulator (0 when nothing was requested).
    """

    state: GlobalAccrualState
    delivered: int = 0
    updated: bool = False


@dataclass(frozen=True)
class Settlement:
    """Outcome of settling one participant: the new row and the amount owed."""

    participant: str
    state: ParticipantState
    pending: int


@dataclass(frozen=True)
class Notification:
    event: Event
    block: int
    fields: Mapping[str, Any] = field(default_factory=dict)
