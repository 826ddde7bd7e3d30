"""Invariant checkers for the accrual kernel.

Three kinds, one registry each:
- row invariants: one participant row against the global record,
- table invariants: the global record against every row (O(n), audit only),
- transition invariants: a pre-state against its post-state.

Each check returns True when the invariant holds; the `check_*` helpers return
the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable, Mapping

from .math import RAY
from .types import GlobalAccrualState, ParticipantState

Participants = Mapping[str, ParticipantState]


# -- Row invariants ----------------------------------------------------------

def inv_baseline_within_accrued(s: GlobalAccrualState, p: ParticipantState) -> bool:
    # Plain product: this audits state, it never produces any.
    return p.reward_baseline <= (p.weight * s.acc_reward_per_weight) // RAY


def inv_weight_within_total(s: GlobalAccrualState, p: ParticipantState) -> bool:
    return p.weight <= s.total_weight


# -- Table invariants --------------------------------------------------------

def inv_total_weight_is_sum(s: GlobalAccrualState, participants: Participants) -> bool:
    return s.total_weight == sum(p.weight for p in participants.values())


# -- Transition invariants ---------------------------------------------------

def inv_acc_monotone(prev: GlobalAccrualState, nxt: GlobalAccrualState) -> bool:
    return nxt.acc_reward_per_weight >= prev.acc_reward_per_weight


def inv_block_monotone(prev: GlobalAccrualState, nxt: GlobalAccrualState) -> bool:
    return nxt.last_update_block >= prev.last_update_block


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

ROW_REGISTRY: dict[str, Callable[[GlobalAccrualState, ParticipantState], bool]] = {
    "inv_baseline_within_accrued": inv_baseline_within_accrued,
    "inv_weight_within_total": inv_weight_within_total,
}

TABLE_REGISTRY: dict[str, Callable[[GlobalAccrualState, Participants], bool]] = {
    "inv_total_weight_is_sum": inv_total_weight_is_sum,
}

TRANSITION_REGISTRY: dict[str, Callable[[GlobalAccrualState, GlobalAccrualState], bool]] = {
    "inv_acc_monotone": inv_acc_monotone,
    "inv_block_monotone": inv_block_monotone,
}


def check_rows(state: GlobalAccrualState, participants: Participants) -> list[str]:
    """Row invariants over just the given rows (violations listed once)."""
    return [
        inv_id
        for inv_id, check_fn in ROW_REGISTRY.items()
        if not all(check_fn(state, p) for p in participants.values())
    ]


def check_all(state: GlobalAccrualState, participants: Participants) -> list[str]:
    """Return list of violated row and table invariant IDs (empty = all pass)."""
    violations = check_rows(state, participants)
    violations.extend(
        inv_id
        for inv_id, check_fn in TABLE_REGISTRY.items()
        if not check_fn(state, participants)
    )
    return violations


def check_transition(prev: GlobalAccrualState, nxt: GlobalAccrualState) -> list[str]:
    """Return list of violated transition invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in TRANSITION_REGISTRY.items()
        if not check_fn(prev, nxt)
    ]
