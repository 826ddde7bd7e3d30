"""Pure state transitions for the accrual kernel.

The engine composes these around its side effects (drip request, vault
transfer). Each function returns new frozen values and raises on any
arithmetic fault, so a caller that only commits after the last call gets
all-or-nothing behavior for free.

Pool update, split around the drip:
1. `pool_update_due` - no-op if the block was already processed.
2. `mark_updated`    - record the block; stop here if nobody is weighted.
3. (shell) request a drip into the vault.
4. `accrue`          - fold the measured vault delta into the accumulator.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import InvariantViolation, Underflow
from .math import add, mul, rdiv, rmul, sub, wdiv
from .types import GlobalAccrualState, ParticipantState


def pool_update_due(state: GlobalAccrualState, block: int) -> bool:
    return block > state.last_update_block


def mark_updated(state: GlobalAccrualState, block: int) -> GlobalAccrualState:
    return replace(state, last_update_block=block)


def accrue(state: GlobalAccrualState, vault_balance: int) -> tuple[GlobalAccrualState, int]:
    """Fold newly arrived vault tokens into the accumulator.

    Returns ``(new_state, delta)``. The division by `total_weight` truncates;
    the remainder stays in the vault untracked by any participant.
    """
    try:
        delta = sub(vault_balance, state.tracked_vault_balance)
    except Underflow as exc:
        raise InvariantViolation(["vault_balance_decreased"]) from exc
    new_state = replace(
        state,
        tracked_vault_balance=add(state.tracked_vault_balance, delta),
        acc_reward_per_weight=add(
            state.acc_reward_per_weight, rdiv(delta, state.total_weight),
        ),
    )
    return new_state, delta


def record_payout(state: GlobalAccrualState, amount: int) -> GlobalAccrualState:
    """Keep the tracked balance in step with tokens leaving the vault."""
    return replace(state, tracked_vault_balance=sub(state.tracked_vault_balance, amount))


def accrued_reward(weight: int, acc_reward_per_weight: int) -> int:
    """Cumulative entitlement of *weight* at accumulator value *acc*."""
    return rmul(weight, acc_reward_per_weight)


def pending_reward(participant: ParticipantState, acc_reward_per_weight: int) -> int:
    accrued = accrued_reward(participant.weight, acc_reward_per_weight)
    try:
        return sub(accrued, participant.reward_baseline)
    except Underflow as exc:
        raise InvariantViolation(["negative_pending_reward"]) from exc


def rebase(participant: ParticipantState, acc_reward_per_weight: int, weight: int | None = None) -> ParticipantState:
    """Reset the baseline, optionally under a new weight.

    The baseline is recomputed from the weight it will be paired with, never
    carried over from an earlier `accrued_reward` call.
    """
    new_weight = participant.weight if weight is None else weight
    return ParticipantState(
        weight=new_weight,
        reward_baseline=accrued_reward(new_weight, acc_reward_per_weight),
    )


def reweight(state: GlobalAccrualState, old_weight: int, new_weight: int) -> GlobalAccrualState:
    if new_weight >= old_weight:
        total = add(state.total_weight, sub(new_weight, old_weight))
    else:
        total = sub(state.total_weight, sub(old_weight, new_weight))
    return replace(state, total_weight=total)


# -- Read-only previews ------------------------------------------------------

def preview_acc(state: GlobalAccrualState, block: int, rate_per_block: int) -> int:
    """Accumulator after a hypothetical update delivering the advertised rate.

    Assumes `rate_per_block * (block - last_update_block)` arrives; the real
    update measures what the source actually delivers instead.
    """
    if state.total_weight == 0 or not pool_update_due(state, block):
        return state.acc_reward_per_weight
    expected = mul(rate_per_block, sub(block, state.last_update_block))
    return add(state.acc_reward_per_weight, rdiv(expected, state.total_weight))


def rate_per_weight(state: GlobalAccrualState, rate_per_block: int) -> int:
    """Advertised reward per block per weight unit, WAD-scaled (display only)."""
    if state.total_weight == 0:
        return 0
    return wdiv(rate_per_block, state.total_weight)
