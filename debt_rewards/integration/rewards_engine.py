"""
Reward accrual engine: the imperative shell around the accrual kernel.

This module wires the pure transitions in `core.accrual.updates` to the outside
world (reward source, custodian vault, block clock) and enforces the execution
model:
- Operations are serialized by one lock and are not re-entrant. A call from
  inside a running operation (a reward source or subscriber calling back) raises
  `Reentrancy` instead of observing half-applied state.
- Operations are all-or-nothing. Engine state is staged and committed last,
  ledger writes are journaled, and checkpointable sources are restored, so any
  fault leaves no trace.
- Notifications are buffered per operation and published only after commit.

Every externally triggered operation starts with a pool update (pull the drip,
advance the accumulator) followed, for `claim` and `set_weight`, by a settlement
of one participant (pay pending reward, reset the baseline).
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from ..core.accrual.errors import InvariantViolation, Overflow, Reentrancy, Unauthorized
from ..core.accrual.invariants import check_all, check_rows, check_transition
from ..core.accrual.math import require_uint
from ..core.accrual.state import (
    initial_state,
    participant_from_dict,
    participant_to_dict,
    state_from_dict,
    state_to_dict,
)
from ..core.accrual.types import (
    Event,
    GlobalAccrualState,
    Notification,
    ParticipantState,
    PoolUpdate,
    Settlement,
)
from ..core.accrual.updates import (
    accrue,
    mark_updated,
    pending_reward,
    pool_update_due,
    preview_acc,
    rate_per_weight,
    rebase,
    record_payout,
    reweight,
)
from ..state.acl import AllowList
from ..state.balances import BalanceTable
from ..state.clock import BlockClock
from ..state.participants import ParticipantTable
from .config import EngineConfig
from .dripper import Checkpointable, RewardSource
from .structured_logging import log_event
from .vault import CustodianVault

log = logging.getLogger("debt_rewards.engine")

Subscriber = Callable[[Notification], None]


@dataclass
class _Tx:
    """Staged effects of one operation; discarded unless the operation commits."""

    block: int
    state: GlobalAccrualState
    rows: Dict[str, ParticipantState] = field(default_factory=dict)
    grants: List[Tuple[str, bool]] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)

    def emit(self, event: Event, **fields: Any) -> None:
        self.notifications.append(Notification(event=event, block=self.block, fields=fields))


class RewardsEngine:
    """Pull-based reward accrual over debt-weighted participants."""

    def __init__(
        self,
        ledger: BalanceTable,
        clock: BlockClock,
        source: RewardSource,
        config: EngineConfig = EngineConfig(),
    ) -> None:
        self._ledger = ledger
        self._clock = clock
        self._source = source
        self._config = config
        self._vault = CustodianVault(
            ledger, source.reward_token(), owner=config.address, address=config.vault_address
        )
        self._state = initial_state()
        self._participants = ParticipantTable()
        self._acl = AllowList.of(config.authorized)
        self._lock = threading.RLock()
        self._entered = False
        self._notifications: List[Notification] = []
        self._subscribers: List[Subscriber] = []

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._config.address

    @property
    def vault(self) -> CustodianVault:
        return self._vault

    @property
    def state(self) -> GlobalAccrualState:
        return self._state

    @property
    def notifications(self) -> Tuple[Notification, ...]:
        return tuple(self._notifications)

    def participant(self, participant: str) -> ParticipantState:
        return self._participants.get(participant)

    def is_authorized(self, who: str) -> bool:
        return self._acl.allows(who)

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback for committed notifications.

        Callbacks run after the operation has committed and after its
        notifications are logged. A failing callback does not stop delivery to
        the others; the first exception then reaches the operation's caller
        but does not undo the commit.
        """
        self._subscribers.append(callback)

    # ------------------------------------------------------------------
    # Transaction machinery
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[_Tx]:
        with self._lock:
            if self._entered:
                raise Reentrancy("engine operation invoked from inside another operation")
            self._entered = True
            try:
                tx = _Tx(block=self._clock.height, state=self._state)
                source_checkpoint = (
                    self._source.checkpoint() if isinstance(self._source, Checkpointable) else None
                )
                try:
                    with self._ledger.atomic():
                        yield tx
                        self._audit(tx)
                except BaseException:
                    if source_checkpoint is not None:
                        self._source.restore(source_checkpoint)  # type: ignore[union-attr]
                    raise
                self._commit(tx)
            finally:
                self._entered = False
            self._publish(tx.notifications)

    def _row(self, tx: _Tx, participant: str) -> ParticipantState:
        staged = tx.rows.get(participant)
        return staged if staged is not None else self._participants.get(participant)

    def _audit(self, tx: _Tx) -> None:
        if not self._config.audit_invariants:
            return
        violations = check_transition(self._state, tx.state)
        violations.extend(check_rows(tx.state, tx.rows))
        if tx.state.tracked_vault_balance > self._vault.balance():
            violations.append("inv_vault_covers_tracked")
        if violations:
            raise InvariantViolation(violations)

    def _commit(self, tx: _Tx) -> None:
        self._state = tx.state
        for participant, row in tx.rows.items():
            self._participants.put(participant, row)
        for who, allowed in tx.grants:
            if allowed:
                self._acl.grant(who)
            else:
                self._acl.revoke(who)
        self._notifications.extend(tx.notifications)

    def _publish(self, notifications: List[Notification]) -> None:
        if self._config.log_events:
            for note in notifications:
                log_event(log, note.event.value, block=note.block, **dict(note.fields))
        # Every subscriber sees every notification; the first failure is re-raised after.
        first_error: Optional[Exception] = None
        for note in notifications:
            for callback in list(self._subscribers):
                try:
                    callback(note)
                except Exception as exc:
                    log.exception("subscriber %r failed on %s", callback, note.event.value)
                    if first_error is None:
                        first_error = exc
        if first_error is not None:
            raise first_error

    # ------------------------------------------------------------------
    # Pool update and settlement (run inside a transaction)
    # ------------------------------------------------------------------

    def _update_pool(self, tx: _Tx) -> PoolUpdate:
        if not pool_update_due(tx.state, tx.block):
            return PoolUpdate(state=tx.state)
        tx.state = mark_updated(tx.state, tx.block)
        delivered = 0
        if tx.state.total_weight > 0:
            self._source.request_drip(self._vault.address)
            tx.state, delivered = accrue(tx.state, self._vault.balance())
        tx.emit(
            Event.POOL_UPDATED,
            delivered=delivered,
            acc_reward_per_weight=tx.state.acc_reward_per_weight,
            total_weight=tx.state.total_weight,
            tracked_vault_balance=tx.state.tracked_vault_balance,
        )
        return PoolUpdate(state=tx.state, delivered=delivered, updated=True)

    def _settle(self, tx: _Tx, participant: str, new_weight: Optional[int] = None) -> Settlement:
        self._update_pool(tx)
        row = self._row(tx, participant)
        acc = tx.state.acc_reward_per_weight
        pending = pending_reward(row, acc)
        if pending > 0:
            self._vault.transfer_out(self._config.address, participant, pending)
            tx.state = record_payout(tx.state, pending)
            tx.emit(Event.REWARDS_PAID, participant=participant, amount=pending)
        if new_weight is not None:
            tx.state = reweight(tx.state, row.weight, new_weight)
        new_row = rebase(row, acc, new_weight)
        # Rows are created by weight-sets only; a bare claim never adds one.
        if new_weight is not None or new_row != row:
            tx.rows[participant] = new_row
        return Settlement(participant=participant, state=new_row, pending=pending)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def update_pool(self) -> PoolUpdate:
        """Pull pending drips and advance the accumulator (no-op within a block)."""
        with self._transaction() as tx:
            result = self._update_pool(tx)
        return result

    def _require_participant(self, participant: str) -> None:
        # A payout to the vault itself would move nothing yet still count as paid.
        if participant == self._vault.address:
            raise ValueError(f"the vault address {participant!r} cannot be a participant")

    def claim(self, caller: str) -> int:
        """Settle `caller`, paying out everything accrued. Returns the amount paid."""
        self._require_participant(caller)
        with self._transaction() as tx:
            settlement = self._settle(tx, caller)
        return settlement.pending

    def set_weight(self, caller: str, participant: str, new_weight: int) -> int:
        """Set `participant`'s weight after paying out rewards earned under the old one.

        Returns the amount paid out during settlement.

        Raises:
            Unauthorized: `caller` is not on the allow-list.
            Overflow: `new_weight` exceeds the configured bound or the total overflows.
            ValueError: `participant` is the vault's own address.
        """
        self._require_participant(participant)
        require_uint(new_weight, "new_weight")
        if new_weight > self._config.max_weight:
            raise Overflow(f"weight {new_weight} exceeds max_weight {self._config.max_weight}")
        with self._transaction() as tx:
            if not self._acl.allows(caller):
                raise Unauthorized(f"{caller!r} may not set weights")
            settlement = self._settle(tx, participant, new_weight)
            tx.emit(
                Event.WEIGHT_SET,
                participant=participant,
                weight=new_weight,
                total_weight=tx.state.total_weight,
            )
        return settlement.pending

    def rely(self, caller: str, who: str) -> None:
        """Add `who` to the allow-list."""
        self._set_authorized(caller, who, True)

    def deny(self, caller: str, who: str) -> None:
        """Remove `who` from the allow-list."""
        self._set_authorized(caller, who, False)

    def _set_authorized(self, caller: str, who: str, allowed: bool) -> None:
        if not isinstance(who, str) or not who:
            raise ValueError(f"invalid identity: {who!r}")
        with self._transaction() as tx:
            if not self._acl.allows(caller):
                raise Unauthorized(f"{caller!r} may not change authorization")
            tx.grants.append((who, allowed))
            tx.emit(Event.CALLER_AUTHORIZED if allowed else Event.CALLER_DEAUTHORIZED, who=who)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def pending_reward_view(self, participant: str) -> int:
        """Preview the pending reward assuming the advertised rate is delivered.

        Informational: the next real settlement pays what actually arrived.
        """
        with self._lock:
            row = self._participants.get(participant)
            acc = preview_acc(
                self._state, self._clock.height, self._source.advertised_rate_per_block()
            )
            return pending_reward(row, acc)

    def reward_rate_view(self) -> int:
        """Advertised reward per block per weight unit, WAD-scaled (0 when unweighted)."""
        with self._lock:
            return rate_per_weight(self._state, self._source.advertised_rate_per_block())

    # ------------------------------------------------------------------
    # Persistence and audit
    # ------------------------------------------------------------------

    def audit(self) -> List[str]:
        """Full O(participants) invariant sweep over the committed state."""
        with self._lock:
            violations = check_all(self._state, self._participants.as_mapping())
            if self._state.tracked_vault_balance > self._vault.balance():
                violations.append("inv_vault_covers_tracked")
            return violations

    def export_state(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": state_to_dict(self._state),
                "participants": {p: participant_to_dict(row) for p, row in self._participants.items()},
                "authorized": list(self._acl.members()),
            }

    def import_state(self, snapshot: Mapping[str, Any]) -> None:
        """Replace the engine's records with a previously exported snapshot.

        The snapshot is validated in full before anything is replaced.
        """
        state = state_from_dict(snapshot["state"])
        table = ParticipantTable()
        for participant, row in snapshot["participants"].items():
            self._require_participant(participant)
            table.put(participant, participant_from_dict(row))
        acl = AllowList.of(snapshot.get("authorized", ()))
        with self._lock:
            if self._entered:
                raise Reentrancy("cannot import state during an operation")
            violations = check_all(state, table.as_mapping())
            if state.tracked_vault_balance > self._vault.balance():
                violations.append("inv_vault_covers_tracked")
            if violations:
                raise InvariantViolation(violations)
            self._state = state
            self._participants = table
            self._acl = acl
        log_event(log, "state_imported", participants=len(table), block=state.last_update_block)
