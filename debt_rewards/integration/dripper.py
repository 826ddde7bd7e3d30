"""
Reward sources ("drippers") feeding the custodian vault.

The engine only depends on the `RewardSource` protocol. `LinearDripper` is a
reference source: it streams a fixed amount per block out of its own ledger
balance and delivers whatever it can when asked, so depletion and top-ups are
just ledger balance changes.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Tuple, runtime_checkable

from ..core.accrual.math import require_uint
from ..state.balances import Account, BalanceTable, TokenId
from ..state.clock import BlockClock
from .structured_logging import log_event

log = logging.getLogger("debt_rewards.dripper")


class RewardSource(Protocol):
    def request_drip(self, destination: Account) -> int:
        """Push available rewards to `destination`; may deliver 0, must not fail."""
        ...

    def advertised_rate_per_block(self) -> int:
        ...

    def reward_token(self) -> TokenId:
        ...


@runtime_checkable
class Checkpointable(Protocol):
    """Collaborator state the engine can roll back with a failed operation."""

    def checkpoint(self) -> object:
        ...

    def restore(self, token: object) -> None:
        ...


class LinearDripper:
    """Streams `rate_per_block` tokens per elapsed block out of its own balance.

    Amounts that fall due while the balance is short stay owed and are paid
    out by later drips once the dripper is funded again.
    """

    def __init__(
        self,
        ledger: BalanceTable,
        clock: BlockClock,
        token: TokenId,
        rate_per_block: int,
        address: Account = "dripper",
        start_block: Optional[int] = None,
    ) -> None:
        self._ledger = ledger
        self._clock = clock
        self._token = token
        self._address = address
        self._rate = require_uint(rate_per_block, "rate_per_block")
        self._last_drip_block = require_uint(
            clock.height if start_block is None else start_block, "start_block"
        )
        self._owed = 0
        self.total_dripped = 0

    @property
    def address(self) -> Account:
        return self._address

    @property
    def last_drip_block(self) -> int:
        return self._last_drip_block

    def reward_token(self) -> TokenId:
        return self._token

    def advertised_rate_per_block(self) -> int:
        return self._rate

    def available(self) -> int:
        return self._ledger.get(self._address, self._token)

    def due(self) -> int:
        """Everything owed as of the current block, delivered or not."""
        elapsed = max(0, self._clock.height - self._last_drip_block)
        return self._owed + self._rate * elapsed

    def request_drip(self, destination: Account) -> int:
        """Deliver `min(due, available)`; the shortfall stays owed."""
        height = self._clock.height
        if height <= self._last_drip_block and self._owed == 0:
            return 0
        due = self.due()
        amount = min(due, self.available())
        self._owed = due - amount
        self._last_drip_block = max(height, self._last_drip_block)
        if amount > 0:
            # Cannot fail: amount is bounded by our own balance.
            self._ledger.transfer(self._address, destination, self._token, amount)
            self.total_dripped += amount
        log_event(log, "drip", block=height, to=destination, amount=amount, owed=self._owed)
        return amount

    def set_rate(self, rate_per_block: int, destination: Account) -> int:
        """Change the rate; the elapsed span is dripped at the old rate first."""
        rate = require_uint(rate_per_block, "rate_per_block")
        delivered = self.request_drip(destination)
        self._rate = rate
        log_event(log, "rate_set", block=self._clock.height, rate_per_block=rate)
        return delivered

    @property
    def owed(self) -> int:
        return self._owed

    def checkpoint(self) -> Tuple[int, int, int, int]:
        return (self._last_drip_block, self._rate, self._owed, self.total_dripped)

    def restore(self, token: object) -> None:
        self._last_drip_block, self._rate, self._owed, self.total_dripped = token  # type: ignore[misc]
