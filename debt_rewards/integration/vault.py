"""
Custodian vault: an owner-gated holder of one reward token.

No accounting of its own; balances live in the token ledger.
"""

from __future__ import annotations

import logging

from ..core.accrual.errors import TransferFailed, Unauthorized
from ..state.balances import Account, BalanceTable, TokenId

log = logging.getLogger("debt_rewards.vault")


class CustodianVault:
    """Bound permanently to one token and one owner at construction."""

    __slots__ = ("_ledger", "_token", "_owner", "_address")

    def __init__(self, ledger: BalanceTable, token: TokenId, owner: Account, address: Account = "vault") -> None:
        for name, v in (("token", token), ("owner", owner), ("address", address)):
            if not isinstance(v, str) or not v:
                raise ValueError(f"{name} must be a non-empty string")
        if owner == address:
            raise ValueError("vault cannot own itself")
        self._ledger = ledger
        self._token = token
        self._owner = owner
        self._address = address

    @property
    def token(self) -> TokenId:
        return self._token

    @property
    def owner(self) -> Account:
        return self._owner

    @property
    def address(self) -> Account:
        return self._address

    def balance(self) -> int:
        return self._ledger.get(self._address, self._token)

    def transfer_out(self, caller: Account, to: Account, amount: int) -> None:
        """Send `amount` of the custodied token to `to`.

        Raises:
            Unauthorized: caller is not the owner.
            TransferFailed: the ledger rejected the transfer.
        """
        if caller != self._owner:
            raise Unauthorized(f"vault: {caller!r} is not the owner")
        if not self._ledger.transfer(self._address, to, self._token, amount):
            raise TransferFailed(
                f"vault: transfer of {amount} to {to!r} rejected (balance {self.balance()})"
            )
        log.debug("vault transfer to=%s amount=%s", to, amount)

    def __repr__(self) -> str:
        return f"CustodianVault(address={self._address!r}, token={self._token!r}, owner={self._owner!r})"
