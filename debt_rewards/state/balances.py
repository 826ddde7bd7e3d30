"""
Fungible token ledger with journaled rollback.

Implements BalanceTable[Account, TokenId] -> Amount
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple


# Type aliases
Account = str  # opaque account identity
TokenId = str  # opaque token identity
Amount = int  # Non-negative integer (arbitrary precision)

_Key = Tuple[Account, TokenId]


class BalanceTable:
    """
    Balance table mapping (account, token) -> amount.

    Writes made inside `atomic()` are journaled and undone if the block raises,
    so a failed multi-step operation leaves no partial transfers behind.
    """

    def __init__(self):
        """Initialize empty balance table."""
        self._balances: Dict[_Key, Amount] = {}
        # One undo list per open atomic() scope, innermost last.
        self._journals: List[List[Tuple[_Key, Optional[Amount]]]] = []

    def get(self, account: Account, token: TokenId) -> Amount:
        """Get balance for (account, token). Returns 0 if not found."""
        return self._balances.get((account, token), 0)

    def set(self, account: Account, token: TokenId, amount: Amount) -> None:
        """
        Set balance for (account, token).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        key = (account, token)
        if self._journals:
            self._journals[-1].append((key, self._balances.get(key)))
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop(key, None)
        else:
            self._balances[key] = amount

    def add(self, account: Account, token: TokenId, delta: Amount) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(account, token)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(account, token, new_balance)

    def subtract(self, account: Account, token: TokenId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(account, token, -delta)

    def mint(self, account: Account, token: TokenId, amount: Amount) -> None:
        """Create `amount` new tokens in `account` (funding and top-ups)."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self.add(account, token, amount)

    def transfer(self, sender: Account, recipient: Account, token: TokenId, amount: Amount) -> bool:
        """
        Move `amount` of `token` from `sender` to `recipient`.

        Returns:
            False (and changes nothing) if the amount is negative or the sender
            cannot cover it; True otherwise.
        """
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            return False
        if self.get(sender, token) < amount:
            return False
        if amount == 0 or sender == recipient:
            return True
        self.subtract(sender, token, amount)
        self.add(recipient, token, amount)
        return True

    def total_supply(self, token: TokenId) -> Amount:
        return sum(amount for (_, t), amount in self._balances.items() if t == token)

    def get_balances_for_token(self, token: TokenId) -> Dict[Account, Amount]:
        """
        Get all balances for a specific token.

        Returns:
            Dictionary mapping account -> amount
        """
        return {acct: amount for (acct, t), amount in self._balances.items() if t == token}

    @contextmanager
    def atomic(self) -> Iterator["BalanceTable"]:
        """
        Run a block of writes all-or-nothing.

        Nested scopes fold their journal into the parent on success, so an
        outer failure still undoes writes committed by an inner scope.
        """
        journal: List[Tuple[_Key, Optional[Amount]]] = []
        self._journals.append(journal)
        try:
            yield self
        except BaseException:
            self._journals.pop()
            for key, previous in reversed(journal):
                if previous is None:
                    self._balances.pop(key, None)
                else:
                    self._balances[key] = previous
            raise
        self._journals.pop()
        if self._journals:
            self._journals[-1].extend(journal)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
