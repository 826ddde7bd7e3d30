"""Tests for debt_rewards/integration/vault.py: owner-gated custodian."""

import pytest

from debt_rewards.core.accrual.errors import TransferFailed, Unauthorized
from debt_rewards.integration.vault import CustodianVault
from debt_rewards.state.balances import BalanceTable

T = "DRIP"


def _vault(balance: int = 100) -> tuple[CustodianVault, BalanceTable]:
    ledger = BalanceTable()
    vault = CustodianVault(ledger, T, owner="engine", address="vault")
    ledger.mint("vault", T, balance)
    return vault, ledger


class TestTransferOut:
    def test_owner_transfers(self):
        vault, ledger = _vault()
        vault.transfer_out("engine", "alice", 30)
        assert vault.balance() == 70
        assert ledger.get("alice", T) == 30

    def test_non_owner_rejected(self):
        vault, ledger = _vault()
        with pytest.raises(Unauthorized):
            vault.transfer_out("alice", "alice", 30)
        assert vault.balance() == 100

    def test_insufficient_balance(self):
        vault, ledger = _vault(10)
        with pytest.raises(TransferFailed):
            vault.transfer_out("engine", "alice", 11)
        assert vault.balance() == 10
        assert ledger.get("alice", T) == 0


class TestIdentity:
    def test_balance_reads_ledger(self):
        vault, ledger = _vault(0)
        ledger.mint("vault", T, 7)
        ledger.mint("vault", "OTHER", 100)
        assert vault.balance() == 7

    def test_identity_is_immutable(self):
        vault, _ = _vault()
        assert (vault.token, vault.owner, vault.address) == (T, "engine", "vault")
        with pytest.raises(AttributeError):
            vault.owner = "mallory"  # type: ignore[misc]

    def test_cannot_own_itself(self):
        with pytest.raises(ValueError):
            CustodianVault(BalanceTable(), T, owner="vault", address="vault")

    def test_empty_token(self):
        with pytest.raises(ValueError):
            CustodianVault(BalanceTable(), "", owner="engine")
