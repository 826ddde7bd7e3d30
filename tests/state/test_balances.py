"""Tests for debt_rewards/state/balances.py: token ledger and journaled rollback."""

import pytest

from debt_rewards.state.balances import BalanceTable

T = "DRIP"


class TestBasics:
    def test_default_zero(self):
        assert BalanceTable().get("alice", T) == 0

    def test_set_get(self):
        ledger = BalanceTable()
        ledger.set("alice", T, 5)
        assert ledger.get("alice", T) == 5
        assert ledger.get("alice", "OTHER") == 0

    def test_zero_balances_removed(self):
        ledger = BalanceTable()
        ledger.set("alice", T, 5)
        ledger.set("alice", T, 0)
        assert ledger.get_balances_for_token(T) == {}

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            BalanceTable().set("alice", T, -1)

    def test_subtract_insufficient(self):
        ledger = BalanceTable()
        ledger.mint("alice", T, 3)
        with pytest.raises(ValueError):
            ledger.subtract("alice", T, 4)
        assert ledger.get("alice", T) == 3

    def test_total_supply(self):
        ledger = BalanceTable()
        ledger.mint("alice", T, 3)
        ledger.mint("bob", T, 4)
        ledger.mint("bob", "OTHER", 100)
        assert ledger.total_supply(T) == 7


class TestTransfer:
    def test_moves_value(self):
        ledger = BalanceTable()
        ledger.mint("alice", T, 10)
        assert ledger.transfer("alice", "bob", T, 4) is True
        assert ledger.get("alice", T) == 6
        assert ledger.get("bob", T) == 4

    def test_insufficient_returns_false(self):
        ledger = BalanceTable()
        ledger.mint("alice", T, 3)
        assert ledger.transfer("alice", "bob", T, 4) is False
        assert ledger.get("alice", T) == 3
        assert ledger.get("bob", T) == 0

    @pytest.mark.parametrize("amount", [-1, True, 1.5])
    def test_invalid_amount_returns_false(self, amount):
        ledger = BalanceTable()
        ledger.mint("alice", T, 3)
        assert ledger.transfer("alice", "bob", T, amount) is False
        assert ledger.total_supply(T) == 3

    def test_self_transfer_conserves(self):
        ledger = BalanceTable()
        ledger.mint("alice", T, 3)
        assert ledger.transfer("alice", "alice", T, 3) is True
        assert ledger.get("alice", T) == 3


class TestAtomic:
    def test_commit(self):
        ledger = BalanceTable()
        with ledger.atomic():
            ledger.mint("alice", T, 5)
        assert ledger.get("alice", T) == 5

    def test_rollback_restores_and_removes(self):
        ledger = BalanceTable()
        ledger.mint("alice", T, 5)
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                ledger.transfer("alice", "bob", T, 5)
                ledger.mint("carol", T, 9)
                raise RuntimeError("abort")
        assert ledger.get("alice", T) == 5
        assert ledger.get_balances_for_token(T) == {"alice": 5}

    def test_inner_failure_keeps_outer_writes(self):
        ledger = BalanceTable()
        with ledger.atomic():
            ledger.mint("alice", T, 5)
            with pytest.raises(RuntimeError):
                with ledger.atomic():
                    ledger.mint("alice", T, 7)
                    raise RuntimeError("inner")
        assert ledger.get("alice", T) == 5

    def test_outer_failure_undoes_committed_inner(self):
        ledger = BalanceTable()
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                with ledger.atomic():
                    ledger.mint("alice", T, 7)
                raise RuntimeError("outer")
        assert ledger.get("alice", T) == 0
