"""
qRC20 Ledger Test Suite

Coverage:
  - Deployment and argument validation
  - transfer / approve / transferFrom
  - Ledger primitives (debit, credit, allowance, event record)
  - Undo journal: snapshot / revert / nested atomic units
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from eth_utils import to_checksum_address

from qrc1363.constants import (
    QRC20_DEFAULT_DECIMALS,
    QRC20_INFINITE_ALLOWANCE,
    QRC20_MAX_SUPPLY,
    UINT256_MAX,
    ZERO_ADDRESS,
)
from qrc1363.tokens.qrc20 import (
    QRC20ApprovalEvent,
    QRC20Error,
    QRC20Token,
    QRC20TransferEvent,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidTargetError,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20


def make_ledger(supply=1_000_000, deployer=ALICE, **kwargs) -> QRC20Token:
    """Helper to create a qRC20 ledger for testing."""
    return QRC20Token(
        name="TestToken",
        symbol="TST",
        total_supply=supply,
        deployer=deployer,
        **kwargs,
    )


# ══════════════════════════════════════════════════════════════════════
#  DEPLOYMENT
# ══════════════════════════════════════════════════════════════════════


class TestQRC20Deploy:
    """Token deployment and basic properties."""

    def test_deploy_basic(self):
        token = make_ledger()
        assert token.name == "TestToken"
        assert token.symbol == "TST"
        assert token.decimals == QRC20_DEFAULT_DECIMALS
        assert token.total_supply == 1_000_000
        assert token.balance_of(ALICE) == 1_000_000
        assert token.deployer == to_checksum_address(ALICE)

    def test_deploy_zero_supply_without_deployer(self):
        token = QRC20Token(name="Zero", symbol="ZRO")
        assert token.total_supply == 0

    def test_supply_without_deployer_raises(self):
        with pytest.raises(QRC20Error, match="deployer"):
            QRC20Token(name="X", symbol="X", total_supply=10)

    def test_deploy_empty_name_raises(self):
        with pytest.raises(QRC20Error, match="name cannot be empty"):
            QRC20Token(name="", symbol="X")

    def test_deploy_empty_symbol_raises(self):
        with pytest.raises(QRC20Error, match="symbol cannot be empty"):
            QRC20Token(name="X", symbol="")

    def test_deploy_negative_supply_raises(self):
        with pytest.raises(QRC20Error, match="negative"):
            make_ledger(supply=-1)

    def test_deploy_invalid_decimals_raises(self):
        with pytest.raises(QRC20Error, match="Decimals"):
            make_ledger(decimals=19)

    def test_deploy_exceeds_max_supply_raises(self):
        with pytest.raises(QRC20Error, match="exceeds max"):
            make_ledger(supply=QRC20_MAX_SUPPLY + 1)

    def test_deploy_to_zero_address_raises(self):
        with pytest.raises(InvalidTargetError):
            make_ledger(deployer=ZERO_ADDRESS)

    def test_to_dict(self):
        d = make_ledger().to_dict()
        assert d["symbol"] == "TST"
        assert d["totalSupply"] == "1000000"
        assert d["holders"] == 1

    def test_repr(self):
        assert "TST" in repr(make_ledger())


# ══════════════════════════════════════════════════════════════════════
#  ERC-20 OPERATIONS
# ══════════════════════════════════════════════════════════════════════


class TestQRC20Transfer:

    def test_basic_transfer(self):
        token = make_ledger()
        event = token.transfer(ALICE, BOB, 100)
        assert isinstance(event, QRC20TransferEvent)
        assert token.balance_of(ALICE) == 999_900
        assert token.balance_of(BOB) == 100
        assert event.recipient == to_checksum_address(BOB)

    def test_zero_transfer_is_valid(self):
        token = make_ledger()
        token.transfer(ALICE, BOB, 0)
        assert token.balance_of(BOB) == 0
        assert len(token.events) == 1

    def test_self_transfer_keeps_balance(self):
        token = make_ledger()
        token.transfer(ALICE, ALICE, 10)
        assert token.balance_of(ALICE) == 1_000_000

    def test_insufficient_balance(self):
        token = make_ledger()
        with pytest.raises(InsufficientBalanceError):
            token.transfer(ALICE, BOB, 1_000_001)
        assert token.balance_of(ALICE) == 1_000_000
        assert token.events == []

    def test_transfer_to_zero_address_raises(self):
        token = make_ledger()
        with pytest.raises(InvalidTargetError, match="zero address"):
            token.transfer(ALICE, ZERO_ADDRESS, 1)

    def test_transfer_to_malformed_address_raises(self):
        token = make_ledger()
        with pytest.raises(InvalidTargetError):
            token.transfer(ALICE, "0x1234", 1)

    @pytest.mark.parametrize("amount", [-1, 1.5, "10", True, UINT256_MAX + 1])
    def test_invalid_amounts_raise(self, amount):
        token = make_ledger()
        with pytest.raises(QRC20Error):
            token.transfer(ALICE, BOB, amount)

    def test_checksum_and_lowercase_are_one_account(self):
        token = make_ledger()
        token.transfer(ALICE, BOB.upper().replace("0X", "0x"), 5)
        assert token.balance_of(BOB) == 5


class TestQRC20Approve:

    def test_approve(self):
        token = make_ledger()
        event = token.approve(ALICE, BOB, 500)
        assert isinstance(event, QRC20ApprovalEvent)
        assert token.allowance(ALICE, BOB) == 500

    def test_approve_overwrite(self):
        token = make_ledger()
        token.approve(ALICE, BOB, 500)
        token.approve(ALICE, BOB, 200)
        assert token.allowance(ALICE, BOB) == 200

    def test_approve_zero_spender_raises(self):
        token = make_ledger()
        with pytest.raises(InvalidTargetError):
            token.approve(ALICE, ZERO_ADDRESS, 1)


class TestQRC20TransferFrom:

    def test_transfer_from_basic(self):
        token = make_ledger()
        token.approve(ALICE, BOB, 300)
        token.transfer_from(BOB, ALICE, CAROL, 200)
        assert token.balance_of(CAROL) == 200
        assert token.allowance(ALICE, BOB) == 100

    def test_transfer_from_insufficient_allowance(self):
        token = make_ledger()
        token.approve(ALICE, BOB, 50)
        with pytest.raises(InsufficientAllowanceError):
            token.transfer_from(BOB, ALICE, CAROL, 51)
        assert token.allowance(ALICE, BOB) == 50

    def test_transfer_from_insufficient_balance_keeps_allowance(self):
        token = make_ledger(supply=10)
        token.approve(ALICE, BOB, 100)
        with pytest.raises(InsufficientBalanceError):
            token.transfer_from(BOB, ALICE, CAROL, 11)
        assert token.allowance(ALICE, BOB) == 100

    def test_infinite_allowance_not_decremented(self):
        token = make_ledger()
        token.approve(ALICE, BOB, QRC20_INFINITE_ALLOWANCE)
        token.transfer_from(BOB, ALICE, CAROL, 1000)
        assert token.allowance(ALICE, BOB) == QRC20_INFINITE_ALLOWANCE


# ══════════════════════════════════════════════════════════════════════
#  JOURNAL
# ══════════════════════════════════════════════════════════════════════


class TestQRC20Journal:
    """snapshot / revert and atomic units."""

    def test_revert_restores_everything(self):
        token = make_ledger()
        before = token.state_snapshot()
        sid = token.snapshot()
        token.debit(token.deployer, 10)
        token.credit(to_checksum_address(BOB), 10)
        token.set_allowance(token.deployer, to_checksum_address(BOB), 7)
        token.record_event("marker")
        token.revert(sid)
        assert token.state_snapshot() == before
        assert token.events == []

    def test_revert_invalid_id_raises(self):
        token = make_ledger()
        with pytest.raises(ValueError):
            token.revert(5)

    def test_atomic_reverts_on_exception(self):
        token = make_ledger()
        before = token.state_snapshot()
        with pytest.raises(RuntimeError):
            with token.atomic():
                token.debit(token.deployer, 10)
                raise RuntimeError("boom")
        assert token.state_snapshot() == before

    def test_nested_unit_failure_keeps_outer_changes(self):
        token = make_ledger()
        with token.atomic():
            token.transfer(ALICE, BOB, 10)
            with pytest.raises(InsufficientBalanceError):
                token.transfer(BOB, CAROL, 11)
        assert token.balance_of(BOB) == 10
        assert token.balance_of(CAROL) == 0

    def test_outer_failure_undoes_committed_inner_units(self):
        token = make_ledger()
        before = token.state_snapshot()
        with pytest.raises(RuntimeError):
            with token.atomic():
                token.transfer(ALICE, BOB, 10)
                token.approve(BOB, CAROL, 5)
                raise RuntimeError("outer fails")
        assert token.state_snapshot() == before
        assert token.events == []

    def test_journal_cleared_after_outermost_unit(self):
        token = make_ledger()
        token.transfer(ALICE, BOB, 1)
        assert token.snapshot() == 0
        assert not token.in_unit

    def test_debit_below_zero_raises(self):
        token = make_ledger()
        with pytest.raises(InsufficientBalanceError):
            token.debit(to_checksum_address(BOB), 1)

    def test_supply_invariant(self):
        token = make_ledger()
        token.transfer(ALICE, BOB, 123)
        token.approve(BOB, CAROL, 100)
        token.transfer_from(CAROL, BOB, CAROL, 100)
        total = sum(token.state_snapshot()["balances"].values())
        assert total == token.total_supply
