"""
Reentrancy & Adversarial Counterparty Test Suite

Coverage:
  - Handlers re-entering the token observe the mutated ledger
  - Outer rejection undoes nested operations performed by the handler
  - Unbounded recursion stops at the call-depth limit with no net effect
  - Concurrent callers preserve the total-supply invariant
"""

import os
import sys
import threading

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from eth_utils import to_checksum_address

from qrc1363.contracts import ContractState, QRC1363Receiver, QRC1363Spender
from qrc1363.exceptions import CallDepthExceededError
from qrc1363.tokens import (
    APPROVAL_RECEIVED_SENTINEL,
    TRANSFER_RECEIVED_SENTINEL,
    CallbackRejectedError,
    DispatchStatus,
    QRC1363Token,
    QRC20Token,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = to_checksum_address("0x" + "a1" * 20)
BOB = to_checksum_address("0x" + "b2" * 20)
CAROL = to_checksum_address("0x" + "c3" * 20)
DEPLOYER = to_checksum_address("0x" + "ee" * 20)


def make_token(supply=100, state=None):
    token = QRC1363Token(
        name="Payable",
        symbol="PAY",
        total_supply=supply,
        deployer=DEPLOYER,
        state=state or ContractState(),
    )
    token.transfer(DEPLOYER, ALICE, supply)
    return token


class PullingSpender(QRC1363Spender):
    """Pulls the approved amount to *beneficiary* from inside the callback."""

    def __init__(self, token, beneficiary):
        self.token = token
        self.beneficiary = beneficiary
        self.observed_allowance = None

    def on_approval_received(self, owner, amount, data):
        self.observed_allowance = self.token.allowance(owner, self.address)
        self.token.transfer_from_and_call(self.address, owner, self.beneficiary, amount, data)
        return APPROVAL_RECEIVED_SENTINEL


class ForwardThenRefuse(QRC1363Receiver):
    """Forwards part of the payment onward, then refuses the original."""

    def __init__(self, token, forward_to, forward_amount):
        self.token = token
        self.forward_to = forward_to
        self.forward_amount = forward_amount
        self.forwarded = False

    def on_transfer_received(self, operator, sender, amount, data):
        self.token.transfer(self.address, self.forward_to, self.forward_amount)
        self.forwarded = True
        return b"nope"


class Boomerang(QRC1363Receiver):
    """Sends one unit back to itself on every notification."""

    def __init__(self, token):
        self.token = token
        self.calls = 0

    def on_transfer_received(self, operator, sender, amount, data):
        self.calls += 1
        self.token.transfer_and_call(self.address, self.address, 1)
        return TRANSFER_RECEIVED_SENTINEL


# ══════════════════════════════════════════════════════════════════════
#  REENTRANCY
# ══════════════════════════════════════════════════════════════════════


class TestReentrancy:

    def test_spender_pulls_during_approval(self):
        token = make_token()
        spender = PullingSpender(token, CAROL)
        token.state.deploy(spender, DEPLOYER)

        token.approve_and_call(ALICE, spender.address, 30, b"order-1")

        assert spender.observed_allowance == 30
        assert token.balance_of(CAROL) == 30
        assert token.balance_of(ALICE) == 70
        assert token.allowance(ALICE, spender.address) == 0

    def test_failed_pull_rejects_approval(self):
        token = make_token(supply=10)
        spender = PullingSpender(token, CAROL)
        token.state.deploy(spender, DEPLOYER)
        before = token.state_snapshot()

        # Allowance of 50 succeeds but the balance of 10 cannot cover the pull
        with pytest.raises(CallbackRejectedError) as exc_info:
            token.approve_and_call(ALICE, spender.address, 50)

        assert exc_info.value.outcome.status is DispatchStatus.HANDLER_FAILED
        assert token.state_snapshot() == before

    def test_outer_rejection_undoes_nested_transfer(self):
        token = make_token()
        receiver = ForwardThenRefuse(token, CAROL, 15)
        token.state.deploy(receiver, DEPLOYER)
        before = token.state_snapshot()
        events_before = len(token.events)

        with pytest.raises(CallbackRejectedError):
            token.transfer_and_call(ALICE, receiver.address, 40)

        assert receiver.forwarded
        assert token.balance_of(CAROL) == 0
        assert token.balance_of(receiver.address) == 0
        assert token.state_snapshot() == before
        assert len(token.events) == events_before

    def test_recursion_stops_at_depth_limit(self):
        token = make_token(state=ContractState(max_call_depth=8))
        boomerang = Boomerang(token)
        token.state.deploy(boomerang, DEPLOYER)
        before = token.state_snapshot()

        with pytest.raises(CallbackRejectedError) as exc_info:
            token.transfer_and_call(ALICE, boomerang.address, 10)

        assert boomerang.calls == 8
        assert token.state_snapshot() == before
        assert token.state.depth == 0
        assert not token.in_unit

        # Innermost failure is the depth limit
        error = exc_info.value
        while isinstance(error, CallbackRejectedError):
            error = error.outcome.error
        assert isinstance(error, CallDepthExceededError)

    def test_ledger_usable_after_exhaustion(self):
        token = make_token(state=ContractState(max_call_depth=4))
        boomerang = Boomerang(token)
        token.state.deploy(boomerang, DEPLOYER)

        with pytest.raises(CallbackRejectedError):
            token.transfer_and_call(ALICE, boomerang.address, 10)

        token.transfer(ALICE, BOB, 10)
        assert token.balance_of(BOB) == 10


# ══════════════════════════════════════════════════════════════════════
#  CONCURRENCY
# ══════════════════════════════════════════════════════════════════════


class TestConcurrency:

    def test_parallel_transfers_preserve_supply(self):
        token = QRC20Token(name="T", symbol="T", total_supply=10_000, deployer=ALICE)
        token.transfer(ALICE, BOB, 5_000)
        errors = []

        def worker(src, dst):
            try:
                for _ in range(200):
                    token.transfer(src, dst, 3)
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=worker, args=(ALICE, BOB) if i % 2 else (BOB, ALICE))
            for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        balances = token.state_snapshot()["balances"]
        assert sum(balances.values()) == token.total_supply
        assert token.balance_of(ALICE) + token.balance_of(BOB) == 10_000

    def test_call_stacks_are_per_thread(self):
        state = ContractState(max_call_depth=1)
        seen = []

        def worker():
            with state.call_frame(ALICE, BOB):
                seen.append(state.depth)

        with state.call_frame(BOB, CAROL):
            t = threading.Thread(target=worker)
            t.start()
            t.join()

        assert seen == [1]
