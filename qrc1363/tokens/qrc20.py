"""
qRC20 Ledger

Implements the fungible-token ledger the payable extension builds on:
  - ERC-20 interface (transfer, approve, transferFrom, balanceOf, allowance)
  - Ledger primitives (debit / credit / allowance mutation / event record)
  - Undo journal with snapshot / revert so a whole operation, including any
    operations nested inside it, can be rolled back exactly
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from ..constants import (
    QRC20_DEFAULT_DECIMALS,
    QRC20_INFINITE_ALLOWANCE,
    QRC20_MAX_DECIMALS,
    QRC20_MAX_SUPPLY,
    UINT256_MAX,
)
from ..contracts.state import Contract
from ..crypto.address import is_zero_address, normalize_address
from ..exceptions import InvalidAddressError, QRC1363Exception
from ..logger import get_logger
from .interfaces import IERC20_ID, supports_interface

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class QRC20Error(QRC1363Exception):
    """Base exception for qRC20 operations."""


class InsufficientBalanceError(QRC20Error):
    """Raised when sender balance is too low."""


class InsufficientAllowanceError(QRC20Error):
    """Raised when spender allowance is too low."""


class InvalidTargetError(QRC20Error):
    """Raised for a malformed or reserved (zero) account in any role."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class QRC20TransferEvent:
    """Emitted on every successful transfer."""
    token_symbol: str
    sender: str
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "value": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class QRC20ApprovalEvent:
    """Emitted on every successful approve."""
    token_symbol: str
    owner: str
    spender: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "value": str(self.amount),
            "timestamp": self.timestamp,
        }


# Journal entry kinds
_BALANCE = "balance"
_ALLOWANCE = "allowance"
_EVENT = "event"


# ══════════════════════════════════════════════════════════════════════
#  QRC20 TOKEN
# ══════════════════════════════════════════════════════════════════════

class QRC20Token(Contract):
    """
    qRC20 Token — journaled fungible-token ledger.

    Mirrors ERC-20 semantics:
        - balance_of(address) → int
        - allowance(owner, spender) → int
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount)
        - total_supply → int

    Every public operation runs as one atomic unit: a re-entrant lock keeps
    other threads out, and any exception escaping the unit reverts every
    ledger mutation made inside it.
    """

    INTERFACES = (IERC20_ID,)

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = QRC20_DEFAULT_DECIMALS,
        total_supply: int = 0,
        deployer: str = "",
    ):
        """
        Args:
            name: Human-readable token name
            symbol: Short ticker (e.g. "PAY")
            decimals: Fractional digits
            total_supply: Initial supply in base units, credited to *deployer*
            deployer: Address of deploying account
        """
        if not name:
            raise QRC20Error("Token name cannot be empty")
        if not symbol:
            raise QRC20Error("Token symbol cannot be empty")
        if isinstance(decimals, bool) or not isinstance(decimals, int):
            raise QRC20Error(f"Decimals must be an int, got {type(decimals).__name__}")
        if decimals < 0 or decimals > QRC20_MAX_DECIMALS:
            raise QRC20Error(f"Decimals must be 0-{QRC20_MAX_DECIMALS}, got {decimals}")
        self._require_amount(total_supply, "Total supply")
        if total_supply > QRC20_MAX_SUPPLY:
            raise QRC20Error(f"Total supply {total_supply} exceeds max {QRC20_MAX_SUPPLY}")
        if total_supply > 0 and not deployer:
            raise QRC20Error("A non-zero supply needs a deployer to hold it")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._total_supply = total_supply
        self.deployer = self._require_account(deployer, "deployer") if deployer else ""

        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)
        self._events: List[Any] = []

        # Undo journal: (kind, key, previous value)
        self._journal: List[Tuple[str, Any, Any]] = []
        self._unit_lock = threading.RLock()
        self._unit_depth = 0

        if total_supply > 0:
            self._balances[self.deployer] = total_supply

        self._created_at = time.time()
        logger.info(f"qRC20 deployed: {symbol} ({name}), supply={total_supply}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get(
            (normalize_address(owner), normalize_address(spender)), 0
        )

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    def state_snapshot(self) -> Dict[str, Any]:
        """Copy of every balance and allowance (for audits and tests)."""
        return {
            "totalSupply": self._total_supply,
            "balances": {a: b for a, b in self._balances.items() if b},
            "allowances": {k: v for k, v in self._allowances.items() if v},
        }

    def supports_interface(self, iid) -> bool:
        return supports_interface(self, iid)

    # ── Argument guards ───────────────────────────────────────────────

    @staticmethod
    def _require_amount(amount: Any, label: str = "Amount") -> int:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise QRC20Error(f"{label} must be an int, got {type(amount).__name__}")
        if amount < 0:
            raise QRC20Error(f"{label} cannot be negative")
        if amount > UINT256_MAX:
            raise QRC20Error(f"{label} exceeds uint256")
        return amount

    @staticmethod
    def _require_account(address: Any, role: str) -> str:
        try:
            normalized = normalize_address(address)
        except InvalidAddressError as e:
            raise InvalidTargetError(f"Invalid {role}: {e}") from e
        if is_zero_address(normalized):
            raise InvalidTargetError(f"{role} cannot be the zero address")
        return normalized

    # ── Journal ───────────────────────────────────────────────────────

    def snapshot(self) -> int:
        """
        Mark the current journal position.

        Returns:
            Snapshot ID for revert()
        """
        return len(self._journal)

    def revert(self, snapshot_id: int) -> None:
        """
        Undo every mutation recorded after *snapshot_id*, newest first.

        Args:
            snapshot_id: Snapshot ID from snapshot()
        """
        if snapshot_id < 0 or snapshot_id > len(self._journal):
            raise ValueError(f"Invalid snapshot ID: {snapshot_id}")

        while len(self._journal) > snapshot_id:
            kind, key, previous = self._journal.pop()
            if kind == _BALANCE:
                if previous:
                    self._balances[key] = previous
                else:
                    self._balances.pop(key, None)
            elif kind == _ALLOWANCE:
                if previous:
                    self._allowances[key] = previous
                else:
                    self._allowances.pop(key, None)
            elif kind == _EVENT:
                self._events.pop()

    @contextmanager
    def atomic(self) -> Iterator[int]:
        """
        Run the enclosed block as one atomic unit.

        Yields the snapshot ID taken on entry. Units nest: the journal is
        only discarded when the outermost unit completes.
        """
        with self._unit_lock:
            snapshot_id = self.snapshot()
            self._unit_depth += 1
            try:
                yield snapshot_id
            except BaseException:
                self.revert(snapshot_id)
                raise
            finally:
                self._unit_depth -= 1
            if self._unit_depth == 0:
                self._journal.clear()

    @property
    def in_unit(self) -> bool:
        return self._unit_depth > 0

    # ── Ledger primitives ─────────────────────────────────────────────

    def debit(self, account: str, amount: int) -> None:
        bal = self._balances.get(account, 0)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{account} balance {bal} < amount {amount}"
            )
        self._journal.append((_BALANCE, account, bal))
        self._balances[account] = bal - amount

    def credit(self, account: str, amount: int) -> None:
        bal = self._balances.get(account, 0)
        self._journal.append((_BALANCE, account, bal))
        self._balances[account] = bal + amount

    def get_allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def set_allowance(self, owner: str, spender: str, amount: int) -> None:
        key = (owner, spender)
        self._journal.append((_ALLOWANCE, key, self._allowances.get(key, 0)))
        self._allowances[key] = amount

    def record_event(self, event: Any) -> None:
        self._journal.append((_EVENT, None, None))
        self._events.append(event)

    # ── Internal movements ────────────────────────────────────────────

    def _check_balance(self, account: str, amount: int) -> None:
        bal = self._balances.get(account, 0)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{account} balance {bal} < transfer amount {amount}"
            )

    def _check_allowance(self, owner: str, spender: str, amount: int) -> int:
        allow = self.get_allowance(owner, spender)
        if allow < amount:
            raise InsufficientAllowanceError(
                f"Allowance {allow} < transfer amount {amount}"
            )
        return allow

    def _move(self, sender: str, recipient: str, amount: int) -> QRC20TransferEvent:
        self.debit(sender, amount)
        self.credit(recipient, amount)
        event = QRC20TransferEvent(
            token_symbol=self.symbol,
            sender=sender,
            recipient=recipient,
            amount=amount,
        )
        self.record_event(event)
        return event

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        allow = self._check_allowance(owner, spender, amount)
        if allow != QRC20_INFINITE_ALLOWANCE:
            self.set_allowance(owner, spender, allow - amount)

    def _approve(self, owner: str, spender: str, amount: int) -> QRC20ApprovalEvent:
        self.set_allowance(owner, spender, amount)
        event = QRC20ApprovalEvent(
            token_symbol=self.symbol,
            owner=owner,
            spender=spender,
            amount=amount,
        )
        self.record_event(event)
        return event

    # ── Core ERC-20 operations ────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> QRC20TransferEvent:
        """
        Transfer tokens from *sender* to *recipient*.

        Zero-value transfers are valid and emit an event.
        """
        sender = self._require_account(sender, "sender")
        recipient = self._require_account(recipient, "recipient")
        self._require_amount(amount)

        with self.atomic():
            self._check_balance(sender, amount)
            event = self._move(sender, recipient, amount)

        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.symbol}")
        return event

    def approve(self, owner: str, spender: str, amount: int) -> QRC20ApprovalEvent:
        """
        Set spender allowance, overwriting any previous value.
        """
        owner = self._require_account(owner, "owner")
        spender = self._require_account(spender, "spender")
        self._require_amount(amount)

        with self.atomic():
            event = self._approve(owner, spender, amount)

        logger.debug(f"Approve: {owner} → {spender} allowance={amount} {self.symbol}")
        return event

    def transfer_from(
        self,
        spender: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> QRC20TransferEvent:
        """
        Transfer on behalf of *sender* using spender's allowance.
        """
        spender = self._require_account(spender, "spender")
        sender = self._require_account(sender, "sender")
        recipient = self._require_account(recipient, "recipient")
        self._require_amount(amount)

        with self.atomic():
            self._check_allowance(sender, spender, amount)
            self._check_balance(sender, amount)
            self._spend_allowance(sender, spender, amount)
            event = self._move(sender, recipient, amount)

        logger.debug(
            f"transferFrom: spender={spender} {sender} → {recipient} {amount} {self.symbol}"
        )
        return event

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": str(self._total_supply),
            "deployer": self.deployer,
            "address": self.address,
            "holders": len([b for b in self._balances.values() if b > 0]),
            "createdAt": self._created_at,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.symbol} supply={self._total_supply}>"
