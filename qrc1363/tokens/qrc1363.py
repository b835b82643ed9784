"""
qRC-1363 Payable Token

Extends the qRC20 ledger with transfer/approve-then-notify operations:

  - transfer_and_call       : send, then notify the recipient
  - transfer_from_and_call  : send on allowance, then notify the recipient
  - approve_and_call        : approve, then notify the spender

Each operation mutates the ledger first, so the counterparty observes the
new state while its handler runs, and then either commits or reverts the
whole unit depending on the handler's answer. Targets without code are
plain holders and are never notified.
"""

from typing import Any, Dict, Optional

from ..constants import QRC20_DEFAULT_DECIMALS
from ..contracts.state import ContractState
from ..logger import get_logger
from .dispatch import CallbackDispatcher, DispatchOutcome, NotificationRequest
from .interfaces import IERC1363_ID, InterfaceDeclaration, NotificationKind
from .qrc20 import (
    QRC20ApprovalEvent,
    QRC20Error,
    QRC20Token,
    QRC20TransferEvent,
)
from .validation import AcceptanceValidator, Verdict

logger = get_logger(__name__)


class CallbackRejectedError(QRC20Error):
    """
    Raised when a notified counterparty did not accept the operation.

    The ledger has already been restored to its pre-call state when this
    reaches the caller.
    """

    def __init__(self, kind: NotificationKind, target: str, outcome: DispatchOutcome):
        self.kind = kind
        self.target = target
        self.outcome = outcome
        super().__init__(
            f"{kind.value} rejected by {target}: {outcome.describe()}"
        )


class QRC1363Token(QRC20Token):
    """
    qRC-1363 Token — payable fungible token.

    The token is itself a contract in *state*; it is deployed there on
    construction and notifies counterparties through *dispatcher*.
    """

    INTERFACES = (IERC1363_ID,)

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = QRC20_DEFAULT_DECIMALS,
        total_supply: int = 0,
        deployer: str = "",
        *,
        state: ContractState,
        dispatcher: Optional[CallbackDispatcher] = None,
        validator: Optional[AcceptanceValidator] = None,
    ):
        if state is None:
            raise QRC20Error("A payable token needs a ContractState to live in")
        if not deployer:
            raise QRC20Error("A payable token needs a deployer")
        super().__init__(name, symbol, decimals, total_supply, deployer)

        state.deploy(self, self.deployer)
        self.dispatcher = dispatcher or CallbackDispatcher(state)
        self.validator = validator or AcceptanceValidator()

    @classmethod
    def from_config(cls, config, state: ContractState, deployer: str) -> "QRC1363Token":
        """Build a token from a loaded ``QRC1363Config``."""
        token_cfg = config.token
        return cls(
            name=token_cfg.name,
            symbol=token_cfg.symbol,
            decimals=token_cfg.decimals,
            total_supply=token_cfg.initial_supply,
            deployer=deployer,
            state=state,
        )

    def supports_protocol(self, iid=IERC1363_ID) -> bool:
        return self.supports_interface(iid)

    # ── Guards ────────────────────────────────────────────────────────

    @staticmethod
    def _require_data(data: Any) -> bytes:
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        raise QRC20Error(f"Payload must be bytes, got {type(data).__name__}")

    # ── Notification ──────────────────────────────────────────────────

    def _notify(self, request: NotificationRequest) -> None:
        """
        Notify *request.target* and raise if it does not accept.

        Must run inside the unit whose mutations it guards.
        """
        if not self.state.has_code(request.target):
            logger.debug(
                f"[{request.kind.value}] {request.target} has no code, notification skipped"
            )
            return

        outcome = self.dispatcher.dispatch(request, caller=self.address)
        verdict = self.validator.validate(request.kind, outcome)
        if verdict is not Verdict.ACCEPT:
            logger.warning(
                f"[{request.kind.value}] REJECTED by {request.target}: {outcome.describe()}"
            )
            raise CallbackRejectedError(request.kind, request.target, outcome)

        logger.debug(f"[{request.kind.value}] ACCEPTED by {request.target}")

    # ── Payable operations ────────────────────────────────────────────

    def transfer_and_call(
        self,
        caller: str,
        to: str,
        amount: int,
        data: bytes = b"",
    ) -> QRC20TransferEvent:
        """
        Transfer *amount* from *caller* to *to*, then notify *to*.

        Raises:
            InvalidTargetError: *caller* or *to* malformed or zero
            InsufficientBalanceError: *caller* holds less than *amount*
            CallbackRejectedError: *to* did not accept; nothing changed
        """
        caller = self._require_account(caller, "sender")
        to = self._require_account(to, "recipient")
        self._require_amount(amount)
        data = self._require_data(data)

        with self.atomic():
            self._check_balance(caller, amount)
            event = self._move(caller, to, amount)
            self._notify(NotificationRequest(
                kind=NotificationKind.TRANSFER,
                initiator=caller,
                counterparty=caller,
                target=to,
                amount=amount,
                data=data,
            ))

        logger.debug(f"transferAndCall: {caller} → {to} {amount} {self.symbol}")
        return event

    def transfer_from_and_call(
        self,
        caller: str,
        sender: str,
        to: str,
        amount: int,
        data: bytes = b"",
    ) -> QRC20TransferEvent:
        """
        Transfer *amount* from *sender* to *to* using *caller*'s allowance,
        then notify *to*.

        Raises:
            InvalidTargetError: any account malformed or zero
            InsufficientAllowanceError: allowance(sender, caller) < amount
            InsufficientBalanceError: *sender* holds less than *amount*
            CallbackRejectedError: *to* did not accept; balances and the
                allowance are restored
        """
        caller = self._require_account(caller, "spender")
        sender = self._require_account(sender, "sender")
        to = self._require_account(to, "recipient")
        self._require_amount(amount)
        data = self._require_data(data)

        with self.atomic():
            self._check_allowance(sender, caller, amount)
            self._check_balance(sender, amount)
            self._spend_allowance(sender, caller, amount)
            event = self._move(sender, to, amount)
            self._notify(NotificationRequest(
                kind=NotificationKind.TRANSFER,
                initiator=caller,
                counterparty=sender,
                target=to,
                amount=amount,
                data=data,
            ))

        logger.debug(
            f"transferFromAndCall: spender={caller} {sender} → {to} {amount} {self.symbol}"
        )
        return event

    def approve_and_call(
        self,
        caller: str,
        spender: str,
        amount: int,
        data: bytes = b"",
    ) -> QRC20ApprovalEvent:
        """
        Set allowance(caller, spender) = *amount*, then notify *spender*.

        Raises:
            InvalidTargetError: *caller* or *spender* malformed or zero
            CallbackRejectedError: *spender* did not accept; the previous
                allowance is restored
        """
        caller = self._require_account(caller, "owner")
        spender = self._require_account(spender, "spender")
        self._require_amount(amount)
        data = self._require_data(data)

        with self.atomic():
            event = self._approve(caller, spender, amount)
            self._notify(NotificationRequest(
                kind=NotificationKind.APPROVAL,
                initiator=caller,
                counterparty=caller,
                target=spender,
                amount=amount,
                data=data,
            ))

        logger.debug(f"approveAndCall: {caller} → {spender} allowance={amount} {self.symbol}")
        return event

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["interfaces"] = sorted(
            "0x" + iid.hex() for iid in InterfaceDeclaration.of(self)
        )
        return result
