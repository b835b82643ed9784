"""
Callback Dispatcher

Delivers one notification to a counterparty contract and captures what
came back. The counterparty is untrusted: whatever it returns is passed on
untouched for validation, and anything it raises is contained here and
reported as a failed handler.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..logger import get_logger
from .interfaces import CapabilityProber, NotificationKind

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotificationRequest:
    """
    One callback attempt. Built right before dispatch, dropped after
    validation.

    Attributes:
        kind:          TRANSFER or APPROVAL
        initiator:     Caller of the token operation (the operator)
        counterparty:  Account whose funds moved (``from``) or the owner
        target:        Recipient or spender being notified
        amount:        Amount moved or approved
        data:          Auxiliary payload, passed through uninterpreted
    """
    kind: NotificationKind
    initiator: str
    counterparty: str
    target: str
    amount: int
    data: bytes = b""


class DispatchStatus(Enum):
    RETURNED = "returned"
    HANDLER_MISSING = "handler-missing"
    HANDLER_FAILED = "handler-failed"


@dataclass(frozen=True)
class DispatchOutcome:
    status: DispatchStatus
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def returned(cls, value: Any) -> "DispatchOutcome":
        return cls(DispatchStatus.RETURNED, value=value)

    @classmethod
    def missing(cls) -> "DispatchOutcome":
        return cls(DispatchStatus.HANDLER_MISSING)

    @classmethod
    def failed(cls, error: BaseException) -> "DispatchOutcome":
        return cls(DispatchStatus.HANDLER_FAILED, error=error)

    def describe(self) -> str:
        if self.status is DispatchStatus.RETURNED:
            return f"returned {self.value!r:.80}"
        if self.status is DispatchStatus.HANDLER_FAILED:
            return f"handler failed: {type(self.error).__name__}: {self.error}"
        return "no handler declared"


class CallbackDispatcher:
    """
    Invokes counterparty notification handlers.

    Transfer notifications call ``on_transfer_received(operator, from,
    amount, data)``; approval notifications call ``on_approval_received(
    owner, amount, data)``. Each call runs inside a call frame whose caller
    is the token, so the handler sees the token as ``msg_sender`` and may
    call back into it.
    """

    def __init__(self, state, prober: Optional[CapabilityProber] = None):
        self.state = state
        self.prober = prober or CapabilityProber()

    def dispatch(self, request: NotificationRequest, caller: str) -> DispatchOutcome:
        contract = self.state.get_contract(request.target)
        handler = self.prober.handler_for(contract, request.kind)
        if handler is None:
            return DispatchOutcome.missing()

        if request.kind is NotificationKind.TRANSFER:
            args = (request.initiator, request.counterparty, request.amount, request.data)
        else:
            args = (request.counterparty, request.amount, request.data)

        try:
            with self.state.call_frame(caller, request.target):
                value = handler(*args)
        # Untrusted code: every failure mode, including depth and recursion
        # exhaustion, is a rejection.
        except Exception as e:
            logger.warning(
                f"[{request.kind.value}] handler at {request.target} raised "
                f"{type(e).__name__}: {e}"
            )
            return DispatchOutcome.failed(e)

        return DispatchOutcome.returned(value)
