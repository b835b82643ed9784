"""
qRC-1363 Receivers

Counterparty-side contracts:
  - QRC1363Receiver : base for contracts notified on transfers
  - QRC1363Spender  : base for contracts notified on approvals
  - QRC1363Holder   : accepts every notification
  - QRC1363Payable  : accepts notifications from one token only and
                      exposes overridable hooks
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..crypto.address import normalize_address
from ..exceptions import ContractError
from ..logger import get_logger
from ..tokens.interfaces import (
    APPROVAL_RECEIVED_SENTINEL,
    IERC1363_RECEIVER_ID,
    IERC1363_SPENDER_ID,
    TRANSFER_RECEIVED_SENTINEL,
    supports_interface,
)
from .state import Contract

logger = get_logger(__name__)


class PayableError(ContractError):
    """Raised by a payable contract refusing a notification."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TokensReceivedEvent:
    """Recorded by a payable contract when it accepts a transfer."""
    token: str
    operator: str
    sender: str
    amount: int
    data: bytes
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "TokensReceived",
            "token": self.token,
            "operator": self.operator,
            "from": self.sender,
            "value": str(self.amount),
            "data": "0x" + self.data.hex(),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class TokensApprovedEvent:
    """Recorded by a payable contract when it accepts an approval."""
    token: str
    owner: str
    amount: int
    data: bytes
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "TokensApproved",
            "token": self.token,
            "owner": self.owner,
            "value": str(self.amount),
            "data": "0x" + self.data.hex(),
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  RECEIVER INTERFACES
# ══════════════════════════════════════════════════════════════════════

class QRC1363Receiver(Contract, ABC):
    """Contract that can be notified of incoming transfers."""

    INTERFACES = (IERC1363_RECEIVER_ID,)

    def supports_interface(self, iid) -> bool:
        return supports_interface(self, iid)

    @abstractmethod
    def on_transfer_received(
        self, operator: str, sender: str, amount: int, data: bytes
    ) -> Any:
        """Return TRANSFER_RECEIVED_SENTINEL to accept the transfer."""


class QRC1363Spender(Contract, ABC):
    """Contract that can be notified of approvals granted to it."""

    INTERFACES = (IERC1363_SPENDER_ID,)

    def supports_interface(self, iid) -> bool:
        return supports_interface(self, iid)

    @abstractmethod
    def on_approval_received(self, owner: str, amount: int, data: bytes) -> Any:
        """Return APPROVAL_RECEIVED_SENTINEL to accept the approval."""


# ══════════════════════════════════════════════════════════════════════
#  HOLDER
# ══════════════════════════════════════════════════════════════════════

class QRC1363Holder(QRC1363Receiver, QRC1363Spender):
    """Accepts any transfer or approval from any token."""

    def on_transfer_received(self, operator, sender, amount, data):
        return TRANSFER_RECEIVED_SENTINEL

    def on_approval_received(self, owner, amount, data):
        return APPROVAL_RECEIVED_SENTINEL


# ══════════════════════════════════════════════════════════════════════
#  PAYABLE
# ══════════════════════════════════════════════════════════════════════

class QRC1363Payable(QRC1363Receiver, QRC1363Spender):
    """
    Contract paid in exactly one qRC-1363 token.

    Notifications whose ``msg_sender`` is not the accepted token are
    refused by raising, which makes the token revert the operation.
    Subclasses react to payments by overriding ``_transfer_received``
    and ``_approval_received``; raising from a hook also refuses.
    """

    def __init__(self, accepted_token: str):
        self.accepted_token = normalize_address(accepted_token)
        self.received: List[Any] = []

    def _require_accepted_token(self) -> str:
        token = self.msg_sender
        if token is None or normalize_address(token) != self.accepted_token:
            raise PayableError(f"{token} is not the accepted token {self.accepted_token}")
        return token

    def on_transfer_received(self, operator, sender, amount, data):
        token = self._require_accepted_token()
        self._transfer_received(operator, sender, amount, data)
        self.received.append(TokensReceivedEvent(
            token=token, operator=operator, sender=sender, amount=amount, data=data,
        ))
        logger.debug(f"{self.address} received {amount} from {sender} (operator={operator})")
        return TRANSFER_RECEIVED_SENTINEL

    def on_approval_received(self, owner, amount, data):
        token = self._require_accepted_token()
        self._approval_received(owner, amount, data)
        self.received.append(TokensApprovedEvent(
            token=token, owner=owner, amount=amount, data=data,
        ))
        logger.debug(f"{self.address} approved for {amount} by {owner}")
        return APPROVAL_RECEIVED_SENTINEL

    def _transfer_received(self, operator: str, sender: str, amount: int, data: bytes) -> None:
        pass

    def _approval_received(self, owner: str, amount: int, data: bytes) -> None:
        pass
