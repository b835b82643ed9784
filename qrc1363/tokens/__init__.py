"""
qRC-1363 Token Standard

Provides:
  - QRC20Token          : journaled fungible-token ledger
  - QRC1363Token        : payable token (transfer/approve-then-notify)
  - CallbackDispatcher  : counterparty notification
  - AcceptanceValidator : sentinel check
  - CapabilityProber    : declared-interface lookup
"""

from .interfaces import (
    APPROVAL_RECEIVED_SENTINEL,
    IERC165_ID,
    IERC20_ID,
    IERC1363_ID,
    IERC1363_RECEIVER_ID,
    IERC1363_SPENDER_ID,
    INVALID_INTERFACE_ID,
    TRANSFER_RECEIVED_SENTINEL,
    CapabilityProber,
    InterfaceDeclaration,
    NotificationKind,
    supports_interface,
)
from .qrc20 import (
    QRC20Token,
    QRC20TransferEvent,
    QRC20ApprovalEvent,
    QRC20Error,
    InsufficientBalanceError,
    InsufficientAllowanceError,
    InvalidTargetError,
)
from .dispatch import (
    CallbackDispatcher,
    DispatchOutcome,
    DispatchStatus,
    NotificationRequest,
)
from .validation import AcceptanceValidator, Verdict
from .qrc1363 import QRC1363Token, CallbackRejectedError

__all__ = [
    # Identifiers
    "APPROVAL_RECEIVED_SENTINEL",
    "TRANSFER_RECEIVED_SENTINEL",
    "IERC165_ID",
    "IERC20_ID",
    "IERC1363_ID",
    "IERC1363_RECEIVER_ID",
    "IERC1363_SPENDER_ID",
    "INVALID_INTERFACE_ID",
    "CapabilityProber",
    "InterfaceDeclaration",
    "NotificationKind",
    "supports_interface",
    # Ledger
    "QRC20Token",
    "QRC20TransferEvent",
    "QRC20ApprovalEvent",
    "QRC20Error",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "InvalidTargetError",
    # Notification
    "CallbackDispatcher",
    "DispatchOutcome",
    "DispatchStatus",
    "NotificationRequest",
    "AcceptanceValidator",
    "Verdict",
    # Payable token
    "QRC1363Token",
    "CallbackRejectedError",
]
