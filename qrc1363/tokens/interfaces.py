"""
qRC-1363 Interfaces — selectors, sentinels and capability declarations

Every identifier here is derived from canonical function signatures, so two
independent implementations agree on them without coordination:

  - TRANSFER_RECEIVED_SENTINEL / APPROVAL_RECEIVED_SENTINEL : values a
    compliant counterparty returns to accept a notification
  - IERC165 / IERC20 / IERC1363 / receiver / spender interface ids (ERC-165)
  - InterfaceDeclaration : per-contract-type table of claimed interfaces
  - CapabilityProber     : resolves the handler a counterparty declares
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, FrozenSet, Optional, Union

from ..crypto.hashing import function_selector, interface_id
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  SIGNATURES
# ══════════════════════════════════════════════════════════════════════

ERC165_SIGNATURES = (
    "supportsInterface(bytes4)",
)

ERC20_SIGNATURES = (
    "totalSupply()",
    "balanceOf(address)",
    "transfer(address,uint256)",
    "transferFrom(address,address,uint256)",
    "approve(address,uint256)",
    "allowance(address,address)",
)

# The three notify operations, each with and without the auxiliary payload
ERC1363_SIGNATURES = (
    "transferAndCall(address,uint256)",
    "transferAndCall(address,uint256,bytes)",
    "transferFromAndCall(address,address,uint256)",
    "transferFromAndCall(address,address,uint256,bytes)",
    "approveAndCall(address,uint256)",
    "approveAndCall(address,uint256,bytes)",
)

ON_TRANSFER_RECEIVED_SIGNATURE = "onTransferReceived(address,address,uint256,bytes)"
ON_APPROVAL_RECEIVED_SIGNATURE = "onApprovalReceived(address,uint256,bytes)"


# ══════════════════════════════════════════════════════════════════════
#  IDENTIFIERS
# ══════════════════════════════════════════════════════════════════════

TRANSFER_RECEIVED_SENTINEL: bytes = function_selector(ON_TRANSFER_RECEIVED_SIGNATURE)
APPROVAL_RECEIVED_SENTINEL: bytes = function_selector(ON_APPROVAL_RECEIVED_SIGNATURE)

IERC165_ID: bytes = interface_id(ERC165_SIGNATURES)
IERC20_ID: bytes = interface_id(ERC20_SIGNATURES)
IERC1363_ID: bytes = interface_id(ERC1363_SIGNATURES)
IERC1363_RECEIVER_ID: bytes = interface_id((ON_TRANSFER_RECEIVED_SIGNATURE,))
IERC1363_SPENDER_ID: bytes = interface_id((ON_APPROVAL_RECEIVED_SIGNATURE,))

# ERC-165 reserves this value; no contract may claim it
INVALID_INTERFACE_ID: bytes = b"\xff\xff\xff\xff"


def as_interface_id(value: Union[bytes, bytearray, int, str]) -> bytes:
    """
    Coerce an interface identifier to its 4-byte form.

    Accepts 4 raw bytes, an int in [0, 2**32) or a 0x-prefixed hex string.
    """
    if isinstance(value, bool):
        raise TypeError("Interface id cannot be a bool")
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 4:
            raise ValueError(f"Interface id must be 4 bytes, got {len(value)}")
        return bytes(value)
    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"Interface id out of range: {value:#x}")
        return value.to_bytes(4, "big")
    if isinstance(value, str):
        raw = value[2:] if value.lower().startswith("0x") else value
        if len(raw) != 8:
            raise ValueError(f"Interface id must be 8 hex chars: {value!r}")
        return bytes.fromhex(raw)
    raise TypeError(f"Unsupported interface id type: {type(value).__name__}")


# ══════════════════════════════════════════════════════════════════════
#  NOTIFICATION KINDS
# ══════════════════════════════════════════════════════════════════════

class NotificationKind(Enum):
    """Operation kind a notification belongs to."""
    TRANSFER = "transfer-notify"
    APPROVAL = "approve-notify"

    @property
    def sentinel(self) -> bytes:
        return _KIND_SPECS[self].sentinel

    @property
    def interface_id(self) -> bytes:
        return _KIND_SPECS[self].interface_id

    @property
    def handler_name(self) -> str:
        return _KIND_SPECS[self].handler_name


@dataclass(frozen=True)
class _KindSpec:
    sentinel: bytes
    interface_id: bytes
    handler_name: str


_KIND_SPECS = {
    NotificationKind.TRANSFER: _KindSpec(
        TRANSFER_RECEIVED_SENTINEL, IERC1363_RECEIVER_ID, "on_transfer_received"
    ),
    NotificationKind.APPROVAL: _KindSpec(
        APPROVAL_RECEIVED_SENTINEL, IERC1363_SPENDER_ID, "on_approval_received"
    ),
}


# ══════════════════════════════════════════════════════════════════════
#  INTERFACE DECLARATION
# ══════════════════════════════════════════════════════════════════════

class InterfaceDeclaration:
    """
    Process-wide table of the interfaces a contract type claims.

    A type declares interfaces through an ``INTERFACES`` class attribute;
    declarations accumulate along the MRO, so a subclass of a receiver is
    still a receiver. IERC165 itself is implied for every declaring type.
    """

    @staticmethod
    @lru_cache(maxsize=None)
    def for_type(contract_type: type) -> FrozenSet[bytes]:
        declared = set()
        for klass in contract_type.__mro__:
            for iid in vars(klass).get("INTERFACES", ()):
                declared.add(as_interface_id(iid))
        if declared:
            declared.add(IERC165_ID)
        declared.discard(INVALID_INTERFACE_ID)
        return frozenset(declared)

    @classmethod
    def of(cls, obj: Any) -> FrozenSet[bytes]:
        return cls.for_type(type(obj))


def supports_interface(obj: Any, iid: Union[bytes, int, str]) -> bool:
    """ERC-165 query answered from the declaration table."""
    key = as_interface_id(iid)
    if key == INVALID_INTERFACE_ID:
        return False
    return key in InterfaceDeclaration.of(obj)


# ══════════════════════════════════════════════════════════════════════
#  CAPABILITY PROBER
# ══════════════════════════════════════════════════════════════════════

class CapabilityProber:
    """
    Decides whether a counterparty can be notified for a given kind.

    The decision never invokes counterparty code: a handler is returned
    only when the counterparty's type declares the kind's receiver
    interface and actually defines a callable handler for it.
    """

    @staticmethod
    def supports_protocol(obj: Any, iid: Union[bytes, int, str] = IERC1363_ID) -> bool:
        return supports_interface(obj, iid)

    @staticmethod
    def handler_for(contract: Any, kind: NotificationKind) -> Optional[Callable[..., Any]]:
        if contract is None:
            return None
        if kind.interface_id not in InterfaceDeclaration.of(contract):
            logger.debug(
                f"{type(contract).__name__} does not declare 0x{kind.interface_id.hex()}"
            )
            return None
        handler = getattr(contract, kind.handler_name, None)
        if not callable(handler):
            logger.warning(
                f"{type(contract).__name__} declares 0x{kind.interface_id.hex()} "
                f"but has no callable {kind.handler_name}"
            )
            return None
        return handler
