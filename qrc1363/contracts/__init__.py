"""
qRC-1363 Contract Environment

Deployed-code registry, call stack and counterparty contracts.
"""

from .state import CallFrame, Contract, ContractState
from .receivers import (
    PayableError,
    QRC1363Holder,
    QRC1363Payable,
    QRC1363Receiver,
    QRC1363Spender,
    TokensApprovedEvent,
    TokensReceivedEvent,
)

__all__ = [
    "CallFrame",
    "Contract",
    "ContractState",
    "PayableError",
    "QRC1363Holder",
    "QRC1363Payable",
    "QRC1363Receiver",
    "QRC1363Spender",
    "TokensApprovedEvent",
    "TokensReceivedEvent",
]
