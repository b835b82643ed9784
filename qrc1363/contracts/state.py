"""
Contract State

Tracks which addresses carry executable code and the active call stack.
Contracts here are Python objects deployed at CREATE-style addresses; a
plain holder account is simply an address with no deployed contract.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from ..constants import max_call_depth as default_max_call_depth
from ..crypto.address import is_zero_address, normalize_address
from ..crypto.contract import generate_contract_address
from ..exceptions import CallDepthExceededError, ContractError, InvalidAddressError
from ..logger import get_logger

logger = get_logger(__name__)


class Contract:
    """
    Base class for anything deployed into a ContractState.

    Subclasses list the ERC-165 ids they implement in ``INTERFACES``.
    """

    INTERFACES: tuple = ()

    address: Optional[str] = None
    state: Optional["ContractState"] = None

    @property
    def msg_sender(self) -> Optional[str]:
        """Caller of the frame currently executing (None outside a call)."""
        if self.state is None:
            return None
        return self.state.msg_sender

    def __repr__(self) -> str:
        return f"<{type(self).__name__} at {self.address}>"


@dataclass(frozen=True)
class CallFrame:
    caller: str
    callee: str


class ContractState:
    """
    Registry of deployed code plus the synchronous call stack.

    Responsibilities:
    - Contract deployment at deterministic addresses
    - Code-presence checks (holder vs contract)
    - Call frames exposing ``msg_sender`` to the running handler
    - Nesting limit bounding how deep callbacks may re-enter
    """

    def __init__(self, max_call_depth: Optional[int] = None):
        if max_call_depth is None:
            max_call_depth = default_max_call_depth()
        if max_call_depth < 1:
            raise ContractError("max_call_depth must be >= 1")
        self.max_call_depth = max_call_depth

        self._code: Dict[str, Contract] = {}
        self._nonces: Dict[str, int] = {}
        self._local = threading.local()

    @classmethod
    def from_config(cls, config) -> "ContractState":
        """Build a state from a loaded ``QRC1363Config``."""
        return cls(max_call_depth=config.callbacks.max_call_depth)

    # ── Deployment ────────────────────────────────────────────────────

    def deploy(self, contract: Contract, deployer: str) -> str:
        """
        Deploy *contract* on behalf of *deployer*.

        Returns:
            The contract address (keccak256(rlp([deployer, nonce]))[-20:])
        """
        if contract.state is not None:
            raise ContractError(f"{contract!r} is already deployed")

        deployer = normalize_address(deployer)
        nonce = self._nonces.get(deployer, 0)
        address = generate_contract_address(deployer, nonce)
        self._nonces[deployer] = nonce + 1

        if address in self._code:
            raise ContractError(f"Address collision at {address}")

        contract.address = address
        contract.state = self
        self._code[address] = contract
        logger.info(f"Deployed {type(contract).__name__} at {address} (deployer={deployer})")
        return address

    def nonce_of(self, deployer: str) -> int:
        return self._nonces.get(normalize_address(deployer), 0)

    # ── Lookup ────────────────────────────────────────────────────────

    def get_contract(self, address: str) -> Optional[Contract]:
        try:
            address = normalize_address(address)
        except InvalidAddressError:
            return None
        return self._code.get(address)

    def has_code(self, address: str) -> bool:
        """True if *address* holds executable code (is not a plain holder)."""
        if is_zero_address(address):
            return False
        return self.get_contract(address) is not None

    # ── Call stack ────────────────────────────────────────────────────

    @property
    def _stack(self) -> List[CallFrame]:
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def msg_sender(self) -> Optional[str]:
        stack = self._stack
        return stack[-1].caller if stack else None

    @contextmanager
    def call_frame(self, caller: str, callee: str) -> Iterator[CallFrame]:
        """
        Enter a nested call from *caller* into *callee*.

        Raises:
            CallDepthExceededError: when the nesting limit would be exceeded
        """
        stack = self._stack
        if len(stack) >= self.max_call_depth:
            raise CallDepthExceededError(
                f"Call depth {len(stack) + 1} exceeds limit {self.max_call_depth}"
            )
        frame = CallFrame(caller=caller, callee=callee)
        stack.append(frame)
        try:
            yield frame
        finally:
            stack.pop()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contracts": {addr: type(c).__name__ for addr, c in self._code.items()},
            "maxCallDepth": self.max_call_depth,
        }

    def __repr__(self) -> str:
        return f"<ContractState contracts={len(self._code)}>"
