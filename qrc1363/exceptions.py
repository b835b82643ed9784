"""
qRC-1363 Exceptions

Package-wide exception classes. Ledger and coordinator errors subclass
``QRC1363Exception`` from their own modules.
"""


class QRC1363Exception(Exception):
    """Base exception for qRC-1363."""
    pass


class InvalidAddressError(QRC1363Exception):
    """Invalid address format."""
    pass


class ContractError(QRC1363Exception):
    """Contract deployment or lookup error."""
    pass


class CallDepthExceededError(ContractError):
    """Nested call depth exceeded the configured limit."""
    pass


class ConfigurationError(QRC1363Exception):
    """Configuration error."""
    pass
