"""
qRC-1363 Constants

This module consolidates the runtime settings loaded from ``.env`` and the
protocol constants shared by the ledger, the dispatcher and the receivers.
Selector and interface-id constants are derived from signatures and live in
``qrc1363.tokens.interfaces``.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LEDGER_DEFAULTS = {
    'QRC1363_MAX_CALL_DEPTH':          '64',
    'QRC1363_CONFIG':                  'config.toml',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# LEDGER PARAMETERS
# ==================================================================================
UINT256_MAX = 2**256 - 1

# Reserved null identity: never a valid recipient, spender, owner or sender
ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'

QRC20_DEFAULT_DECIMALS = 18
QRC20_MAX_DECIMALS = 18
QRC20_MAX_SUPPLY = 10**9 * 10**18  # 1B whole tokens at 18 decimals

# An allowance at this value is never decremented by transferFrom
QRC20_INFINITE_ALLOWANCE = UINT256_MAX


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LEDGER_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    # Case-insensitive membership check
    if s.casefold() in {"true", "false"}:
        # ast.literal_eval expects "True"/"False"
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    # Parses only boolean-literals. Leaves other values untouched.
    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    # Wraps based on parsed value type.
    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        # Preserves the original raw string for ConfigString storage.
        namespace[key] = ConfigString(value_raw, default_val)


def max_call_depth() -> int:
    """Configured callback nesting limit as an int (falls back to the default)."""
    try:
        return int(QRC1363_MAX_CALL_DEPTH)  # noqa: F821 - injected above
    except ValueError:
        return int(QRC1363_MAX_CALL_DEPTH.default())  # noqa: F821
