"""
qRC-1363 Payable Token Package

Core imports are lazily loaded so that importing a submodule does not pull
in the whole engine. For direct module access, import from submodules:

    from qrc1363.tokens import QRC1363Token
    from qrc1363.contracts import ContractState, QRC1363Holder
    from qrc1363.config import load_config
"""

__version__ = "1.0.0"

_LAZY = {
    'QRC1363Token': ('.tokens.qrc1363', 'QRC1363Token'),
    'CallbackRejectedError': ('.tokens.qrc1363', 'CallbackRejectedError'),
    'QRC20Token': ('.tokens.qrc20', 'QRC20Token'),
    'ContractState': ('.contracts.state', 'ContractState'),
    'load_config': ('.config.loader', 'load_config'),
}


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name in _LAZY:
        import importlib
        module_name, attr = _LAZY[name]
        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr)
    raise AttributeError(f"module 'qrc1363' has no attribute {name!r}")

__all__ = list(_LAZY)
