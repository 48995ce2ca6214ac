"""
Data access modules: parameter readers, RPC client and batch loader.
"""

from .rpc_client import EthereumRPCClient, RPCError
from .state_readers import InMemoryParameterReader, RPCParameterReader
from .loader import PayloadLoader

__all__ = [
    'EthereumRPCClient',
    'RPCError',
    'InMemoryParameterReader',
    'RPCParameterReader',
    'PayloadLoader',
]
