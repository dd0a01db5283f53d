"""JSON-RPC client used to extract block witnesses from an Ethereum node."""

from .exceptions import DecodeError, NotFoundError, RpcError, TransportError, WitnessRPCError
from .rpc import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RPC_URL,
    DEFAULT_TIMEOUT,
    BlockNumberType,
    EthRPC,
    RpcClient,
    to_block_identifier,
)
from .types import (
    AccountProof,
    Block,
    RPCCall,
    StorageProof,
    Transaction,
    TransactionOrHash,
    TransactionReceipt,
)

__all__ = [
    "AccountProof",
    "Block",
    "BlockNumberType",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RPC_URL",
    "DEFAULT_TIMEOUT",
    "DecodeError",
    "EthRPC",
    "NotFoundError",
    "RPCCall",
    "RpcClient",
    "RpcError",
    "StorageProof",
    "Transaction",
    "TransactionOrHash",
    "TransactionReceipt",
    "TransportError",
    "WitnessRPCError",
    "to_block_identifier",
]
