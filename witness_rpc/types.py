"""Types used in the RPC module for the `eth` namespace responses."""

from typing import Any, Dict, List

from pydantic import Field

from witness_base_types import Address, Bytes, CamelModel, Hash, HexNumber, WitnessBaseModel


class Transaction(CamelModel):
    """A full transaction body, as returned inside a block fetched with full transactions."""

    hash: Hash
    sender: Address = Field(..., alias="from")
    # `None` denotes a contract creation.
    to: Address | None = None
    input: Bytes = Bytes()

    nonce: HexNumber | None = None
    value: HexNumber | None = None
    gas: HexNumber | None = None
    block_number: HexNumber | None = None


TransactionOrHash = Transaction | Hash
"""
Element of a block's transaction list: a full body when the block was requested with full
transactions, otherwise only the transaction hash.
"""


class Block(CamelModel):
    """Represents the response of an `eth_getBlockByNumber` request."""

    number: HexNumber
    hash: Hash
    parent_hash: Hash
    state_root: Hash
    transactions: List[TransactionOrHash] = Field(default_factory=list)

    timestamp: HexNumber | None = None
    miner: Address | None = None
    gas_limit: HexNumber | None = None
    gas_used: HexNumber | None = None
    transactions_root: Hash | None = None
    receipts_root: Hash | None = None
    base_fee_per_gas: HexNumber | None = None

    def full_transactions(self) -> List[Transaction]:
        """Return the transactions of the block that are present as full bodies."""
        transactions: List[Transaction] = []
        for tx in self.transactions:
            match tx:
                case Transaction():
                    transactions.append(tx)
                case Hash():
                    continue
        return transactions


class TransactionReceipt(CamelModel):
    """Represents the response of an `eth_getTransactionReceipt` request."""

    transaction_hash: Hash
    gas_used: HexNumber
    # Receipts of pre-Byzantium blocks carry the intermediate state `root` instead.
    status: HexNumber | None = None
    root: Hash | None = None
    logs: List[Dict[str, Any]] = Field(default_factory=list)
    contract_address: Address | None = None


class StorageProof(WitnessBaseModel):
    """Merkle proof of a single storage slot of an account."""

    key: Bytes
    value: HexNumber
    proof: List[Bytes] = Field(default_factory=list)


class AccountProof(CamelModel):
    """Represents the response of an `eth_getProof` request."""

    address: Address
    balance: HexNumber
    nonce: HexNumber
    code_hash: Hash
    storage_hash: Hash
    account_proof: List[Bytes] = Field(default_factory=list)
    storage_proof: List[StorageProof] = Field(default_factory=list)


class RPCCall(WitnessBaseModel):
    """A single request of a JSON-RPC batch."""

    method: str
    params: List[Any] = Field(default_factory=list)
