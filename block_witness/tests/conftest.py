"""Fixtures for the witness assembly tests: an in-memory node implementing `RpcClient`."""

import threading
import time
from typing import Any, Callable, Dict, List, Sequence, Set, Tuple

import pytest

from witness_base_types import Address, Bytes, Hash, HexNumber
from witness_rpc import (
    AccountProof,
    Block,
    BlockNumberType,
    NotFoundError,
    RPCCall,
    RpcClient,
    RpcError,
    StorageProof,
    Transaction,
    TransactionReceipt,
)

ADDRESS_AA = Address("0x" + "aa" * 20)
ADDRESS_BB = Address("0x" + "bb" * 20)
ADDRESS_CC = Address("0x" + "cc" * 20)


def block_hash(number: int) -> Hash:
    """Return the hash of the fake block at `number`."""
    return Hash(0xB10C0000 + number)


def tx_hash(index: int) -> Hash:
    """Return the hash of the fake transaction with the given index."""
    return Hash(0x7000 + index)


def make_transaction(index: int, sender: Address, to: Address | None) -> Transaction:
    """Return a full transaction."""
    return Transaction(hash=tx_hash(index), sender=sender, to=to, input=Bytes("0x"))


def make_block(number: int, transactions: Sequence[Transaction | Hash] = ()) -> Block:
    """Return a block whose parent is the fake block at `number - 1`."""
    return Block(
        number=HexNumber(number),
        hash=block_hash(number),
        parent_hash=block_hash(number - 1) if number > 0 else Hash(0),
        state_root=Hash(0x5700 + number),
        transactions=list(transactions),
    )


def parse_height(block_number: BlockNumberType | str, latest: int) -> int:
    """Resolve a block number, hex string or tag to a height."""
    if isinstance(block_number, int):
        return block_number
    if block_number in ("latest", "pending"):
        return latest
    if block_number == "earliest":
        return 0
    return int(block_number, 16)


class FakeNode(RpcClient):
    """
    In-memory node.

    Balances grow with the height and nonces equal the height, so that the before and after
    values of every account differ. Every call is recorded in `calls`.
    """

    def __init__(
        self, blocks: List[Block], receipts: Dict[Hash, TransactionReceipt] | None = None
    ):
        self.blocks: Dict[int, Block] = {int(block.number): block for block in blocks}
        self.latest = max(self.blocks)
        if receipts is None:
            receipts = {
                tx.hash: TransactionReceipt(
                    transaction_hash=tx.hash, gas_used=HexNumber(21000), status=HexNumber(1)
                )
                for block in blocks
                for tx in block.full_transactions()
            }
        self.receipts = receipts
        self.missing_state: Set[Tuple[str, Address, int]] = set()
        self.failing: Dict[Tuple[str, Address | Hash, int], RpcError] = {}
        self.hooks: Dict[str, Callable[[], None]] = {}
        self.call_delay = 0.0
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.batches: List[List[RPCCall]] = []
        self.active_calls = 0
        self.peak_active_calls = 0
        self._lock = threading.Lock()

    def _record(self, method: str, *params: Any) -> None:
        with self._lock:
            self.calls.append((method, params))
            self.active_calls += 1
            self.peak_active_calls = max(self.peak_active_calls, self.active_calls)
        try:
            if method in self.hooks:
                self.hooks[method]()
            if self.call_delay:
                time.sleep(self.call_delay)
        finally:
            with self._lock:
                self.active_calls -= 1

    def methods_called(self) -> List[str]:
        """Return the names of the methods called, in call order."""
        return [method for method, _ in self.calls]

    def _fail_if_requested(self, method: str, key: Address | Hash, height: int, *params: Any):
        error = self.failing.get((method, key, height))
        if error is not None:
            raise RpcError(error.code, error.message, method=method, params=params)

    def get_block_by_number(
        self, block_number: BlockNumberType = "latest", full_txs: bool = True
    ) -> Block:
        self._record("eth_getBlockByNumber", block_number, full_txs)
        height = parse_height(block_number, self.latest)
        if height not in self.blocks:
            raise NotFoundError(
                "node returned null", method="eth_getBlockByNumber", params=(block_number,)
            )
        block = self.blocks[height]
        if full_txs:
            return block
        return block.model_copy(
            update={
                "transactions": [
                    tx.hash if isinstance(tx, Transaction) else tx for tx in block.transactions
                ]
            }
        )

    def get_transaction_receipt(self, transaction_hash: Hash) -> TransactionReceipt:
        self._record("eth_getTransactionReceipt", transaction_hash)
        self._fail_if_requested("eth_getTransactionReceipt", transaction_hash, 0, transaction_hash)
        if transaction_hash not in self.receipts:
            raise NotFoundError(
                "node returned null",
                method="eth_getTransactionReceipt",
                params=(transaction_hash,),
            )
        return self.receipts[transaction_hash]

    def _state_value(
        self, method: str, address: Address, block_number: BlockNumberType, value: str
    ) -> str | None:
        height = parse_height(block_number, self.latest)
        self._record(method, address, block_number)
        self._fail_if_requested(method, address, height, address, hex(height))
        if (method, address, height) in self.missing_state:
            return None
        return value

    def get_balance(self, address: Address, block_number: BlockNumberType) -> str | None:
        height = parse_height(block_number, self.latest)
        return self._state_value("eth_getBalance", address, block_number, hex(1000 + height))

    def get_transaction_count(
        self, address: Address, block_number: BlockNumberType
    ) -> str | None:
        height = parse_height(block_number, self.latest)
        return self._state_value("eth_getTransactionCount", address, block_number, hex(height))

    def get_code(self, address: Address, block_number: BlockNumberType) -> str | None:
        code = "0x6001600055" if address == ADDRESS_BB else "0x"
        return self._state_value("eth_getCode", address, block_number, code)

    def get_proof(
        self, address: Address, storage_keys: Sequence[Hash], block_number: BlockNumberType
    ) -> AccountProof:
        height = parse_height(block_number, self.latest)
        self._record("eth_getProof", address, list(storage_keys), block_number)
        self._fail_if_requested(
            "eth_getProof", address, height, address, list(storage_keys), hex(height)
        )
        return AccountProof(
            address=address,
            balance=HexNumber(1000 + height),
            nonce=HexNumber(height),
            code_hash=Hash(0xC0DE),
            storage_hash=Hash(0x5707 + height),
            account_proof=[Bytes("0xf871808080"), Bytes(bytes(address))],
            storage_proof=[
                StorageProof(key=Bytes(bytes(key)), value=HexNumber(0), proof=[])
                for key in storage_keys
            ],
        )

    def batch(self, calls: Sequence[RPCCall]) -> List[Any]:
        self.batches.append(list(calls))
        methods = {
            "eth_getBalance": self.get_balance,
            "eth_getTransactionCount": self.get_transaction_count,
            "eth_getCode": self.get_code,
        }
        results: List[Any] = []
        for call in calls:
            try:
                results.append(methods[call.method](*call.params))
            except RpcError as e:
                results.append(e)
        return results


@pytest.fixture
def scenario_a_block() -> Block:
    """
    Block 0x10 with a transfer from 0xaa.. to 0xbb.. and a contract creation sent by 0xbb...
    """
    return make_block(
        0x10,
        [
            make_transaction(1, sender=ADDRESS_AA, to=ADDRESS_BB),
            make_transaction(2, sender=ADDRESS_BB, to=None),
        ],
    )


@pytest.fixture
def node(scenario_a_block: Block) -> FakeNode:
    """Return a node whose chain is made of empty blocks up to the scenario A block."""
    return FakeNode([make_block(n) for n in range(0x10)] + [scenario_a_block])
