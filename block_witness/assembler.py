"""
Witness Assembler
^^^^^^^^^^^^^^^^^

Fetch a block, its predecessor, the receipts of its transactions and the state and proofs of
every account it touches, and combine them into a single `BlockWitness`.
"""

import logging
import threading
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Mapping, Sequence, Set, Tuple, TypeVar

from witness_base_types import Address, Hash
from witness_rpc import (
    AccountProof,
    Block,
    BlockNumberType,
    RpcClient,
    Transaction,
    TransactionReceipt,
)

from .address_collector import AddressCollector
from .block_fetcher import BlockFetcher
from .exceptions import (
    AssemblyCancelledError,
    GenesisBoundaryError,
    InconsistentBlockError,
    InconsistentSetError,
    ReceiptMismatchError,
)
from .proof_fetcher import ProofFetcher
from .state_fetcher import StateSnapshotFetcher
from .types import AccountState, BlockWitness

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 8


class WitnessAssembler:
    """
    Assembles the witness of a block.

    Receipts, account states and proofs are fetched concurrently by at most `max_workers`
    threads. The first failing fetch aborts the assembly: fetches that have not started are
    cancelled, running ones are awaited and the error is raised. A partial witness is never
    returned.
    """

    rpc: RpcClient
    block_fetcher: BlockFetcher
    address_collector: AddressCollector
    state_fetcher: StateSnapshotFetcher
    proof_fetcher: ProofFetcher
    max_workers: int
    storage_keys: Dict[Address, List[Hash]]

    def __init__(
        self,
        rpc: RpcClient,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        batched: bool = True,
        strict: bool = False,
        storage_keys: Mapping[Address, Sequence[Hash]] | None = None,
    ):
        """
        Initialize the assembler.

        :param rpc: Client used for every remote call.
        :param max_workers: Maximum number of concurrent remote calls.
        :param batched: Fetch the five state values of an account in a single batch.
        :param strict: Fail when the node returns no value for a state read instead of
            recording it as unknown.
        :param storage_keys: Storage slots to prove, per account. Accounts not listed get
            account-only proofs.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.rpc = rpc
        self.block_fetcher = BlockFetcher(rpc)
        self.address_collector = AddressCollector()
        self.state_fetcher = StateSnapshotFetcher(rpc, batched=batched, strict=strict)
        self.proof_fetcher = ProofFetcher(rpc)
        self.max_workers = max_workers
        self.storage_keys = {
            Address(address): list(keys) for address, keys in (storage_keys or {}).items()
        }
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """
        Cancel the assembly in progress, and any later one.

        Safe to call from any thread. Fetches that have not started are skipped and
        `assemble` raises `AssemblyCancelledError`.
        """
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """Whether `cancel` was called."""
        return self._cancelled.is_set()

    def assemble(self, block_number: BlockNumberType | str = "latest") -> BlockWitness:
        """Assemble the witness of the block at `block_number` (a number or a tag)."""
        self._check_cancelled()
        current = self.block_fetcher.fetch(block_number, full_transactions=True)
        if current.number == 0:
            raise GenesisBoundaryError(current.hash)

        # State is read at the concrete height of the fetched block, never at a tag that
        # could move while the witness is assembled.
        self._check_cancelled()
        previous = self.block_fetcher.fetch(current.number - 1, full_transactions=False)
        self._check_parent(current, previous)

        addresses = self.address_collector.collect(current)
        transactions = current.full_transactions()

        receipts, states, proofs = self._fetch_all(
            transactions, sorted(addresses), previous.number, current.number
        )
        # Fetches already running when `cancel` is called still complete.
        self._check_cancelled()
        self._check_receipts(transactions, receipts)

        witness = BlockWitness(
            block_header=current,
            prev_block_header=previous,
            transactions=transactions,
            receipts=receipts,
            # Before and after values live side by side in a single `AccountState`, both maps
            # hold the same value.
            pre_state=states,
            post_state=dict(states),
            merkle_proofs=proofs,
        )
        self._check_key_sets(witness, addresses)
        unknown = sum(len(state.unknown_fields()) for state in states.values())
        logger.info(
            "assembled witness of block %s: %d transactions, %d accounts, %d unknown values",
            current.number,
            len(transactions),
            len(addresses),
            unknown,
        )
        return witness

    def _fetch_all(
        self,
        transactions: List[Transaction],
        addresses: List[Address],
        prev_block_number: int,
        curr_block_number: int,
    ) -> Tuple[
        List[TransactionReceipt],
        Dict[Address, AccountState],
        Dict[Address, Tuple[AccountProof, AccountProof]],
    ]:
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="witness"
        ) as executor:

            def submit(fn: Callable[..., T], *args) -> "Future[T]":
                return executor.submit(self._run_unless_cancelled, fn, *args)

            receipt_futures = [
                submit(self._fetch_receipt, transaction) for transaction in transactions
            ]
            state_futures = {
                address: submit(
                    self.state_fetcher.fetch, address, prev_block_number, curr_block_number
                )
                for address in addresses
            }
            proof_futures = {
                address: (
                    submit(
                        self.proof_fetcher.fetch,
                        address,
                        self.storage_keys.get(address, []),
                        prev_block_number,
                    ),
                    submit(
                        self.proof_fetcher.fetch,
                        address,
                        self.storage_keys.get(address, []),
                        curr_block_number,
                    ),
                )
                for address in addresses
            }

            futures: List[Future] = [*receipt_futures, *state_futures.values()]
            for prev_proof, curr_proof in proof_futures.values():
                futures += [prev_proof, curr_proof]
            logger.debug("waiting for %d fetches", len(futures))

            try:
                for future in as_completed(futures):
                    future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        receipts = [future.result() for future in receipt_futures]
        states = {address: future.result() for address, future in state_futures.items()}
        proofs = {
            address: (prev_proof.result(), curr_proof.result())
            for address, (prev_proof, curr_proof) in proof_futures.items()
        }
        return receipts, states, proofs

    def _run_unless_cancelled(self, fn: Callable[..., T], *args) -> T:
        self._check_cancelled()
        return fn(*args)

    def _check_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise AssemblyCancelledError()

    def _fetch_receipt(self, transaction: Transaction) -> TransactionReceipt:
        receipt = self.rpc.get_transaction_receipt(transaction.hash)
        if receipt.transaction_hash != transaction.hash:
            raise ReceiptMismatchError(
                transaction_hash=transaction.hash, receipt_hashes=[receipt.transaction_hash]
            )
        return receipt

    @staticmethod
    def _check_parent(current: Block, previous: Block) -> None:
        if previous.number != current.number - 1 or previous.hash != current.parent_hash:
            raise InconsistentBlockError(
                expected_number=current.number - 1,
                expected_hash=current.parent_hash,
                number=previous.number,
                hash=previous.hash,
            )

    @staticmethod
    def _check_receipts(
        transactions: List[Transaction], receipts: List[TransactionReceipt]
    ) -> None:
        receipt_counts = Counter(receipt.transaction_hash for receipt in receipts)
        for transaction in transactions:
            if receipt_counts[transaction.hash] != 1:
                raise ReceiptMismatchError(
                    transaction_hash=transaction.hash,
                    receipt_hashes=[transaction.hash] * receipt_counts[transaction.hash],
                )

    @staticmethod
    def _check_key_sets(witness: BlockWitness, addresses: Set[Address]) -> None:
        key_sets = {
            "addresses": set(addresses),
            "pre_state": set(witness.pre_state),
            "post_state": set(witness.post_state),
            "merkle_proofs": set(witness.merkle_proofs),
        }
        if any(keys != key_sets["addresses"] for keys in key_sets.values()):
            raise InconsistentSetError(key_sets=key_sets)
