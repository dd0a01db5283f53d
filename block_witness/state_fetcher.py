"""Retrieval of account balances, nonces and code around a block."""

import logging
from typing import Any, List

from witness_base_types import Address
from witness_rpc import BlockNumberType, DecodeError, RPCCall, RpcClient, RpcError
from witness_rpc import to_block_identifier

from .types import AccountState

logger = logging.getLogger(__name__)

STATE_FIELDS = ("balance_before", "balance_after", "nonce_before", "nonce_after", "code")


class StateSnapshotFetcher:
    """
    Fetches the balance and nonce of an account at two block heights, and its code at the
    later one.

    Code is only read at the later height, so a witness cannot show code changes within the
    block.
    """

    def __init__(self, rpc: RpcClient, *, batched: bool = True, strict: bool = False):
        """
        Initialize the fetcher.

        :param rpc: Client used for the remote calls.
        :param batched: Send the five reads in a single batch round-trip. Disable for
            endpoints that do not support JSON-RPC batches.
        :param strict: Raise `DecodeError` when the node returns no value for a read, instead
            of recording the empty "unknown" sentinel.
        """
        self.rpc = rpc
        self.batched = batched
        self.strict = strict

    def fetch(
        self,
        address: Address,
        prev_block_number: BlockNumberType,
        curr_block_number: BlockNumberType,
    ) -> AccountState:
        """Fetch the state of `address` before and after the block at `curr_block_number`."""
        prev_block = to_block_identifier(prev_block_number)
        curr_block = to_block_identifier(curr_block_number)
        calls = [
            RPCCall(method="eth_getBalance", params=[address, prev_block]),
            RPCCall(method="eth_getBalance", params=[address, curr_block]),
            RPCCall(method="eth_getTransactionCount", params=[address, prev_block]),
            RPCCall(method="eth_getTransactionCount", params=[address, curr_block]),
            RPCCall(method="eth_getCode", params=[address, curr_block]),
        ]

        results: List[Any]
        if self.batched:
            results = self.rpc.batch(calls)
            if len(results) != len(calls):
                raise DecodeError(
                    f"expected {len(calls)} batch results for {address}, got {len(results)}"
                )
        else:
            results = [
                self.rpc.get_balance(address, prev_block_number),
                self.rpc.get_balance(address, curr_block_number),
                self.rpc.get_transaction_count(address, prev_block_number),
                self.rpc.get_transaction_count(address, curr_block_number),
                self.rpc.get_code(address, curr_block_number),
            ]

        state = AccountState(
            **{
                field: self._to_value(field, call, result)
                for field, call, result in zip(STATE_FIELDS, calls, results)
            }
        )
        logger.debug("fetched state of %s: %r", address, state)
        return state

    def _to_value(self, field: str, call: RPCCall, result: Any) -> str:
        match result:
            case RpcError():
                raise result
            case str() if result.startswith("0x"):
                return result
            case None:
                if self.strict:
                    raise DecodeError(
                        f"no value returned for {field}", method=call.method, params=call.params
                    )
                logger.warning(
                    "%s(%s) returned no value, recording %s as unknown",
                    call.method,
                    ", ".join(str(param) for param in call.params),
                    field,
                )
                return ""
            case _:
                raise DecodeError(
                    f"expected a hex string for {field}, got {result!r}",
                    method=call.method,
                    params=call.params,
                )
