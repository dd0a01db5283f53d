"""JSON-RPC methods used to extract a block witness from an Ethereum node."""

import logging
from abc import ABC, abstractmethod
from itertools import count
from typing import Any, ClassVar, Dict, List, Literal, Sequence, Type, TypeVar, Union

import requests
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from witness_base_types import Address, Hash, to_json

from .exceptions import DecodeError, NotFoundError, RpcError, TransportError
from .types import AccountProof, Block, RPCCall, TransactionReceipt

logger = logging.getLogger(__name__)

BlockNumberType = Union[int, Literal["latest", "earliest", "pending"]]

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_POOL_SIZE = 8

ModelType = TypeVar("ModelType", bound=BaseModel)


def to_block_identifier(block_number: BlockNumberType) -> str:
    """Return the JSON-RPC representation of a block number or tag."""
    return hex(block_number) if isinstance(block_number, int) else block_number


class RpcClient(ABC):
    """
    Remote calls needed to assemble a block witness.

    Every method is a read-only query, so any of them may be retried safely.
    """

    @abstractmethod
    def get_block_by_number(
        self, block_number: BlockNumberType = "latest", full_txs: bool = True
    ) -> Block:
        """`eth_getBlockByNumber`: Returns information about a block by block number."""
        pass

    @abstractmethod
    def get_transaction_receipt(self, transaction_hash: Hash) -> TransactionReceipt:
        """`eth_getTransactionReceipt`: Returns the receipt of a transaction."""
        pass

    @abstractmethod
    def get_balance(self, address: Address, block_number: BlockNumberType) -> str | None:
        """`eth_getBalance`: Returns the balance of the account of given address."""
        pass

    @abstractmethod
    def get_transaction_count(
        self, address: Address, block_number: BlockNumberType
    ) -> str | None:
        """`eth_getTransactionCount`: Returns the number of transactions sent from an address."""
        pass

    @abstractmethod
    def get_code(self, address: Address, block_number: BlockNumberType) -> str | None:
        """`eth_getCode`: Returns code at a given address."""
        pass

    @abstractmethod
    def get_proof(
        self, address: Address, storage_keys: Sequence[Hash], block_number: BlockNumberType
    ) -> AccountProof:
        """`eth_getProof`: Returns the account and storage values, including the Merkle proof."""
        pass

    @abstractmethod
    def batch(self, calls: Sequence[RPCCall]) -> List[Any]:
        """
        Send all calls in a single round-trip.

        Returns one entry per call, in call order: the `result` of the call (`None` for a `null`
        result), or an `RpcError` when the response carried an `error`. A reply with neither
        raises `DecodeError`, like a single call would.
        """
        pass


class BaseRPC:
    """Represents a base RPC class for every JSON-RPC call sent to the node."""

    namespace: ClassVar[str]

    def __init__(
        self,
        url: str = DEFAULT_RPC_URL,
        extra_headers: Dict | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        pool_size: int = DEFAULT_POOL_SIZE,
        session: requests.Session | None = None,
    ):
        """Initialize BaseRPC class with the given url."""
        if extra_headers is None:
            extra_headers = {}
        self.url = url
        self.request_id_counter = count(1)
        self.extra_headers = extra_headers
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        # Worker threads share the session, its pool is the concurrency ceiling of the endpoint.
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.retrying = Retrying(
            stop=stop_after_attempt(max(1, max_retries)),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception_type(TransportError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def __init_subclass__(cls) -> None:
        """Set namespace of the RPC class to the lowercase of the class name."""
        namespace = cls.__name__
        if namespace.endswith("RPC"):
            namespace = namespace[:-3]
        cls.namespace = namespace.lower()

    def __enter__(self):
        """Return the client itself for use as a context manager."""
        return self

    def __exit__(self, *exc_info) -> None:
        """Close the underlying HTTP session."""
        self.close()

    def close(self) -> None:
        """Release the connections held by the HTTP session."""
        self.session.close()

    def send(self, payload: Any, *, method: str | None, params: Sequence[Any]) -> Any:
        """
        POST a JSON-RPC payload to the node and return the decoded JSON body.

        Transport failures are retried with exponential backoff, every other error is raised
        on the first attempt.
        """
        return self.retrying.copy()(self._post, payload, method=method, params=params)

    def _post(self, payload: Any, *, method: str | None, params: Sequence[Any]) -> Any:
        headers = {"Content-Type": "application/json"} | self.extra_headers
        try:
            response = self.session.post(
                self.url, json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportError(str(e), method=method, params=params) from e
        if not response.ok:
            # Some nodes pair a JSON-RPC error object with a non-success HTTP status.
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error") is not None:
                return body
            raise TransportError(
                f"HTTP {response.status_code} {response.reason} from {self.url}",
                method=method,
                params=params,
            )
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(
                f"response is not valid JSON: {e}", method=method, params=params
            ) from e

    def post_request(self, method: str, *params: Any) -> Any:
        """Send JSON-RPC POST request to the node and return the `result` of the call."""
        assert self.namespace, "RPC namespace not set"
        full_method = f"{self.namespace}_{method}"

        payload = {
            "jsonrpc": "2.0",
            "method": full_method,
            "params": [to_json(param) for param in params],
            "id": next(self.request_id_counter),
        }
        logger.debug("%s%r", full_method, params)
        response_json = self.send(payload, method=full_method, params=params)

        if not isinstance(response_json, dict):
            raise DecodeError(
                "RPC response is not a JSON object", method=full_method, params=params
            )
        if response_json.get("error") is not None:
            raise RpcError.from_response(
                response_json["error"], method=full_method, params=params
            )
        if "result" not in response_json:
            raise DecodeError(
                "RPC response didn't contain a result field", method=full_method, params=params
            )
        return response_json["result"]

    def batch(self, calls: Sequence[RPCCall]) -> List[Any]:
        """Send a list of JSON-RPC requests as one batch, see `RpcClient.batch`."""
        if not calls:
            return []

        request_ids: List[int] = []
        payload = []
        for call in calls:
            request_id = next(self.request_id_counter)
            request_ids.append(request_id)
            payload.append(
                {
                    "jsonrpc": "2.0",
                    "method": call.method,
                    "params": [to_json(param) for param in call.params],
                    "id": request_id,
                }
            )

        logger.debug("sending batch of %d calls", len(calls))
        replies = self.send(payload, method=None, params=())

        if not isinstance(replies, list):
            # Endpoints without batch support answer with a single error object.
            if isinstance(replies, dict) and replies.get("error") is not None:
                raise RpcError.from_response(replies["error"])
            raise DecodeError(f"got non-list JSON-RPC batch response: {replies!r}")
        if len(replies) != len(calls):
            raise DecodeError(f"expected {len(calls)} batch replies but got {len(replies)}")

        replies_by_id: Dict[int, Dict[str, Any]] = {}
        for reply in replies:
            if not isinstance(reply, dict) or reply.get("id") not in request_ids:
                raise DecodeError(f"mismatched request id in batch reply: {reply!r}")
            if reply["id"] in replies_by_id:
                raise DecodeError(f"duplicate request id in batch reply: {reply['id']}")
            replies_by_id[reply["id"]] = reply

        results: List[Any] = []
        for call, request_id in zip(calls, request_ids):
            reply = replies_by_id[request_id]
            if reply.get("error") is not None:
                results.append(
                    RpcError.from_response(reply["error"], method=call.method, params=call.params)
                )
            elif "result" not in reply:
                raise DecodeError(
                    "RPC response didn't contain a result field",
                    method=call.method,
                    params=call.params,
                )
            else:
                results.append(reply["result"])
        return results

    def validate_result(
        self, model: Type[ModelType], result: Any, method: str, *params: Any
    ) -> ModelType:
        """Validate a `result` against a response model, raising `DecodeError` on mismatch."""
        full_method = f"{self.namespace}_{method}"
        if result is None:
            raise NotFoundError("node returned null", method=full_method, params=params)
        try:
            return model.model_validate(result)
        except ValidationError as e:
            raise DecodeError(
                f"invalid {model.__name__}: {e.error_count()} validation error(s)\n{e}",
                method=full_method,
                params=params,
            ) from e

    def validate_hex_string(self, result: Any, method: str, *params: Any) -> str | None:
        """Check that a `result` is a hex string, `null` is passed through as `None`."""
        if result is None or (isinstance(result, str) and result.startswith("0x")):
            return result
        raise DecodeError(
            f"expected a hex string, got {result!r}",
            method=f"{self.namespace}_{method}",
            params=params,
        )


class EthRPC(BaseRPC, RpcClient):
    """
    Represents an `eth_X` RPC class for every default ethereum RPC method used to assemble a
    block witness.
    """

    def get_block_by_number(
        self, block_number: BlockNumberType = "latest", full_txs: bool = True
    ) -> Block:
        """`eth_getBlockByNumber`: Returns information about a block by block number."""
        block = to_block_identifier(block_number)
        result = self.post_request("getBlockByNumber", block, full_txs)
        return self.validate_result(Block, result, "getBlockByNumber", block, full_txs)

    def get_transaction_receipt(self, transaction_hash: Hash) -> TransactionReceipt:
        """`eth_getTransactionReceipt`: Returns the receipt of a transaction."""
        result = self.post_request("getTransactionReceipt", transaction_hash)
        return self.validate_result(
            TransactionReceipt, result, "getTransactionReceipt", transaction_hash
        )

    def get_balance(
        self, address: Address, block_number: BlockNumberType = "latest"
    ) -> str | None:
        """`eth_getBalance`: Returns the balance of the account of given address."""
        block = to_block_identifier(block_number)
        result = self.post_request("getBalance", address, block)
        return self.validate_hex_string(result, "getBalance", address, block)

    def get_transaction_count(
        self, address: Address, block_number: BlockNumberType = "latest"
    ) -> str | None:
        """`eth_getTransactionCount`: Returns the number of transactions sent from an address."""
        block = to_block_identifier(block_number)
        result = self.post_request("getTransactionCount", address, block)
        return self.validate_hex_string(result, "getTransactionCount", address, block)

    def get_code(self, address: Address, block_number: BlockNumberType = "latest") -> str | None:
        """`eth_getCode`: Returns code at a given address."""
        block = to_block_identifier(block_number)
        result = self.post_request("getCode", address, block)
        return self.validate_hex_string(result, "getCode", address, block)

    def get_proof(
        self,
        address: Address,
        storage_keys: Sequence[Hash],
        block_number: BlockNumberType = "latest",
    ) -> AccountProof:
        """`eth_getProof`: Returns the account and storage values, including the Merkle proof."""
        block = to_block_identifier(block_number)
        keys = list(storage_keys)
        result = self.post_request("getProof", address, keys, block)
        return self.validate_result(AccountProof, result, "getProof", address, keys, block)
