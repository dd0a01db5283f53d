"""Errors raised while talking to the JSON-RPC endpoint of a node."""

from typing import Any, Sequence


class WitnessRPCError(Exception):
    """Base class of every error raised by the RPC client."""

    method: str | None
    params: Sequence[Any]

    def __init__(self, *args, method: str | None = None, params: Sequence[Any] = ()):
        """Initialize the error with the remote call that caused it."""
        super().__init__(*args)
        self.method = method
        self.params = tuple(params)

    def call_description(self) -> str:
        """Return a readable description of the remote call, e.g. `eth_getCode(0x.., 0x1)`."""
        if self.method is None:
            return "<batch>"
        return f"{self.method}({', '.join(str(param) for param in self.params)})"

    def __str__(self) -> str:
        """Return string representation of the error, including the remote call."""
        return f"{self.call_description()}: {super().__str__()}"


class TransportError(WitnessRPCError):
    """
    The request did not produce a JSON-RPC response: connection or DNS failure, timeout, or a
    non-success HTTP status.
    """

    pass


class DecodeError(WitnessRPCError):
    """The response is not valid JSON-RPC, or its `result` does not have the expected shape."""

    pass


class NotFoundError(WitnessRPCError):
    """The node answered `null` for an object that must exist (e.g. a block or a receipt)."""

    pass


class RpcError(WitnessRPCError):
    """The node returned a JSON-RPC `error` object instead of a `result`."""

    code: int
    message: str
    data: Any

    def __init__(
        self,
        code: Any,
        message: str,
        data: Any = None,
        *,
        method: str | None = None,
        params: Sequence[Any] = (),
    ):
        """Initialize the RpcError from the fields of the JSON-RPC error object."""
        super().__init__(message, method=method, params=params)
        self.code = self.parse_code(code)
        self.message = message
        self.data = data

    @staticmethod
    def parse_code(code: Any) -> int:
        """Return the integer error code, 0 when the node sent a missing or non-numeric code."""
        if isinstance(code, bool):
            return 0
        try:
            return int(code)
        except (TypeError, ValueError, OverflowError):
            return 0

    @classmethod
    def from_response(
        cls, error: Any, *, method: str | None = None, params: Sequence[Any] = ()
    ) -> "RpcError":
        """Build the error from the `error` member of a JSON-RPC response."""
        if not isinstance(error, dict):
            return cls(0, str(error), method=method, params=params)
        return cls(
            error.get("code", 0),
            str(error.get("message", "")),
            error.get("data"),
            method=method,
            params=params,
        )

    def __str__(self) -> str:
        """Return string representation of the RpcError."""
        return f"{self.call_description()}: RpcError(code={self.code}, message={self.message})"
