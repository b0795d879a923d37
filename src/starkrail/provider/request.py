"""
Unsent JSON-RPC requests.

Every provider operation returns a ``Request`` describing one JSON-RPC
call together with the decoder for its result. Nothing touches the
network until the caller awaits ``send()``, so a request can be sent on
its own, gathered concurrently with others, or placed in a batch.

Example:
    >>> nonce = await provider.get_nonce(address).send()
    >>> balance_req = provider.call(balance_call).map(lambda r: r[0])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from starkrail.errors import DecodeError, RpcError, StarkrailError, ValidationError
from starkrail.provider.service import HttpService
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")
U = TypeVar("U")

_DECODE_FAILURES = (KeyError, IndexError, TypeError, ValueError, ValidationError)


def rpc_error_from(error: Any, method: Optional[str] = None) -> StarkrailError:
    """Convert a JSON-RPC error object into an RpcError."""
    if not isinstance(error, dict) or "code" not in error:
        return DecodeError(f"Malformed JSON-RPC error object: {error!r}", method=method)
    return RpcError(
        int(error["code"]),
        str(error.get("message", "")),
        data=error.get("data"),
        method=method,
    )


class Request(Generic[T]):
    """
    One JSON-RPC call and the decoder for its result.

    Attributes:
        method: JSON-RPC method name
        params: Named parameters
    """

    def __init__(
        self,
        service: HttpService,
        method: str,
        params: Dict[str, Any],
        decoder: Callable[[Any], Any],
        mappers: Optional[List[Callable[[Any], Any]]] = None,
    ) -> None:
        self._service = service
        self.method = method
        self.params = params
        self._decoder = decoder
        self._mappers = list(mappers or [])

    def build_payload(self, request_id: int = 0) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": self.method,
            "params": self.params,
        }

    async def send(self) -> T:
        """
        Send the request and decode its result.

        Raises:
            NetworkError: Transport failure
            RpcError: The node rejected the call
            DecodeError: The result does not have the declared shape
        """
        _logger.debug("Sending RPC request", extra={"method": self.method})
        body = await self._service.send(self.build_payload())
        return self.handle_response(body)

    def handle_response(self, body: Any) -> T:
        """Interpret one JSON-RPC response object addressed to this request."""
        if not isinstance(body, dict):
            raise DecodeError(
                f"Expected a JSON-RPC response object, got {type(body).__name__}",
                method=self.method,
            )
        if body.get("error") is not None:
            raise rpc_error_from(body["error"], self.method)
        if "result" not in body:
            raise DecodeError("JSON-RPC response has neither result nor error", method=self.method)

        value = self._decode(self._decoder, body["result"])
        for mapper in self._mappers:
            value = self._decode(mapper, value)
        return value

    def _decode(self, fn: Callable[[Any], Any], result: Any) -> Any:
        try:
            return fn(result)
        except _DECODE_FAILURES as exc:
            raise DecodeError(
                f"Cannot decode {self.method} result: {exc}",
                method=self.method,
                details={"result": str(result)[:500]},
            ) from exc

    def map(self, fn: Callable[[T], U]) -> "Request[U]":
        """Return a request whose decoded result is passed through ``fn``."""
        return Request(self._service, self.method, self.params, self._decoder, [*self._mappers, fn])

    def __repr__(self) -> str:
        return f"Request(method={self.method!r})"


@dataclass(frozen=True)
class RequestResult(Generic[T]):
    """
    Outcome of one request inside a batch: a value or an error.
    """

    value: Optional[T] = None
    error: Optional[StarkrailError] = None

    @classmethod
    def ok(cls, value: T) -> "RequestResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: StarkrailError) -> "RequestResult[T]":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def get_or_raise(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
