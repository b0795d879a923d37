"""
Batch requests.

A batch sends N requests as one JSON-RPC array and returns N results in
the order the requests were given, whatever order the node answers in.
Each request decodes its own item, so a batch can mix result types. A
failing item becomes an error at its index and never affects its
neighbours; only a transport failure fails the whole batch.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from starkrail.errors import DecodeError, StarkrailError
from starkrail.provider.request import Request, RequestResult, rpc_error_from
from starkrail.provider.service import HttpService
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)


class BatchRequest:
    """
    Ordered group of requests sent in one round trip.

    Example:
        >>> batch = provider.batch_requests(
        ...     provider.get_nonce(alice),
        ...     provider.get_transaction_status(tx_hash),
        ... )
        >>> nonce, status = await batch.send()
        >>> nonce.get_or_raise()
    """

    def __init__(self, service: HttpService, requests: Sequence[Request[Any]]) -> None:
        self._service = service
        self._requests = list(requests)

    def __len__(self) -> int:
        return len(self._requests)

    def build_payload(self) -> List[Dict[str, Any]]:
        return [request.build_payload(i) for i, request in enumerate(self._requests)]

    async def send(self) -> List[RequestResult[Any]]:
        """
        Send the batch.

        Returns:
            One RequestResult per request, index-aligned with the input

        Raises:
            NetworkError: The transport failed; no item was answered
            RpcError: The node rejected the batch as a whole
            DecodeError: The body is not a JSON-RPC batch response
        """
        if not self._requests:
            return []

        _logger.debug("Sending RPC batch", extra={"size": len(self._requests)})
        body = await self._service.send(self.build_payload())

        if isinstance(body, dict) and body.get("error") is not None:
            raise rpc_error_from(body["error"])
        if not isinstance(body, list):
            raise DecodeError(f"Expected a JSON-RPC batch response, got {type(body).__name__}")

        by_id: Dict[Any, Any] = {}
        for item in body:
            if isinstance(item, dict) and "id" in item:
                by_id[item["id"]] = item

        results: List[RequestResult[Any]] = []
        for index, request in enumerate(self._requests):
            item = by_id.get(index)
            if item is None:
                results.append(
                    RequestResult.failure(
                        DecodeError(f"No response for batch item {index}", method=request.method)
                    )
                )
                continue
            try:
                results.append(RequestResult.ok(request.handle_response(item)))
            except StarkrailError as exc:
                results.append(RequestResult.failure(exc))

        failed = sum(1 for r in results if not r.is_ok)
        if failed:
            _logger.debug("RPC batch had failing items", extra={"failed": failed, "size": len(results)})
        return results
