"""
JSON-RPC transport.

The engine only needs ``send(payload) -> response``. ``HttpxService`` is
the production binding; tests substitute an in-memory chain.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import httpx

from starkrail.constants import PROVIDER_TIMEOUT_SECONDS
from starkrail.errors import NetworkError
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)

JsonPayload = Union[Dict[str, Any], List[Dict[str, Any]]]


class HttpService(ABC):
    """Sends one JSON-RPC payload (single or batch) and returns the decoded body."""

    @abstractmethod
    async def send(self, payload: JsonPayload) -> Any:
        ...


class HttpxService(HttpService):
    """
    HTTP transport backed by httpx.

    Performs no retries: any transport failure or non-2xx status is raised
    as NetworkError and the caller decides whether to try again.

    Example:
        >>> service = HttpxService("http://127.0.0.1:5050/rpc")
        >>> body = await service.send({"jsonrpc": "2.0", "id": 0,
        ...                            "method": "starknet_chainId", "params": {}})
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = PROVIDER_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    async def send(self, payload: JsonPayload) -> Any:
        if self._client is not None:
            return await self._post(self._client, payload)
        async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
            return await self._post(client, payload)

    async def _post(self, client: httpx.AsyncClient, payload: JsonPayload) -> Any:
        try:
            response = await client.post(self._url, json=payload, headers=self._headers)
        except httpx.HTTPError as exc:
            _logger.warning(
                "RPC transport failure",
                extra={"url": self._url, "error": type(exc).__name__},
            )
            raise NetworkError(f"Transport failure: {exc}", url=self._url) from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise NetworkError(
                f"RPC endpoint returned HTTP {response.status_code}",
                url=self._url,
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                "RPC endpoint returned a non-JSON body",
                url=self._url,
                status_code=response.status_code,
            ) from exc

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxService":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
        self._client = None
