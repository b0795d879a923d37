"""
Tests for the httpx transport.

Tests cover:
- JSON body returned as-is
- Non-2xx statuses and non-JSON bodies become NetworkError
- Connection failures become NetworkError with the cause chained
- Headers and async context manager
"""

import json

import httpx
import pytest

from starkrail.errors import NetworkError
from starkrail.provider.service import HttpxService

URL = "http://node.test/rpc"
PAYLOAD = {"jsonrpc": "2.0", "id": 0, "method": "starknet_chainId", "params": {}}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHttpxService:
    """Tests for HttpxService against a mock transport."""

    @pytest.mark.asyncio
    async def test_returns_json_body(self) -> None:
        """Test a successful round trip."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 0, "result": "0x1"})

        service = HttpxService(URL, client=_client(handler), headers={"x-api-key": "k"})
        body = await service.send(PAYLOAD)

        assert body == {"jsonrpc": "2.0", "id": 0, "result": "0x1"}
        assert str(seen[0].url) == URL
        assert seen[0].method == "POST"
        assert seen[0].headers["x-api-key"] == "k"
        assert seen[0].headers["content-type"] == "application/json"
        assert json.loads(seen[0].content) == PAYLOAD
        await service.close()

    @pytest.mark.asyncio
    async def test_batch_payload(self) -> None:
        """Test a list payload is posted as a JSON array."""

        def handler(request: httpx.Request) -> httpx.Response:
            items = json.loads(request.content)
            return httpx.Response(200, json=[{"id": item["id"], "result": "0x0"} for item in items])

        service = HttpxService(URL, client=_client(handler))
        body = await service.send([PAYLOAD, {**PAYLOAD, "id": 1}])
        assert [item["id"] for item in body] == [0, 1]
        await service.close()

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        """Test a 5xx status raises NetworkError with the status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="upstream down")

        service = HttpxService(URL, client=_client(handler))
        with pytest.raises(NetworkError) as exc_info:
            await service.send(PAYLOAD)

        error = exc_info.value
        assert error.status_code == 503
        assert error.url == URL
        assert error.details["body"] == "upstream down"
        await service.close()

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        """Test an HTML error page with a 200 status."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        service = HttpxService(URL, client=_client(handler))
        with pytest.raises(NetworkError):
            await service.send(PAYLOAD)
        await service.close()

    @pytest.mark.asyncio
    async def test_connection_failure(self) -> None:
        """Test connection errors are wrapped and chained."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = HttpxService(URL, client=_client(handler))
        with pytest.raises(NetworkError) as exc_info:
            await service.send(PAYLOAD)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert exc_info.value.status_code is None
        await service.close()

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        """Test the service closes its client on exit."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": 0, "result": "0x1"})

        client = _client(handler)
        async with HttpxService(URL, client=client) as service:
            assert service.url == URL
            await service.send(PAYLOAD)
        assert client.is_closed
