"""
Tests for Request objects and the JSON-RPC provider.

Tests cover:
- Payload construction and lazy sending
- Result decoding and decode failures
- RPC error conversion
- map() and failing mappers
- Block id encoding
- Submission guards
"""

import pytest

from starkrail.errors import DecodeError, NetworkError, RpcError, ValidationError
from starkrail.errors.rpc import CONTRACT_ERROR, METHOD_NOT_FOUND
from starkrail.provider import JsonRpcProvider
from starkrail.provider.request import Request, RequestResult, rpc_error_from
from starkrail.provider.rpc import block_id_param
from starkrail.types.call import Call
from starkrail.types.felt import Felt
from starkrail.types.transactions import InvokeV1

from tests.conftest import ACCOUNT_ADDRESS, CHAIN_ID, TOKEN
from tests.simulator import ChainSimulator


class StaticService:
    """HttpService returning one canned body."""

    def __init__(self, body) -> None:
        self.body = body
        self.payloads = []

    async def send(self, payload):
        self.payloads.append(payload)
        return self.body


# =============================================================================
# Request Tests
# =============================================================================


class TestRequest:
    """Tests for the unsent request object."""

    def test_build_payload(self) -> None:
        """Test the JSON-RPC envelope."""
        request = Request(StaticService(None), "starknet_chainId", {}, Felt)
        assert request.build_payload(7) == {
            "jsonrpc": "2.0",
            "id": 7,
            "method": "starknet_chainId",
            "params": {},
        }

    @pytest.mark.asyncio
    async def test_nothing_sent_until_awaited(self, provider: JsonRpcProvider, chain: ChainSimulator) -> None:
        """Test building a request performs no I/O."""
        request = provider.chain_id()
        assert chain.transport_calls == 0
        assert await request.send() == CHAIN_ID
        assert chain.transport_calls == 1

    @pytest.mark.asyncio
    async def test_decode_error(self) -> None:
        """Test a result of the wrong shape raises DecodeError."""
        request = Request(StaticService({"jsonrpc": "2.0", "id": 0, "result": "not-hex"}), "m", {}, Felt)
        with pytest.raises(DecodeError) as exc_info:
            await request.send()
        assert exc_info.value.method == "m"

    @pytest.mark.asyncio
    async def test_missing_result(self) -> None:
        """Test a response without result or error."""
        request = Request(StaticService({"jsonrpc": "2.0", "id": 0}), "m", {}, Felt)
        with pytest.raises(DecodeError):
            await request.send()

    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        """Test a body that is not a JSON-RPC object."""
        request = Request(StaticService([1, 2]), "m", {}, Felt)
        with pytest.raises(DecodeError):
            await request.send()

    @pytest.mark.asyncio
    async def test_rpc_error(self) -> None:
        """Test a JSON-RPC error object becomes RpcError."""
        body = {"jsonrpc": "2.0", "id": 0, "error": {"code": 20, "message": "Contract not found"}}
        with pytest.raises(RpcError) as exc_info:
            await Request(StaticService(body), "starknet_call", {}, list).send()
        assert exc_info.value.rpc_code == 20
        assert exc_info.value.rpc_message == "Contract not found"
        assert exc_info.value.method == "starknet_call"

    def test_malformed_error_object(self) -> None:
        """Test an error object without a code."""
        assert isinstance(rpc_error_from("boom"), DecodeError)

    @pytest.mark.asyncio
    async def test_map(self, provider: JsonRpcProvider) -> None:
        """Test map transforms the decoded result and leaves the original intact."""
        base = provider.chain_id()
        mapped = base.map(lambda chain_id: chain_id.hex())
        assert await mapped.send() == hex(CHAIN_ID)
        assert await base.send() == CHAIN_ID

    @pytest.mark.asyncio
    async def test_map_failure_is_decode_error(self, provider: JsonRpcProvider) -> None:
        """Test a mapper raising on its input surfaces as DecodeError."""
        mapped = provider.chain_id().map(lambda chain_id: {}["missing"])
        with pytest.raises(DecodeError) as exc_info:
            await mapped.send()
        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_unknown_method(self, chain: ChainSimulator) -> None:
        """Test the node's method-not-found error."""
        with pytest.raises(RpcError) as exc_info:
            await Request(chain, "starknet_nope", {}, Felt).send()
        assert exc_info.value.rpc_code == METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_transport_failure(self, provider: JsonRpcProvider, chain: ChainSimulator) -> None:
        """Test transport errors surface as NetworkError."""
        chain.fail_transport = True
        with pytest.raises(NetworkError):
            await provider.chain_id().send()


class TestRequestResult:
    """Tests for per-item batch results."""

    def test_ok(self) -> None:
        """Test a successful result."""
        result = RequestResult.ok(5)
        assert result.is_ok
        assert result.get_or_raise() == 5

    def test_failure(self) -> None:
        """Test a failed result raises its error."""
        error = RpcError(40, "Contract error")
        result = RequestResult.failure(error)
        assert not result.is_ok
        with pytest.raises(RpcError):
            result.get_or_raise()


# =============================================================================
# Provider Tests
# =============================================================================


class TestJsonRpcProvider:
    """Tests for provider operations against the simulator."""

    @pytest.mark.parametrize(
        "block_id,expected",
        [
            ("latest", "latest"),
            ("pre_confirmed", "pre_confirmed"),
            (12, {"block_number": 12}),
            ("0xABC", {"block_hash": "0xabc"}),
        ],
    )
    def test_block_id_param(self, block_id, expected) -> None:
        """Test block tags, numbers and hashes."""
        assert block_id_param(block_id) == expected

    def test_block_id_bool_rejected(self) -> None:
        """Test True is not mistaken for block 1."""
        with pytest.raises(ValidationError):
            block_id_param(True)

    @pytest.mark.asyncio
    async def test_call(self, provider: JsonRpcProvider) -> None:
        """Test starknet_call decodes a felt list."""
        result = await provider.call(Call.from_entry_point(TOKEN, "balanceOf", [ACCOUNT_ADDRESS])).send()
        assert result == [10**18, 0]

    @pytest.mark.asyncio
    async def test_call_contract_error(self, provider: JsonRpcProvider) -> None:
        """Test a failing view call carries the revert error."""
        with pytest.raises(RpcError) as exc_info:
            await provider.call(Call.from_entry_point(TOKEN, "nope")).send()
        assert exc_info.value.rpc_code == CONTRACT_ERROR
        assert exc_info.value.revert_reason == "Entry point not found"

    @pytest.mark.asyncio
    async def test_storage(self, provider: JsonRpcProvider, chain: ChainSimulator) -> None:
        """Test starknet_getStorageAt."""
        chain.storage[(0x10, 0x20)] = 0x30
        assert await provider.get_storage_at(0x10, 0x20).send() == 0x30

    def test_estimate_requires_query(self, provider: JsonRpcProvider) -> None:
        """Test a real payload is never sent for simulation."""
        payload = InvokeV1(sender_address=Felt(1), calldata=(), max_fee=0, nonce=Felt(0))
        with pytest.raises(ValidationError):
            provider.estimate_fee([payload])

    def test_submit_requires_signature(self, provider: JsonRpcProvider) -> None:
        """Test an unsigned payload cannot be submitted."""
        payload = InvokeV1(sender_address=Felt(1), calldata=(), max_fee=0, nonce=Felt(0))
        with pytest.raises(ValidationError):
            provider.invoke(payload)

    def test_submit_rejects_query(self, provider: JsonRpcProvider) -> None:
        """Test a query payload cannot be submitted."""
        payload = InvokeV1(
            sender_address=Felt(1), calldata=(), max_fee=0, nonce=Felt(0), query=True
        ).with_signature([1, 2])
        with pytest.raises(ValidationError):
            provider.invoke(payload)

    def test_submit_rejects_wrong_kind(self, provider: JsonRpcProvider) -> None:
        """Test an invoke cannot go through the declare endpoint."""
        payload = InvokeV1(
            sender_address=Felt(1), calldata=(), max_fee=0, nonce=Felt(0)
        ).with_signature([1, 2])
        with pytest.raises(ValidationError):
            provider.declare(payload)  # type: ignore[arg-type]
