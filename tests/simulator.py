"""
In-memory Starknet JSON-RPC chain and deterministic crypto doubles.

ChainSimulator implements the subset of JSON-RPC the engine uses:
nonces are checked and consumed on submission, UDC deployments and ERC20
transfers are executed, and transaction statuses can be scripted to walk
the receipt state machine.
"""

import hashlib
import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from starkrail.constants import (
    CONTRACT_ADDRESS_PREFIX,
    FIELD_PRIME,
    MAX_ADDRESS,
    QUERY_VERSION_BASE,
    UDC_ADDRESS,
)
from starkrail.crypto import Signature, Signer, StarkHasher, selector_from_name
from starkrail.errors import NetworkError
from starkrail.provider import HttpService
from starkrail.types.call import decode_cairo1_calldata
from starkrail.types.felt import Felt


def _digest(tag: str, values: Sequence[int]) -> Felt:
    text = tag + ":" + ",".join(str(int(v)) for v in values)
    return Felt(int.from_bytes(hashlib.sha256(text.encode()).digest(), "big") % FIELD_PRIME)


# =============================================================================
# Crypto doubles
# =============================================================================


class FakeHasher(StarkHasher):
    """Deterministic, collision-resistant stand-in for Pedersen and Poseidon."""

    def pedersen(self, left: int, right: int) -> Felt:
        return _digest("pedersen", [left, right])

    def poseidon(self, left: int, right: int) -> Felt:
        return _digest("poseidon2", [left, right])

    def poseidon_many(self, values: Sequence[int]) -> Felt:
        return _digest("poseidon", list(values))


class FakeSigner(Signer):
    """Signature = (H(key, hash), H(public_key, hash)); verifiable from the public key."""

    def __init__(self, private_key: int) -> None:
        self._private_key = private_key
        self._public_key = _digest("public", [private_key])
        self.signed: List[int] = []

    @property
    def public_key(self) -> Felt:
        return self._public_key

    def sign_transaction_hash(self, tx_hash: int) -> Signature:
        self.signed.append(int(tx_hash))
        return Signature(
            r=_digest("r", [self._private_key, tx_hash]),
            s=_digest("s", [self._public_key, tx_hash]),
        )

    def verify(self, msg_hash: int, signature: Signature) -> bool:
        return signature.s == _digest("s", [self._public_key, msg_hash])


class FailingSigner(FakeSigner):
    """Signer whose backend is unavailable."""

    def sign_transaction_hash(self, tx_hash: int) -> Signature:
        raise RuntimeError("hsm offline")


# =============================================================================
# Chain simulator
# =============================================================================

Status = Tuple[str, Optional[str]]
NOT_FOUND: Status = ("NOT_FOUND", None)

CallHandler = Callable[[List[Felt]], List[int]]


class ChainSimulator(HttpService):
    """
    HttpService that answers JSON-RPC from in-memory state.

    Attributes:
        nonces: Account address -> nonce
        storage: (contract, key) -> value
        balances: (token, holder) -> amount
        requests: Every JSON-RPC request object received, in order
    """

    def __init__(self, chain_id: int, hasher: StarkHasher) -> None:
        self.chain_id = chain_id
        self.hasher = hasher
        self.nonces: Dict[int, int] = {}
        self.storage: Dict[Tuple[int, int], int] = {}
        self.balances: Dict[Tuple[int, int], int] = {}
        self.transactions: Dict[int, Dict[str, Any]] = {}
        self.status_scripts: Dict[int, List[Status]] = {}
        self.call_handlers: Dict[Tuple[int, int], CallHandler] = {}
        self.requests: List[Dict[str, Any]] = []
        self.transport_calls = 0

        self.fee_estimate: Dict[str, int] = {
            "overall_fee": 1000,
            "l1_gas_consumed": 10,
            "l1_gas_price": 50,
            "l2_gas_consumed": 100,
            "l2_gas_price": 5,
            "l1_data_gas_consumed": 0,
            "l1_data_gas_price": 0,
        }
        self.estimate_revert_reason: Optional[str] = None
        self.revert_next: Optional[str] = None
        self.auto_accept = True
        self.fail_transport = False
        self.reverse_batch = False
        self.block_number = 100

    # ------------------------------------------------------------------
    # Scripting helpers
    # ------------------------------------------------------------------

    def script_status(self, tx_hash: int, statuses: Sequence[Status]) -> None:
        """Serve these (finality, execution) statuses in order; the last one repeats."""
        self.status_scripts[int(tx_hash)] = list(statuses)

    def sent(self, method: str) -> List[Dict[str, Any]]:
        return [r for r in self.requests if r["method"] == method]

    def register_call(self, address: int, entry_point: str, handler: CallHandler) -> None:
        self.call_handlers[(int(address), int(selector_from_name(entry_point)))] = handler

    # ------------------------------------------------------------------
    # HttpService
    # ------------------------------------------------------------------

    async def send(self, payload: Any) -> Any:
        self.transport_calls += 1
        if self.fail_transport:
            raise NetworkError("Connection refused", url="memory://chain")
        if isinstance(payload, list):
            responses = [self._dispatch(item) for item in payload]
            return list(reversed(responses)) if self.reverse_batch else responses
        return self._dispatch(payload)

    def _dispatch(self, request: Dict[str, Any]) -> Dict[str, Any]:
        self.requests.append(request)
        handler = getattr(self, "_rpc_" + request["method"].replace("starknet_", ""), None)
        if handler is None:
            return self._error(request, -32601, "Method not found")
        try:
            result = handler(request["params"])
        except _RpcFailure as failure:
            return self._error(request, failure.code, failure.message, failure.data)
        return {"jsonrpc": "2.0", "id": request["id"], "result": result}

    @staticmethod
    def _error(request: Dict[str, Any], code: int, message: str, data: Any = None) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        return {"jsonrpc": "2.0", "id": request["id"], "error": error}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _rpc_chainId(self, params: Dict[str, Any]) -> str:
        return hex(self.chain_id)

    def _rpc_getNonce(self, params: Dict[str, Any]) -> str:
        return hex(self.nonces.get(int(params["contract_address"], 16), 0))

    def _rpc_getStorageAt(self, params: Dict[str, Any]) -> str:
        key = (int(params["contract_address"], 16), int(params["key"], 16))
        return hex(self.storage.get(key, 0))

    def _rpc_call(self, params: Dict[str, Any]) -> List[str]:
        call = params["request"]
        key = (int(call["contract_address"], 16), int(call["entry_point_selector"], 16))
        handler = self.call_handlers.get(key)
        if handler is None:
            raise _RpcFailure(40, "Contract error", {"revert_error": "Entry point not found"})
        return [hex(v) for v in handler([Felt(v) for v in call["calldata"]])]

    def _rpc_estimateFee(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        estimates = []
        for index, tx in enumerate(params["request"]):
            if int(tx["version"], 16) < QUERY_VERSION_BASE:
                raise _RpcFailure(-32602, "Invalid params", "estimate requires a query version")
            if self.estimate_revert_reason is not None:
                raise _RpcFailure(
                    41,
                    "Transaction execution error",
                    {"transaction_index": index, "execution_error": self.estimate_revert_reason},
                )
            estimates.append(
                {
                    **{key: hex(value) for key, value in self.fee_estimate.items()},
                    "unit": "FRI" if tx["version"].endswith("3") else "WEI",
                }
            )
        return estimates

    def _rpc_getTransactionStatus(self, params: Dict[str, Any]) -> Dict[str, Any]:
        tx_hash = int(params["transaction_hash"], 16)
        script = self.status_scripts.get(tx_hash)
        if script:
            finality, execution = script.pop(0) if len(script) > 1 else script[0]
            if finality == "NOT_FOUND":
                raise _RpcFailure(29, "Transaction hash not found")
            result = {"finality_status": finality}
            if execution:
                result["execution_status"] = execution
            return result
        tx = self.transactions.get(tx_hash)
        if tx is None:
            raise _RpcFailure(29, "Transaction hash not found")
        result = {"finality_status": tx["finality_status"]}
        if tx.get("execution_status"):
            result["execution_status"] = tx["execution_status"]
        if tx.get("revert_reason"):
            result["failure_reason"] = tx["revert_reason"]
        return result

    def _rpc_getTransactionReceipt(self, params: Dict[str, Any]) -> Dict[str, Any]:
        tx_hash = int(params["transaction_hash"], 16)
        tx = self.transactions.get(tx_hash)
        if tx is None:
            raise _RpcFailure(29, "Transaction hash not found")
        receipt = {
            "type": tx["type"],
            "transaction_hash": hex(tx_hash),
            "finality_status": tx["finality_status"],
            "execution_status": tx["execution_status"],
            "block_hash": hex(_digest("block", [tx["block_number"]])),
            "block_number": tx["block_number"],
            "actual_fee": {"amount": hex(tx["actual_fee"]), "unit": "WEI"},
            "events": tx["events"],
            "messages_sent": [],
        }
        if tx.get("revert_reason"):
            receipt["revert_reason"] = tx["revert_reason"]
        if tx_hash in self.status_scripts and self.status_scripts[tx_hash]:
            finality, execution = self.status_scripts[tx_hash][0]
            if finality != "NOT_FOUND":
                receipt["finality_status"] = finality
                receipt["execution_status"] = execution or "SUCCEEDED"
        return receipt

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def _rpc_addInvokeTransaction(self, params: Dict[str, Any]) -> Dict[str, str]:
        tx = params["invoke_transaction"]
        sender = int(tx["sender_address"], 16)
        self._consume_nonce(sender, tx)
        events: List[Dict[str, Any]] = []
        if self.revert_next is None:
            for call in decode_cairo1_calldata([int(v, 16) for v in tx["calldata"]]):
                events += self._execute_call(sender, call)
        tx_hash = self._record(tx, "INVOKE", events)
        return {"transaction_hash": hex(tx_hash)}

    def _rpc_addDeclareTransaction(self, params: Dict[str, Any]) -> Dict[str, str]:
        tx = params["declare_transaction"]
        self._consume_nonce(int(tx["sender_address"], 16), tx)
        class_hash = _digest("class", [int(v, 16) for v in tx["contract_class"].get("sierra_program", [])])
        tx_hash = self._record(tx, "DECLARE", [])
        return {"transaction_hash": hex(tx_hash), "class_hash": hex(class_hash)}

    def _rpc_addDeployAccountTransaction(self, params: Dict[str, Any]) -> Dict[str, str]:
        tx = params["deploy_account_transaction"]
        calldata = [int(v, 16) for v in tx["constructor_calldata"]]
        address = self._contract_address(
            0, int(tx["contract_address_salt"], 16), int(tx["class_hash"], 16), calldata
        )
        self._consume_nonce(address, tx)
        self.storage[(address, 0)] = int(tx["class_hash"], 16)
        tx_hash = self._record(tx, "DEPLOY_ACCOUNT", [])
        return {"transaction_hash": hex(tx_hash), "contract_address": hex(address)}

    def _consume_nonce(self, address: int, tx: Dict[str, Any]) -> None:
        if not tx.get("signature"):
            raise _RpcFailure(55, "Account validation failed", "missing signature")
        expected = self.nonces.get(address, 0)
        if int(tx["nonce"], 16) != expected:
            raise _RpcFailure(
                52,
                "Invalid transaction nonce",
                f"expected {expected}, got {int(tx['nonce'], 16)}",
            )
        self.nonces[address] = expected + 1

    def _record(self, tx: Dict[str, Any], kind: str, events: List[Dict[str, Any]]) -> int:
        body = hashlib.sha256(json.dumps(tx, sort_keys=True).encode()).digest()
        tx_hash = int(_digest("tx", [int.from_bytes(body, "big")]))
        reverted = self.revert_next
        self.revert_next = None
        self.block_number += 1
        self.transactions[tx_hash] = {
            "type": kind,
            "finality_status": "ACCEPTED_ON_L2" if self.auto_accept else "RECEIVED",
            "execution_status": "REVERTED" if reverted else "SUCCEEDED",
            "revert_reason": reverted,
            "block_number": self.block_number,
            "actual_fee": 900,
            "events": [] if reverted else events,
        }
        return tx_hash

    # ------------------------------------------------------------------
    # Contract execution
    # ------------------------------------------------------------------

    def _contract_address(self, deployer: int, salt: int, class_hash: int, calldata: List[int]) -> int:
        h = self.hasher
        raw = h.pedersen_on_elements(
            [CONTRACT_ADDRESS_PREFIX, deployer, salt, class_hash, h.pedersen_on_elements(calldata)]
        )
        return int(raw) % MAX_ADDRESS

    def _execute_call(self, sender: int, call: Any) -> List[Dict[str, Any]]:
        to = int(call.contract_address)
        selector = int(call.entry_point_selector)
        data = [int(v) for v in call.calldata]

        if to == UDC_ADDRESS and selector == selector_from_name("deployContract"):
            class_hash, salt, unique, ctor_len = data[:4]
            ctor = data[4: 4 + ctor_len]
            if unique:
                address = self._contract_address(
                    UDC_ADDRESS, int(self.hasher.pedersen(sender, salt)), class_hash, ctor
                )
            else:
                address = self._contract_address(0, salt, class_hash, ctor)
            self.storage[(address, 0)] = class_hash
            return [
                {
                    "from_address": hex(UDC_ADDRESS),
                    "keys": [hex(selector_from_name("ContractDeployed"))],
                    "data": [hex(v) for v in [address, sender, unique, class_hash, ctor_len, *ctor, salt]],
                }
            ]

        if selector == selector_from_name("transfer"):
            recipient, low, high = data
            amount = (high << 128) + low
            self.balances[(to, sender)] = self.balances.get((to, sender), 0) - amount
            self.balances[(to, recipient)] = self.balances.get((to, recipient), 0) + amount
            return [
                {
                    "from_address": hex(to),
                    "keys": [hex(selector_from_name("Transfer"))],
                    "data": [hex(sender), hex(recipient), hex(low), hex(high)],
                }
            ]
        return []


class _RpcFailure(Exception):
    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
