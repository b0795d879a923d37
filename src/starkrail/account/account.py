"""
Account: the transaction lifecycle orchestrator.

An Account binds an address, a signer, a chain id and a provider. For
every transaction it reads the nonce from the chain, estimates the fee
when none is given, signs the final payload and hands back an unsent
Request.

Nonce discipline:
    The account keeps no nonce counter. Each transaction re-reads the
    nonce from the provider and consumes exactly that value. Two
    transactions prepared before either is included read the same nonce,
    and the chain accepts at most one of them. Callers submitting several
    transactions from one account must serialise
    read nonce -> sign -> send -> wait for inclusion.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from starkrail.account.builder import (
    AnyExecutionParams,
    ContractClass,
    ExecutionParams,
    ExecutionParamsV3,
    TransactionBuilder,
    build_deploy_account,
)
from starkrail.account.fee import FeeEstimator
from starkrail.config import FeeConfig
from starkrail.constants import BLOCK_TAG_LATEST, VALID_SIGNATURE
from starkrail.crypto import Signature, Signer, StarkHasher, default_hasher
from starkrail.errors import SigningFailureError, StarkrailError, ValidationError
from starkrail.hash.transaction import compute_transaction_hash
from starkrail.hash.typed_data import TypedData
from starkrail.provider.base import BlockId, Provider
from starkrail.provider.request import Request
from starkrail.types.call import Call
from starkrail.types.contract import LegacyContractClass
from starkrail.types.felt import Felt, FeltLike, parse_address
from starkrail.types.receipt import DeclareResponse, DeployAccountResponse, InvokeResponse
from starkrail.types.resources import FeeEstimate, ResourceBoundsMapping
from starkrail.types.transactions import (
    Declare,
    DeployAccount,
    Invoke,
    TransactionPayload,
)
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)


class Account:
    """
    Account contract client.

    Example:
        >>> account = Account(address, StarkCurveSigner(key), provider, CHAIN_ID_SEPOLIA)
        >>> request = await account.execute([Call.from_entry_point(token, "transfer", data)])
        >>> response = await request.send()
        >>> await ReceiptTracker(provider, response.transaction_hash).wait()
    """

    def __init__(
        self,
        address: FeltLike,
        signer: Signer,
        provider: Provider,
        chain_id: FeltLike,
        *,
        cairo_version: int = 1,
        hasher: Optional[StarkHasher] = None,
        fee_config: Optional[FeeConfig] = None,
        nonce_block_id: BlockId = BLOCK_TAG_LATEST,
    ) -> None:
        """
        Initialize an account.

        Args:
            address: Account contract address
            signer: Signing capability holding the account key
            provider: Chain endpoint
            chain_id: Chain identifier transactions are bound to
            cairo_version: Multicall calldata layout of the account contract
            hasher: Hash capability (Stark curve binding by default)
            fee_config: Fee estimation policy
            nonce_block_id: Block the nonce is read at

        Raises:
            InvalidAddressError: If the address is not a valid field element
        """
        self._address = parse_address(address)
        self._signer = signer
        self._provider = provider
        self._chain_id = Felt(chain_id)
        self._hasher = hasher or default_hasher()
        self._builder = TransactionBuilder(self._address, cairo_version=cairo_version)
        self._estimator = FeeEstimator(provider, fee_config)
        self._nonce_block_id = nonce_block_id

    @property
    def address(self) -> Felt:
        return self._address

    @property
    def chain_id(self) -> Felt:
        return self._chain_id

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def hasher(self) -> StarkHasher:
        return self._hasher

    @property
    def public_key(self) -> Felt:
        return self._signer.public_key

    @property
    def cairo_version(self) -> int:
        return self._builder.cairo_version

    @property
    def fee_estimator(self) -> FeeEstimator:
        return self._estimator

    def __repr__(self) -> str:
        return f"Account(address={self._address.hex()}, chain_id={self._chain_id.hex()})"

    # ------------------------------------------------------------------
    # Nonce
    # ------------------------------------------------------------------

    def get_nonce(self, block_id: Optional[BlockId] = None) -> Request[Felt]:
        """Unsent request for the account's current on-chain nonce."""
        return self._provider.get_nonce(
            self._address, self._nonce_block_id if block_id is None else block_id
        )

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def transaction_hash(self, payload: TransactionPayload) -> Felt:
        return compute_transaction_hash(payload, self._chain_id, self._hasher)

    def sign_payload(self, payload: TransactionPayload) -> TransactionPayload:
        """Attach a signature over the payload's transaction hash."""
        tx_hash = self.transaction_hash(payload)
        signature = self._sign_hash(tx_hash)
        _logger.debug(
            "Payload signed",
            extra={
                "kind": payload.kind.value,
                "version": payload.version,
                "query": payload.query,
                "nonce": int(payload.nonce),
                "tx_hash": tx_hash.hex(),
            },
        )
        return payload.with_signature(signature.to_list())

    def sign_invoke(
        self, calls: Sequence[Call], params: AnyExecutionParams, *, query: bool = False
    ) -> Invoke:
        return self.sign_payload(self._builder.invoke(calls, params, query=query))

    def sign_declare(
        self, contract_class: ContractClass, params: AnyExecutionParams, *, query: bool = False
    ) -> Declare:
        return self.sign_payload(self._builder.declare(contract_class, params, query=query))

    def sign_deploy_account(
        self,
        class_hash: FeltLike,
        constructor_calldata: Iterable[FeltLike],
        salt: FeltLike,
        params: AnyExecutionParams,
        *,
        query: bool = False,
    ) -> DeployAccount:
        payload = build_deploy_account(
            self._hasher, class_hash, constructor_calldata, salt, params, query=query
        )
        if payload.contract_address != self._address:
            _logger.warning(
                "Deploy-account address differs from the account address",
                extra={
                    "account": self._address.hex(),
                    "derived": payload.contract_address.hex(),
                },
            )
        return self.sign_payload(payload)

    def sign_message_hash(self, msg_hash: FeltLike) -> Signature:
        return self._sign_hash(Felt(msg_hash))

    def verify_message_hash(self, msg_hash: FeltLike, signature: Signature) -> bool:
        return self._signer.verify(Felt(msg_hash), signature)

    def sign_typed_data(self, typed_data: TypedData) -> Signature:
        """Sign the SNIP-12 message hash of ``typed_data`` bound to this account."""
        return self._sign_hash(typed_data.message_hash(self._address, self._hasher))

    def verify_typed_data(self, typed_data: TypedData, signature: Signature) -> Request[bool]:
        """
        Ask the account contract whether ``signature`` signs ``typed_data``.

        Calls ``is_valid_signature(hash, signature)`` on the deployed
        account. Cairo 1 accounts answer the short string ``VALID``,
        Cairo 0 accounts answer 1; anything else is an invalid signature.

        Returns:
            Unsent request resolving to the verdict
        """
        msg_hash = typed_data.message_hash(self._address, self._hasher)
        sig = signature.to_list()
        call = Call.from_entry_point(
            self._address, "is_valid_signature", [msg_hash, len(sig), *sig]
        )
        return self._provider.call(call).map(_is_valid_signature)

    def _sign_hash(self, msg_hash: Felt) -> Signature:
        try:
            return self._signer.sign_transaction_hash(msg_hash)
        except StarkrailError:
            raise
        except Exception as exc:
            raise SigningFailureError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Fee estimation
    # ------------------------------------------------------------------

    async def estimate_fee(
        self,
        calls: Sequence[Call],
        *,
        version: int = 3,
        nonce: Optional[int] = None,
    ) -> FeeEstimate:
        """Estimate an invoke of ``calls`` at the current (or given) nonce."""
        if nonce is None:
            nonce = await self.get_nonce().send()
        payload = self.sign_invoke(calls, _zero_params(version, nonce), query=True)
        return await self._estimator.estimate(payload)

    async def estimate_declare_fee(
        self,
        contract_class: ContractClass,
        *,
        version: Optional[int] = None,
        nonce: Optional[int] = None,
    ) -> FeeEstimate:
        version = _declare_version(contract_class, version)
        if nonce is None:
            nonce = await self.get_nonce().send()
        payload = self.sign_declare(contract_class, _zero_params(version, nonce), query=True)
        return await self._estimator.estimate(payload)

    async def estimate_deploy_account_fee(
        self,
        class_hash: FeltLike,
        constructor_calldata: Iterable[FeltLike],
        salt: FeltLike,
        *,
        version: int = 3,
        nonce: int = 0,
    ) -> FeeEstimate:
        payload = self.sign_deploy_account(
            class_hash, constructor_calldata, salt, _zero_params(version, nonce), query=True
        )
        return await self._estimator.estimate(payload)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(
        self,
        calls: Sequence[Call],
        *,
        max_fee: Optional[int] = None,
        resource_bounds: Optional[ResourceBoundsMapping] = None,
        tip: int = 0,
        version: Optional[int] = None,
    ) -> Request[InvokeResponse]:
        """
        Prepare a signed invoke of ``calls``.

        Reads the nonce, estimates the fee unless ``max_fee`` (v1) or
        ``resource_bounds`` (v3) is given, and signs. The returned request
        has not been sent.

        Raises:
            NetworkError: Nonce read or estimation transport failure
            EstimationRevertedError: The simulated invoke reverted
            SigningFailureError: The signer failed
        """
        version = _fee_version(max_fee, resource_bounds, version, default=3)
        nonce = await self.get_nonce().send()

        if version == 1:
            if max_fee is None:
                estimate = await self.estimate_fee(calls, version=1, nonce=nonce)
                max_fee = self._estimator.to_max_fee(estimate)
            params: AnyExecutionParams = ExecutionParams(nonce=nonce, max_fee=max_fee)
        else:
            if resource_bounds is None:
                estimate = await self.estimate_fee(calls, version=3, nonce=nonce)
                resource_bounds = self._estimator.to_resource_bounds(estimate)
            params = ExecutionParamsV3(nonce=nonce, resource_bounds=resource_bounds, tip=tip)

        payload = self.sign_invoke(calls, params)
        _logger.info(
            "Invoke prepared",
            extra={
                "sender": self._address.hex(),
                "nonce": int(nonce),
                "version": payload.version,
                "calls": len(calls),
            },
        )
        return self._provider.invoke(payload)

    async def declare(
        self,
        contract_class: ContractClass,
        *,
        max_fee: Optional[int] = None,
        resource_bounds: Optional[ResourceBoundsMapping] = None,
        tip: int = 0,
        version: Optional[int] = None,
    ) -> Request[DeclareResponse]:
        """
        Prepare a signed declare of ``contract_class``.

        Legacy classes declare with v1. Sierra classes declare with v3, or
        v2 when ``max_fee`` or ``version=2`` is given.
        """
        is_legacy = isinstance(contract_class, LegacyContractClass)
        if version is None and max_fee is not None and not is_legacy:
            version = 2
        version = _declare_version(contract_class, version)
        nonce = await self.get_nonce().send()

        if version in (1, 2):
            if resource_bounds is not None:
                raise ValidationError(f"Declare v{version} takes max_fee, not resource bounds")
            if max_fee is None:
                estimate = await self.estimate_declare_fee(contract_class, version=version, nonce=nonce)
                max_fee = self._estimator.to_max_fee(estimate)
            params: AnyExecutionParams = ExecutionParams(nonce=nonce, max_fee=max_fee)
        else:
            if max_fee is not None:
                raise ValidationError("Declare v3 takes resource bounds, not max_fee")
            if resource_bounds is None:
                estimate = await self.estimate_declare_fee(contract_class, version=3, nonce=nonce)
                resource_bounds = self._estimator.to_resource_bounds(estimate)
            params = ExecutionParamsV3(nonce=nonce, resource_bounds=resource_bounds, tip=tip)

        payload = self.sign_declare(contract_class, params)
        _logger.info(
            "Declare prepared",
            extra={
                "sender": self._address.hex(),
                "class_hash": payload.class_hash.hex(),
                "nonce": int(nonce),
                "version": payload.version,
            },
        )
        return self._provider.declare(payload)

    async def deploy_account(
        self,
        class_hash: FeltLike,
        constructor_calldata: Iterable[FeltLike],
        salt: FeltLike,
        *,
        max_fee: Optional[int] = None,
        resource_bounds: Optional[ResourceBoundsMapping] = None,
        tip: int = 0,
        version: Optional[int] = None,
        nonce: int = 0,
    ) -> Request[DeployAccountResponse]:
        """
        Prepare a signed deploy-account transaction for this account.

        An undeployed account has no nonce to read; ``nonce`` defaults to 0.
        """
        constructor_calldata = list(constructor_calldata)
        version = _fee_version(max_fee, resource_bounds, version, default=3)

        if version == 1:
            if max_fee is None:
                estimate = await self.estimate_deploy_account_fee(
                    class_hash, constructor_calldata, salt, version=1, nonce=nonce
                )
                max_fee = self._estimator.to_max_fee(estimate)
            params: AnyExecutionParams = ExecutionParams(nonce=nonce, max_fee=max_fee)
        else:
            if resource_bounds is None:
                estimate = await self.estimate_deploy_account_fee(
                    class_hash, constructor_calldata, salt, version=3, nonce=nonce
                )
                resource_bounds = self._estimator.to_resource_bounds(estimate)
            params = ExecutionParamsV3(nonce=nonce, resource_bounds=resource_bounds, tip=tip)

        payload = self.sign_deploy_account(class_hash, constructor_calldata, salt, params)
        _logger.info(
            "Deploy account prepared",
            extra={"address": payload.contract_address.hex(), "version": payload.version},
        )
        return self._provider.deploy_account(payload)


def _zero_params(version: int, nonce: int) -> AnyExecutionParams:
    if version == 3:
        return ExecutionParamsV3(nonce=nonce)
    return ExecutionParams(nonce=nonce, max_fee=0)


def _fee_version(
    max_fee: Optional[int],
    resource_bounds: Optional[ResourceBoundsMapping],
    version: Optional[int],
    *,
    default: int,
) -> int:
    if max_fee is not None and resource_bounds is not None:
        raise ValidationError("Pass either max_fee or resource_bounds, not both")
    if version is None:
        if max_fee is not None:
            return 1
        return default
    if version not in (1, 3):
        raise ValidationError(f"Unsupported transaction version {version}", field="version")
    if version == 1 and resource_bounds is not None:
        raise ValidationError("Version 1 takes max_fee, not resource bounds", field="version")
    if version == 3 and max_fee is not None:
        raise ValidationError("Version 3 takes resource bounds, not max_fee", field="version")
    return version


def _declare_version(contract_class: ContractClass, version: Optional[int]) -> int:
    if isinstance(contract_class, LegacyContractClass):
        if version not in (None, 1):
            raise ValidationError("Legacy classes can only be declared with v1", field="version")
        return 1
    if version is None:
        return 3
    if version not in (2, 3):
        raise ValidationError("Sierra classes are declared with v2 or v3", field="version")
    return version


def _is_valid_signature(result: Sequence[Felt]) -> bool:
    return result[0] in (VALID_SIGNATURE, 1)
