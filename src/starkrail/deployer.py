"""
Contract deployment through the Universal Deployer Contract (UDC).

A deployment is one invoke of the UDC's ``deployContract`` entry point
with calldata ``[class_hash, salt, unique, len(ctor), *ctor]``. The
resulting address is derived locally, so it is known before the invoke
is sent and can be checked against the ``ContractDeployed`` event once
the transaction is included.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from starkrail.account.account import Account
from starkrail.constants import (
    FIELD_PRIME,
    UDC_ADDRESS,
    UDC_DEPLOY_ENTRY_POINT,
    UDC_DEPLOYED_EVENT,
)
from starkrail.crypto.selector import selector_from_name
from starkrail.errors import AddressRetrievalFailedError
from starkrail.hash.address import compute_udc_address
from starkrail.provider.request import Request
from starkrail.types.call import Call
from starkrail.types.felt import Felt, FeltLike, parse_address
from starkrail.types.receipt import InvokeResponse, TransactionReceipt
from starkrail.types.resources import ResourceBoundsMapping
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class DeployResult:
    """Transaction hash of the UDC invoke and the derived contract address."""

    transaction_hash: Felt
    contract_address: Felt
    salt: Felt


def random_salt() -> Felt:
    return Felt(secrets.randbelow(FIELD_PRIME))


class Deployer:
    """
    Deploys contract instances through the UDC on behalf of one account.

    Example:
        >>> deployer = Deployer(account)
        >>> request = await deployer.deploy(class_hash, salt=20, constructor_calldata=[500])
        >>> result = await request.send()
        >>> result.contract_address
    """

    def __init__(self, account: Account, udc_address: FeltLike = UDC_ADDRESS) -> None:
        self._account = account
        self._udc_address = parse_address(udc_address)

    @property
    def udc_address(self) -> Felt:
        return self._udc_address

    def compute_address(
        self,
        class_hash: FeltLike,
        salt: FeltLike,
        constructor_calldata: Iterable[FeltLike] = (),
        unique: bool = True,
    ) -> Felt:
        """
        Address the UDC will assign to this deployment. Pure.

        ``unique=True`` scopes the salt to the deploying account and the
        deployer to the UDC; ``unique=False`` uses deployer 0.
        """
        return compute_udc_address(
            self._account.hasher,
            Felt(class_hash),
            Felt(salt),
            [Felt(v) for v in constructor_calldata],
            unique,
            self._account.address,
            self._udc_address,
        )

    def build_deploy_call(
        self,
        class_hash: FeltLike,
        salt: FeltLike,
        constructor_calldata: Sequence[FeltLike] = (),
        unique: bool = True,
    ) -> Call:
        calldata = [Felt(v) for v in constructor_calldata]
        return Call.from_entry_point(
            self._udc_address,
            UDC_DEPLOY_ENTRY_POINT,
            [Felt(class_hash), Felt(salt), Felt(int(unique)), Felt(len(calldata)), *calldata],
        )

    async def deploy(
        self,
        class_hash: FeltLike,
        *,
        unique: bool = True,
        salt: Optional[FeltLike] = None,
        constructor_calldata: Sequence[FeltLike] = (),
        max_fee: Optional[int] = None,
        resource_bounds: Optional[ResourceBoundsMapping] = None,
        version: Optional[int] = None,
    ) -> Request[DeployResult]:
        """
        Prepare the UDC invoke deploying ``class_hash``.

        A missing salt is drawn from ``secrets``. The returned request has
        not been sent; its result carries the locally derived address.
        """
        salt = random_salt() if salt is None else Felt(salt)
        calldata = [Felt(v) for v in constructor_calldata]
        call = self.build_deploy_call(class_hash, salt, calldata, unique)
        address = self.compute_address(class_hash, salt, calldata, unique)

        request = await self._account.execute(
            [call], max_fee=max_fee, resource_bounds=resource_bounds, version=version
        )
        _logger.info(
            "UDC deployment prepared",
            extra={
                "class_hash": Felt(class_hash).hex(),
                "unique": unique,
                "contract_address": address.hex(),
            },
        )

        def to_result(response: InvokeResponse) -> DeployResult:
            return DeployResult(
                transaction_hash=response.transaction_hash,
                contract_address=address,
                salt=salt,
            )

        return request.map(to_result)

    def find_contract_address(self, transaction_hash: FeltLike) -> Request[Felt]:
        """
        Read the deployed address from the UDC's ``ContractDeployed`` event.

        Raises (on send):
            AddressRetrievalFailedError: The receipt has no such event, or several
        """
        tx_hash = Felt(transaction_hash)
        return self._account.provider.get_transaction_receipt(tx_hash).map(
            self.address_from_receipt
        )

    def address_from_receipt(self, receipt: TransactionReceipt) -> Felt:
        key = selector_from_name(UDC_DEPLOYED_EVENT)
        events = [
            e for e in receipt.events_with_key(key) if e.from_address == self._udc_address
        ]
        if len(events) != 1 or not events[0].data:
            raise AddressRetrievalFailedError(
                f"Expected one {UDC_DEPLOYED_EVENT} event, found {len(events)}",
                tx_hash=receipt.transaction_hash.hex(),
            )
        return events[0].data[0]
