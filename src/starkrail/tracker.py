"""
Receipt tracking.

A ReceiptTracker follows one transaction hash through its status state
machine by polling the provider. The client never predicts a transition;
every state change is an observation.

    PENDING        -> ACCEPTED_ON_L2 | ACCEPTED_ON_L1 | REJECTED | REVERTED
    ACCEPTED_ON_L2 -> ACCEPTED_ON_L1
    ACCEPTED_ON_L1, REJECTED, REVERTED are final

A hash the node does not know yet is reported as PENDING.
"""

from __future__ import annotations

import asyncio
from typing import Dict, FrozenSet, Optional

from starkrail.config import TrackerConfig
from starkrail.errors import (
    InvalidStateTransitionError,
    ReceiptTimeoutError,
    RpcError,
    TransactionRejectedError,
    TransactionRevertedError,
    ValidationError,
)
from starkrail.errors.rpc import TRANSACTION_HASH_NOT_FOUND
from starkrail.provider.base import Provider
from starkrail.types.felt import Felt, FeltLike
from starkrail.types.receipt import TrackedStatus, TransactionReceipt
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)

# Observations allowed after each state (staying put is always allowed)
ALLOWED_TRANSITIONS: Dict[TrackedStatus, FrozenSet[TrackedStatus]] = {
    TrackedStatus.PENDING: frozenset(
        {
            TrackedStatus.PENDING,
            TrackedStatus.ACCEPTED_ON_L2,
            TrackedStatus.ACCEPTED_ON_L1,
            TrackedStatus.REJECTED,
            TrackedStatus.REVERTED,
        }
    ),
    TrackedStatus.ACCEPTED_ON_L2: frozenset(
        {TrackedStatus.ACCEPTED_ON_L2, TrackedStatus.ACCEPTED_ON_L1}
    ),
    TrackedStatus.ACCEPTED_ON_L1: frozenset({TrackedStatus.ACCEPTED_ON_L1}),
    TrackedStatus.REJECTED: frozenset({TrackedStatus.REJECTED}),
    TrackedStatus.REVERTED: frozenset({TrackedStatus.REVERTED}),
}


def is_valid_transition(current: TrackedStatus, observed: TrackedStatus) -> bool:
    return observed in ALLOWED_TRANSITIONS[current]


class ReceiptTracker:
    """
    Tracks one submitted transaction until it reaches a final status.

    Example:
        >>> tracker = ReceiptTracker(provider, response.transaction_hash)
        >>> receipt = await tracker.wait(timeout=120)
        >>> receipt.is_accepted()
        True
    """

    def __init__(
        self,
        provider: Provider,
        transaction_hash: FeltLike,
        config: Optional[TrackerConfig] = None,
    ) -> None:
        self._provider = provider
        self._tx_hash = Felt(transaction_hash)
        self._config = config or TrackerConfig()
        self._status = TrackedStatus.PENDING
        self._failure_reason: Optional[str] = None
        self._polls = 0

    @property
    def transaction_hash(self) -> Felt:
        return self._tx_hash

    @property
    def status(self) -> TrackedStatus:
        return self._status

    @property
    def failure_reason(self) -> Optional[str]:
        return self._failure_reason

    @property
    def polls(self) -> int:
        return self._polls

    def is_accepted(self) -> bool:
        return self._status.is_accepted

    async def poll(self) -> TrackedStatus:
        """
        Fetch the status once and apply it.

        Raises:
            InvalidStateTransitionError: The observed status cannot follow the current one
            RpcError: The node rejected the status query (other than "hash not found")
            NetworkError: Transport failure
        """
        self._polls += 1
        try:
            response = await self._provider.get_transaction_status(self._tx_hash).send()
        except RpcError as exc:
            if exc.rpc_code != TRANSACTION_HASH_NOT_FOUND:
                raise
            observed, reason = TrackedStatus.PENDING, None
        else:
            observed, reason = response.status, response.failure_reason

        self._apply(observed, reason)
        return self._status

    def _apply(self, observed: TrackedStatus, reason: Optional[str]) -> None:
        current = self._status
        if not is_valid_transition(current, observed):
            raise InvalidStateTransitionError(
                current.name, observed.name, tx_hash=self._tx_hash.hex()
            )
        if observed != current:
            _logger.info(
                "Transaction status changed",
                extra={
                    "tx_hash": self._tx_hash.hex(),
                    "from_status": current.name,
                    "to_status": observed.name,
                },
            )
        self._status = observed
        if reason:
            self._failure_reason = reason

    async def get_receipt(self) -> TransactionReceipt:
        """
        Fetch the full receipt and apply its status.

        The receipt endpoint may lag the status endpoint; a receipt whose
        status is behind the tracked one leaves the tracked status as is.
        """
        receipt = await self._provider.get_transaction_receipt(self._tx_hash).send()
        if is_valid_transition(self._status, receipt.status):
            self._apply(receipt.status, receipt.revert_reason)
        else:
            _logger.debug(
                "Receipt status behind tracked status",
                extra={
                    "tx_hash": self._tx_hash.hex(),
                    "status": self._status.name,
                    "receipt_status": receipt.status.name,
                },
            )
        return receipt

    async def wait(
        self,
        require_l1: bool = False,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> TransactionReceipt:
        """
        Poll until the transaction is accepted (on L1 if ``require_l1``).

        There is no default deadline; pass ``timeout`` (or set it in the
        tracker config) for a bounded wait, or cancel the awaiting task.

        Returns:
            The receipt of the accepted transaction

        Raises:
            TransactionRejectedError: The transaction never entered a block
            TransactionRevertedError: The transaction was included but reverted
            ReceiptTimeoutError: The deadline passed first
        """
        timeout = self._config.timeout if timeout is None else timeout
        interval = self._config.poll_interval if poll_interval is None else poll_interval
        if interval <= 0:
            raise ValidationError("poll_interval must be positive", field="poll_interval")

        if timeout is None:
            return await self._wait_loop(require_l1, interval)
        try:
            return await asyncio.wait_for(self._wait_loop(require_l1, interval), timeout)
        except asyncio.TimeoutError as exc:
            _logger.warning(
                "Timed out waiting for transaction",
                extra={"tx_hash": self._tx_hash.hex(), "status": self._status.name},
            )
            raise ReceiptTimeoutError(
                self._tx_hash.hex(), timeout, last_status=self._status.name
            ) from exc

    async def _wait_loop(self, require_l1: bool, interval: float) -> TransactionReceipt:
        while True:
            status = await self.poll()
            if status == TrackedStatus.REJECTED:
                raise TransactionRejectedError(self._tx_hash.hex(), reason=self._failure_reason)
            if status == TrackedStatus.REVERTED:
                reason = self._failure_reason
                if reason is None:
                    reason = (await self.get_receipt()).revert_reason
                raise TransactionRevertedError(self._tx_hash.hex(), revert_reason=reason)
            if status == TrackedStatus.ACCEPTED_ON_L1 or (
                status == TrackedStatus.ACCEPTED_ON_L2 and not require_l1
            ):
                return await self.get_receipt()
            await asyncio.sleep(interval)
