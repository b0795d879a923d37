"""
Transaction statuses, receipts and submission responses.

The node reports two independent statuses: finality (how far the
transaction got) and execution (whether it ran to completion). The
receipt tracker folds them into one ``TrackedStatus``::

    PENDING ──> ACCEPTED_ON_L2 ──> ACCEPTED_ON_L1
       │  └────────────────────────────^
       ├──> REJECTED
       └──> REVERTED
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from starkrail.types.felt import Felt


class FinalityStatus(str, Enum):
    RECEIVED = "RECEIVED"
    CANDIDATE = "CANDIDATE"
    PRE_CONFIRMED = "PRE_CONFIRMED"
    ACCEPTED_ON_L2 = "ACCEPTED_ON_L2"
    ACCEPTED_ON_L1 = "ACCEPTED_ON_L1"
    REJECTED = "REJECTED"


class ExecutionStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    REVERTED = "REVERTED"


class TrackedStatus(Enum):
    """State of one submitted transaction as seen by the client."""

    PENDING = "pending"
    ACCEPTED_ON_L2 = "accepted_on_l2"
    ACCEPTED_ON_L1 = "accepted_on_l1"
    REJECTED = "rejected"
    REVERTED = "reverted"

    @property
    def is_accepted(self) -> bool:
        return self in (TrackedStatus.ACCEPTED_ON_L2, TrackedStatus.ACCEPTED_ON_L1)

    @property
    def is_failure(self) -> bool:
        return self in (TrackedStatus.REJECTED, TrackedStatus.REVERTED)

    @property
    def is_final(self) -> bool:
        """No further transition is possible."""
        return self in (
            TrackedStatus.ACCEPTED_ON_L1,
            TrackedStatus.REJECTED,
            TrackedStatus.REVERTED,
        )


def fold_status(
    finality: FinalityStatus, execution: Optional[ExecutionStatus]
) -> TrackedStatus:
    """Fold the node's two statuses into one tracked status."""
    if finality == FinalityStatus.REJECTED:
        return TrackedStatus.REJECTED
    if execution == ExecutionStatus.REVERTED:
        return TrackedStatus.REVERTED
    if finality == FinalityStatus.ACCEPTED_ON_L1:
        return TrackedStatus.ACCEPTED_ON_L1
    if finality == FinalityStatus.ACCEPTED_ON_L2:
        return TrackedStatus.ACCEPTED_ON_L2
    return TrackedStatus.PENDING


def _felt_list(values: Any) -> Tuple[Felt, ...]:
    return tuple(Felt(v) for v in values or ())


def _fee_amount(value: Any) -> Optional[int]:
    # RPC 0.7+ wraps the fee as {"amount", "unit"}
    if value is None:
        return None
    if isinstance(value, dict):
        return int(Felt(value["amount"]))
    return int(Felt(value))


@dataclass(frozen=True)
class Event:
    from_address: Felt
    keys: Tuple[Felt, ...] = ()
    data: Tuple[Felt, ...] = ()

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "Event":
        return cls(
            from_address=Felt(raw["from_address"]),
            keys=_felt_list(raw.get("keys")),
            data=_felt_list(raw.get("data")),
        )


@dataclass(frozen=True)
class TransactionReceipt:
    """Receipt of an executed transaction. Only ever built from a node response."""

    transaction_hash: Felt
    finality_status: FinalityStatus
    execution_status: Optional[ExecutionStatus] = None
    revert_reason: Optional[str] = None
    block_hash: Optional[Felt] = None
    block_number: Optional[int] = None
    actual_fee: Optional[int] = None
    events: Tuple[Event, ...] = field(default_factory=tuple)

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "TransactionReceipt":
        execution = raw.get("execution_status")
        block_hash = raw.get("block_hash")
        return cls(
            transaction_hash=Felt(raw["transaction_hash"]),
            finality_status=FinalityStatus(raw["finality_status"]),
            execution_status=ExecutionStatus(execution) if execution else None,
            revert_reason=raw.get("revert_reason"),
            block_hash=Felt(block_hash) if block_hash is not None else None,
            block_number=raw.get("block_number"),
            actual_fee=_fee_amount(raw.get("actual_fee")),
            events=tuple(Event.from_rpc(e) for e in raw.get("events", ())),
        )

    @property
    def status(self) -> TrackedStatus:
        return fold_status(self.finality_status, self.execution_status)

    def is_accepted(self) -> bool:
        return self.status.is_accepted

    def events_with_key(self, key: int) -> List[Event]:
        return [e for e in self.events if e.keys and e.keys[0] == key]


@dataclass(frozen=True)
class TransactionStatusResponse:
    """Result of ``starknet_getTransactionStatus``."""

    finality_status: FinalityStatus
    execution_status: Optional[ExecutionStatus] = None
    failure_reason: Optional[str] = None

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "TransactionStatusResponse":
        execution = raw.get("execution_status")
        return cls(
            finality_status=FinalityStatus(raw["finality_status"]),
            execution_status=ExecutionStatus(execution) if execution else None,
            failure_reason=raw.get("failure_reason"),
        )

    @property
    def status(self) -> TrackedStatus:
        return fold_status(self.finality_status, self.execution_status)


# ============================================================================
# Submission responses
# ============================================================================

@dataclass(frozen=True)
class InvokeResponse:
    transaction_hash: Felt

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "InvokeResponse":
        return cls(transaction_hash=Felt(raw["transaction_hash"]))


@dataclass(frozen=True)
class DeclareResponse:
    transaction_hash: Felt
    class_hash: Felt

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "DeclareResponse":
        return cls(
            transaction_hash=Felt(raw["transaction_hash"]),
            class_hash=Felt(raw["class_hash"]),
        )


@dataclass(frozen=True)
class DeployAccountResponse:
    transaction_hash: Felt
    contract_address: Felt

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "DeployAccountResponse":
        return cls(
            transaction_hash=Felt(raw["transaction_hash"]),
            contract_address=Felt(raw["contract_address"]),
        )
