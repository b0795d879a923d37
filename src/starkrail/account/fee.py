"""
Fee estimation.

The estimator simulates a query payload through the provider and turns
the result into the bounds that are finally signed. The signed bounds are
always the estimate scaled up by a multiplier (at least 1.0, rounded up),
never the raw estimate. A simulation that reverts is an error; there is
no fallback fee.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Optional

from starkrail.config import FeeConfig
from starkrail.constants import MAX_U64, MAX_U128, SKIP_VALIDATE_FLAG
from starkrail.errors import (
    DecodeError,
    EstimationRevertedError,
    RpcError,
    ValidationError,
)
from starkrail.errors.rpc import CONTRACT_ERROR, TRANSACTION_EXECUTION_ERROR
from starkrail.provider.base import Provider
from starkrail.types.resources import FeeEstimate, ResourceBounds, ResourceBoundsMapping
from starkrail.types.transactions import TransactionPayload
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)

_REVERT_CODES = (CONTRACT_ERROR, TRANSACTION_EXECUTION_ERROR)


def check_multiplier(value: float, name: str = "multiplier") -> float:
    if value < 1.0:
        raise ValidationError(
            f"{name} must be at least 1.0, got {value}",
            field=name,
            details={"value": value},
        )
    return value


def scale_up(value: int, multiplier: float) -> int:
    """``ceil(value * multiplier)`` in exact arithmetic."""
    return math.ceil(Fraction(value) * Fraction(str(multiplier)))


class FeeEstimator:
    """
    Estimates fees for query payloads and scales them into signed bounds.

    Example:
        >>> estimator = FeeEstimator(provider)
        >>> estimate = await estimator.estimate(query_payload)
        >>> max_fee = estimator.to_max_fee(estimate)
    """

    def __init__(self, provider: Provider, config: Optional[FeeConfig] = None) -> None:
        self._provider = provider
        self._config = config or FeeConfig()

    @property
    def config(self) -> FeeConfig:
        return self._config

    async def estimate(self, payload: TransactionPayload) -> FeeEstimate:
        """
        Simulate ``payload`` and return its estimated cost.

        Raises:
            ValidationError: The payload is not a query payload
            EstimationRevertedError: The simulation reverted
            RpcError: Any other rejection by the node
            NetworkError: Transport failure
        """
        if not payload.query:
            raise ValidationError("Only query payloads can be estimated", field="payload")

        flags = [SKIP_VALIDATE_FLAG] if self._config.skip_validate else []
        try:
            estimates = await self._provider.estimate_fee([payload], flags).send()
        except RpcError as exc:
            if exc.rpc_code in _REVERT_CODES:
                _logger.warning(
                    "Fee estimation reverted",
                    extra={"rpc_code": exc.rpc_code, "kind": payload.kind.value},
                )
                raise EstimationRevertedError(
                    exc.revert_reason or exc.rpc_message,
                    rpc_code=exc.rpc_code,
                ) from exc
            raise

        if len(estimates) != 1:
            raise DecodeError(
                f"Expected one fee estimate, got {len(estimates)}",
                method="starknet_estimateFee",
            )
        estimate = estimates[0]
        _logger.debug(
            "Fee estimated",
            extra={"kind": payload.kind.value, "overall_fee": estimate.overall_fee},
        )
        return estimate

    def to_max_fee(self, estimate: FeeEstimate, multiplier: Optional[float] = None) -> int:
        """``ceil(overall_fee * multiplier)``; multiplier 1.0 returns the estimate."""
        multiplier = check_multiplier(
            self._config.fee_multiplier if multiplier is None else multiplier
        )
        return scale_up(estimate.overall_fee, multiplier)

    def to_resource_bounds(
        self,
        estimate: FeeEstimate,
        amount_multiplier: Optional[float] = None,
        unit_price_multiplier: Optional[float] = None,
    ) -> ResourceBoundsMapping:
        """Scale consumed gas and gas prices into v3 resource bounds."""
        amount_multiplier = check_multiplier(
            self._config.amount_multiplier if amount_multiplier is None else amount_multiplier,
            "amount_multiplier",
        )
        unit_price_multiplier = check_multiplier(
            self._config.unit_price_multiplier
            if unit_price_multiplier is None
            else unit_price_multiplier,
            "unit_price_multiplier",
        )
        return ResourceBoundsMapping(
            l1_gas=_bounds(
                estimate.l1_gas_consumed, estimate.l1_gas_price, amount_multiplier, unit_price_multiplier
            ),
            l1_data_gas=_bounds(
                estimate.l1_data_gas_consumed,
                estimate.l1_data_gas_price,
                amount_multiplier,
                unit_price_multiplier,
            ),
            l2_gas=_bounds(
                estimate.l2_gas_consumed, estimate.l2_gas_price, amount_multiplier, unit_price_multiplier
            ),
        )


def _bounds(amount: int, price: int, amount_multiplier: float, price_multiplier: float) -> ResourceBounds:
    max_amount = scale_up(amount, amount_multiplier)
    max_price = scale_up(price, price_multiplier)
    if max_amount > MAX_U64:
        raise ValidationError("Scaled gas amount does not fit in u64", field="max_amount")
    if max_price > MAX_U128:
        raise ValidationError("Scaled gas price does not fit in u128", field="max_price_per_unit")
    return ResourceBounds(max_amount=max_amount, max_price_per_unit=max_price)
