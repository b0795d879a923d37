"""
Fee types.

Legacy transactions (v1/v2) bound their fee with a single ``max_fee``.
v3 transactions bound each priced resource separately with a maximum
amount (u64) and a maximum price per unit (u128).
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from starkrail.constants import MAX_U64, MAX_U128


def _int_from_wire(value: Any) -> Any:
    if isinstance(value, str):
        return int(value, 16) if value.lower().startswith("0x") else int(value)
    return value


WireInt = Annotated[int, BeforeValidator(_int_from_wire)]


class PriceUnit(str, Enum):
    WEI = "WEI"
    FRI = "FRI"


class ResourceBounds(BaseModel):
    """Upper bounds for one resource."""

    model_config = ConfigDict(frozen=True)

    max_amount: WireInt = Field(default=0, ge=0, le=MAX_U64)
    max_price_per_unit: WireInt = Field(default=0, ge=0, le=MAX_U128)

    @property
    def max_cost(self) -> int:
        return self.max_amount * self.max_price_per_unit

    def to_rpc(self) -> Dict[str, str]:
        return {
            "max_amount": hex(self.max_amount),
            "max_price_per_unit": hex(self.max_price_per_unit),
        }


class ResourceBoundsMapping(BaseModel):
    """Bounds for L1 gas, L1 data gas and L2 gas."""

    model_config = ConfigDict(frozen=True)

    l1_gas: ResourceBounds = Field(default_factory=ResourceBounds)
    l1_data_gas: ResourceBounds = Field(default_factory=ResourceBounds)
    l2_gas: ResourceBounds = Field(default_factory=ResourceBounds)

    @classmethod
    def zero(cls) -> "ResourceBoundsMapping":
        return cls()

    @property
    def max_cost(self) -> int:
        return self.l1_gas.max_cost + self.l1_data_gas.max_cost + self.l2_gas.max_cost

    def to_rpc(self) -> Dict[str, Dict[str, str]]:
        return {
            "l1_gas": self.l1_gas.to_rpc(),
            "l1_data_gas": self.l1_data_gas.to_rpc(),
            "l2_gas": self.l2_gas.to_rpc(),
        }


class FeeEstimate(BaseModel):
    """
    Result of ``starknet_estimateFee`` for one transaction.

    Wire values are hex strings; they are parsed into ints.
    """

    model_config = ConfigDict(frozen=True)

    overall_fee: WireInt = Field(ge=0)
    l1_gas_consumed: WireInt = Field(default=0, ge=0)
    l1_gas_price: WireInt = Field(default=0, ge=0)
    l2_gas_consumed: WireInt = Field(default=0, ge=0)
    l2_gas_price: WireInt = Field(default=0, ge=0)
    l1_data_gas_consumed: WireInt = Field(default=0, ge=0)
    l1_data_gas_price: WireInt = Field(default=0, ge=0)
    unit: PriceUnit = PriceUnit.WEI
