"""
Network and engine configuration.

Networks are described by a plain dataclass keyed by the Network enum.
Tunable engine policy (fee margins, receipt polling) lives in frozen
pydantic models so out-of-range values are rejected at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from starkrail.constants import (
    CHAIN_ID_MAINNET,
    CHAIN_ID_SEPOLIA,
    DEFAULT_AMOUNT_MULTIPLIER,
    DEFAULT_FEE_MULTIPLIER,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_UNIT_PRICE_MULTIPLIER,
    ETH_TOKEN_ADDRESS,
    MIN_POLL_INTERVAL_SECONDS,
    STRK_TOKEN_ADDRESS,
    UDC_ADDRESS,
)

__all__ = [
    "Network",
    "NetworkConfig",
    "NETWORKS",
    "get_network_config",
    "FeeConfig",
    "TrackerConfig",
]


class Network(str, Enum):
    MAINNET = "mainnet"
    SEPOLIA = "sepolia"
    DEVNET = "devnet"


@dataclass(frozen=True)
class NetworkConfig:
    name: Network
    chain_id: int
    rpc_url: str
    udc_address: int
    eth_token: int
    strk_token: int


NETWORKS: dict[Network, NetworkConfig] = {
    Network.MAINNET: NetworkConfig(
        name=Network.MAINNET,
        chain_id=CHAIN_ID_MAINNET,
        rpc_url="https://starknet-mainnet.public.blastapi.io/rpc/v0_8",
        udc_address=UDC_ADDRESS,
        eth_token=ETH_TOKEN_ADDRESS,
        strk_token=STRK_TOKEN_ADDRESS,
    ),
    Network.SEPOLIA: NetworkConfig(
        name=Network.SEPOLIA,
        chain_id=CHAIN_ID_SEPOLIA,
        rpc_url="https://starknet-sepolia.public.blastapi.io/rpc/v0_8",
        udc_address=UDC_ADDRESS,
        eth_token=ETH_TOKEN_ADDRESS,
        strk_token=STRK_TOKEN_ADDRESS,
    ),
    # starknet-devnet forks Sepolia's chain id and predeploys the same contracts
    Network.DEVNET: NetworkConfig(
        name=Network.DEVNET,
        chain_id=CHAIN_ID_SEPOLIA,
        rpc_url="http://127.0.0.1:5050/rpc",
        udc_address=UDC_ADDRESS,
        eth_token=ETH_TOKEN_ADDRESS,
        strk_token=STRK_TOKEN_ADDRESS,
    ),
}


def get_network_config(network: Network, rpc_url: Optional[str] = None) -> NetworkConfig:
    cfg = NETWORKS[network]
    if rpc_url:
        return replace(cfg, rpc_url=rpc_url)
    return cfg


# ============================================================================
# Engine Policy
# ============================================================================

class FeeConfig(BaseModel):
    """
    Fee estimation policy.

    Multipliers scale an estimate into the bounds that are finally signed.
    A multiplier below 1.0 would sign bounds under the estimated cost and
    is rejected.
    """

    model_config = ConfigDict(frozen=True)

    fee_multiplier: float = Field(
        default=DEFAULT_FEE_MULTIPLIER,
        ge=1.0,
        description="Multiplier applied to overall_fee to get max_fee (v1/v2)",
    )
    amount_multiplier: float = Field(
        default=DEFAULT_AMOUNT_MULTIPLIER,
        ge=1.0,
        description="Multiplier applied to consumed gas amounts (v3)",
    )
    unit_price_multiplier: float = Field(
        default=DEFAULT_UNIT_PRICE_MULTIPLIER,
        ge=1.0,
        description="Multiplier applied to gas unit prices (v3)",
    )
    skip_validate: bool = Field(
        default=True,
        description="Send SKIP_VALIDATE with fee estimation requests",
    )


class TrackerConfig(BaseModel):
    """Receipt polling policy. ``timeout=None`` waits until a terminal status."""

    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        ge=MIN_POLL_INTERVAL_SECONDS,
        description="Seconds between status polls",
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional wait deadline in seconds",
    )
