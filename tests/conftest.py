"""
Shared fixtures: an in-memory chain, crypto doubles and a funded account.
"""

from typing import List

import pytest

from starkrail.account import Account
from starkrail.constants import CHAIN_ID_SEPOLIA, ETH_TOKEN_ADDRESS
from starkrail.deployer import Deployer
from starkrail.provider import JsonRpcProvider
from starkrail.types.felt import Felt

from tests.simulator import ChainSimulator, FakeHasher, FakeSigner


# =============================================================================
# Test Constants
# =============================================================================

CHAIN_ID = CHAIN_ID_SEPOLIA
ACCOUNT_ADDRESS = 0x0111AC6A8A0F7E4AE3F3C7F5A1E1C11C7C8D6B1E2E9B1A3C6C4B2A1D0E9F8A7B
OTHER_ADDRESS = 0x0222BD7B9B1F8F5BF4F4D8F6B2F2D22D8D9E7C2F3FAC2B4D7D5C3B2E1FAF9B8C
RECIPIENT = 0x0333CE8CAC2F9F6CF5F5E9F7C3F3E33E9EAF8D3F4FBD3C5E8E6D4C3F2FBFAC9D
TOKEN = ETH_TOKEN_ADDRESS
PRIVATE_KEY = 0xC0FFEE
CLASS_HASH = 0xAB
INITIAL_BALANCE = 10**18


# =============================================================================
# Fixtures - Crypto
# =============================================================================


@pytest.fixture
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner(PRIVATE_KEY)


# =============================================================================
# Fixtures - Chain
# =============================================================================


@pytest.fixture
def chain(hasher: FakeHasher) -> ChainSimulator:
    """Simulated chain with an ERC20 balance for the test account."""
    sim = ChainSimulator(CHAIN_ID, hasher)
    sim.balances[(TOKEN, ACCOUNT_ADDRESS)] = INITIAL_BALANCE

    def balance_of(calldata: List[Felt]) -> List[int]:
        amount = sim.balances.get((TOKEN, int(calldata[0])), 0)
        return [amount & (2**128 - 1), amount >> 128]

    sim.register_call(TOKEN, "balanceOf", balance_of)
    return sim


@pytest.fixture
def provider(chain: ChainSimulator) -> JsonRpcProvider:
    return JsonRpcProvider(chain)


@pytest.fixture
def account(provider: JsonRpcProvider, signer: FakeSigner, hasher: FakeHasher) -> Account:
    return Account(ACCOUNT_ADDRESS, signer, provider, CHAIN_ID, hasher=hasher)


@pytest.fixture
def deployer(account: Account) -> Deployer:
    return Deployer(account)
