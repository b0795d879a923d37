"""Constants for starkrail.

This module defines protocol-level constant values used across the engine,
including the field modulus, transaction hash prefixes, chain identifiers,
fee defaults and polling parameters.
"""

# Field Constants
FIELD_PRIME = 2**251 + 17 * 2**192 + 1
MAX_ADDRESS = 2**251 - 256
MASK_250 = 2**250 - 1
MAX_U64 = 2**64 - 1
MAX_U128 = 2**128 - 1

# Query (simulation-only) transaction versions are offset by 2**128
QUERY_VERSION_BASE = 2**128

# Transaction Hash Prefixes (short strings)
TX_PREFIX_INVOKE = 0x696E766F6B65  # "invoke"
TX_PREFIX_DECLARE = 0x6465636C617265  # "declare"
TX_PREFIX_DEPLOY_ACCOUNT = 0x6465706C6F795F6163636F756E74  # "deploy_account"

# Contract Address Prefix ("STARKNET_CONTRACT_ADDRESS")
CONTRACT_ADDRESS_PREFIX = 0x535441524B4E45545F434F4E54524143545F41444452455353

# Resource names packed into v3 resource bounds
L1_GAS_NAME = 0x4C315F474153  # "L1_GAS"
L2_GAS_NAME = 0x4C325F474153  # "L2_GAS"
L1_DATA_GAS_NAME = 0x4C315F44415441  # "L1_DATA"

# Data availability modes
DA_MODE_L1 = 0
DA_MODE_L2 = 1

# Chain IDs (short strings)
CHAIN_ID_MAINNET = 0x534E5F4D41494E  # "SN_MAIN"
CHAIN_ID_SEPOLIA = 0x534E5F5345504F4C4941  # "SN_SEPOLIA"
CHAIN_ID_GOERLI = 0x534E5F474F45524C49  # "SN_GOERLI"

# Off-chain messages (SNIP-12)
STARKNET_MESSAGE_PREFIX = 0x537461726B4E6574204D657373616765  # "StarkNet Message"
VALID_SIGNATURE = 0x56414C4944  # "VALID"

# Universal Deployer Contract
UDC_ADDRESS = 0x041A78E741E5AF2FEC34B695679BC6891742439F7AFB8484ECD7766661AD02BF
UDC_DEPLOY_ENTRY_POINT = "deployContract"
UDC_DEPLOYED_EVENT = "ContractDeployed"

# Fee Token Contracts
ETH_TOKEN_ADDRESS = 0x049D36570D4E46F48E99674BD3FCC84644DDD6B96F7C741B1562B82F9E004DC7
STRK_TOKEN_ADDRESS = 0x04718F5A0FC34CC1AF16A1CDEE98FFB20C31F5CD61D6AB07201858F4287C938D

# Fee Constants
DEFAULT_FEE_MULTIPLIER = 1.5
DEFAULT_AMOUNT_MULTIPLIER = 1.5
DEFAULT_UNIT_PRICE_MULTIPLIER = 1.5
SKIP_VALIDATE_FLAG = "SKIP_VALIDATE"

# Network Constants
PROVIDER_TIMEOUT_SECONDS = 30

# Receipt polling
DEFAULT_POLL_INTERVAL_SECONDS = 5.0
MIN_POLL_INTERVAL_SECONDS = 0.01

# Block tags
BLOCK_TAG_LATEST = "latest"
BLOCK_TAG_PRE_CONFIRMED = "pre_confirmed"

__all__ = [
    "FIELD_PRIME",
    "MAX_ADDRESS",
    "MASK_250",
    "MAX_U64",
    "MAX_U128",
    "QUERY_VERSION_BASE",
    "TX_PREFIX_INVOKE",
    "TX_PREFIX_DECLARE",
    "TX_PREFIX_DEPLOY_ACCOUNT",
    "CONTRACT_ADDRESS_PREFIX",
    "L1_GAS_NAME",
    "L2_GAS_NAME",
    "L1_DATA_GAS_NAME",
    "DA_MODE_L1",
    "DA_MODE_L2",
    "CHAIN_ID_MAINNET",
    "CHAIN_ID_SEPOLIA",
    "CHAIN_ID_GOERLI",
    "STARKNET_MESSAGE_PREFIX",
    "VALID_SIGNATURE",
    "UDC_ADDRESS",
    "UDC_DEPLOY_ENTRY_POINT",
    "UDC_DEPLOYED_EVENT",
    "ETH_TOKEN_ADDRESS",
    "STRK_TOKEN_ADDRESS",
    "DEFAULT_FEE_MULTIPLIER",
    "DEFAULT_AMOUNT_MULTIPLIER",
    "DEFAULT_UNIT_PRICE_MULTIPLIER",
    "SKIP_VALIDATE_FLAG",
    "PROVIDER_TIMEOUT_SECONDS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "MIN_POLL_INTERVAL_SECONDS",
    "BLOCK_TAG_LATEST",
    "BLOCK_TAG_PRE_CONFIRMED",
]
