#!/usr/bin/env python3
"""
Starknet lifecycle smoke test against a live node (starknet-devnet by default).

Runs: batch read -> estimated transfer -> confirmation -> optional UDC deploy.

Usage:
    python test_scripts/devnet_lifecycle.py

Environment Variables:
    ACCOUNT_ADDRESS: Address of a deployed account (devnet prints predeployed ones)
    ACCOUNT_PRIVATE_KEY: Its private key
    RPC_URL: Node RPC URL (default: http://127.0.0.1:5050/rpc)
    DEPLOY_CLASS_HASH: Declared class to deploy through the UDC (optional)
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

from starkrail import (
    Account,
    Call,
    Deployer,
    JsonRpcProvider,
    Network,
    ReceiptTracker,
    StarkrailError,
    TrackerConfig,
    configure_logging,
    get_network_config,
)
from starkrail.crypto.stark import StarkCurveSigner

load_dotenv()

ACCOUNT_ADDRESS = os.getenv("ACCOUNT_ADDRESS", "")
ACCOUNT_PRIVATE_KEY = os.getenv("ACCOUNT_PRIVATE_KEY", "")
RPC_URL = os.getenv("RPC_URL")
DEPLOY_CLASS_HASH = os.getenv("DEPLOY_CLASS_HASH")

TRACKER = TrackerConfig(poll_interval=1.0, timeout=120.0)


def format_eth(amount_wei: int) -> str:
    return f"{amount_wei / 1e18:.6f}"


def header(title: str) -> None:
    print("\n" + "=" * 43)
    print(title)
    print("=" * 43)


async def main() -> int:
    if not ACCOUNT_ADDRESS or not ACCOUNT_PRIVATE_KEY:
        print("ERROR: ACCOUNT_ADDRESS and ACCOUNT_PRIVATE_KEY must be set")
        return 1

    configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))
    network = get_network_config(Network.DEVNET, rpc_url=RPC_URL)
    provider = JsonRpcProvider.from_network(network)

    chain_id = await provider.chain_id().send()
    account = Account(
        ACCOUNT_ADDRESS,
        StarkCurveSigner(int(ACCOUNT_PRIVATE_KEY, 16)),
        provider,
        chain_id,
    )
    balance_call = Call.from_entry_point(network.eth_token, "balanceOf", [account.address])

    header("STEP 1: Batch read")
    nonce, balance = await provider.batch_requests(
        account.get_nonce(),
        provider.call(balance_call),
    ).send()
    print(f"  Chain:   {chain_id.hex()}")
    print(f"  Account: {account.address.hex()}")
    print(f"  Nonce:   {nonce.get_or_raise()}")
    print(f"  ETH:     {format_eth(balance.get_or_raise()[0])}")

    header("STEP 2: Self-transfer (v3, estimated)")
    transfer = Call.from_entry_point(network.eth_token, "transfer", [account.address, 1, 0])
    request = await account.execute([transfer])
    response = await request.send()
    print(f"  Tx: {response.transaction_hash.hex()}")

    tracker = ReceiptTracker(provider, response.transaction_hash, TRACKER)
    receipt = await tracker.wait()
    print(f"  Status: {tracker.status.value} after {tracker.polls} polls")
    print(f"  Fee:    {receipt.actual_fee}")

    if DEPLOY_CLASS_HASH:
        header("STEP 3: UDC deploy")
        deployer = Deployer(account, udc_address=network.udc_address)
        request = await deployer.deploy(int(DEPLOY_CLASS_HASH, 16))
        result = await request.send()
        print(f"  Precomputed address: {result.contract_address.hex()}")

        await ReceiptTracker(provider, result.transaction_hash, TRACKER).wait()
        found = await deployer.find_contract_address(result.transaction_hash).send()
        print(f"  Address from receipt: {found.hex()}")
        if found != result.contract_address:
            print("  MISMATCH between derived and deployed address")
            return 1

    header("DONE")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except StarkrailError as exc:
        print(f"\nFAILED: {exc}")
        sys.exit(1)
