"""
Accounts, payload construction and fee estimation.
"""

from starkrail.account.builder import (
    ExecutionParams,
    ExecutionParamsV3,
    TransactionBuilder,
    build_deploy_account,
)
from starkrail.account.fee import FeeEstimator
from starkrail.account.account import Account

__all__ = [
    "Account",
    "ExecutionParams",
    "ExecutionParamsV3",
    "FeeEstimator",
    "TransactionBuilder",
    "build_deploy_account",
]
