"""
Transaction hashes, contract address derivation and typed-data message hashes.
"""

from starkrail.hash.address import compute_contract_address, compute_udc_address
from starkrail.hash.transaction import (
    compute_transaction_hash,
    encode_data_availability_modes,
    encode_resource_bound,
)
from starkrail.hash.typed_data import Parameter, Revision, TypedData, merkle_root

__all__ = [
    "compute_contract_address",
    "compute_udc_address",
    "compute_transaction_hash",
    "encode_data_availability_modes",
    "encode_resource_bound",
    "Parameter",
    "Revision",
    "TypedData",
    "merkle_root",
]
