"""
Chain access: transport, requests, batches and the JSON-RPC provider.
"""

from starkrail.provider.service import HttpService, HttpxService
from starkrail.provider.request import Request, RequestResult
from starkrail.provider.batch import BatchRequest
from starkrail.provider.base import BlockId, Provider
from starkrail.provider.rpc import JsonRpcProvider, block_id_param

__all__ = [
    "HttpService",
    "HttpxService",
    "Request",
    "RequestResult",
    "BatchRequest",
    "BlockId",
    "Provider",
    "JsonRpcProvider",
    "block_id_param",
]
