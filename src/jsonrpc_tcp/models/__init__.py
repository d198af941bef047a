"""
Pydantic models for the JSON-RPC wire format.
"""
from .rpc import JSONRPCRequest, JSONRPCResponse, WireModel

__all__ = [
    "JSONRPCRequest",
    "JSONRPCResponse",
    "WireModel",
]
