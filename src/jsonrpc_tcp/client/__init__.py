"""
JSON-RPC client over raw TCP.

The client writes one delimiter-terminated JSON request per call and reads
back one delimiter-terminated JSON response, bounded by a per-call timeout.
"""

from .exceptions import (
    TCPApplicationError,
    TCPClientError,
    TCPConnectionError,
    TCPIOError,
    TCPProtocolError,
    TCPReadError,
    TCPTimeoutError,
    TCPWriteError,
)
from .outcome import CallFailure, CallOutcome, CallSuccess
from .tcp_client import TCPJSONRPCClient

__all__ = [
    "TCPJSONRPCClient",
    "CallFailure",
    "CallOutcome",
    "CallSuccess",
    "TCPApplicationError",
    "TCPClientError",
    "TCPConnectionError",
    "TCPIOError",
    "TCPProtocolError",
    "TCPReadError",
    "TCPTimeoutError",
    "TCPWriteError",
]
