"""jsonrpc-tcp - Client for line-delimited JSON-RPC over raw TCP.

Opens a TCP connection on demand, writes one JSON request frame per call
and reads back the matching response frame within a timeout.
"""

__version__ = "0.1.0"

from .client import (
    CallFailure,
    CallOutcome,
    CallSuccess,
    TCPApplicationError,
    TCPClientError,
    TCPConnectionError,
    TCPIOError,
    TCPJSONRPCClient,
    TCPProtocolError,
    TCPReadError,
    TCPTimeoutError,
    TCPWriteError,
)
from .config import Config, LoggingConfig, TCPClientConfig
from .utils.logging import configure_logging

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
    "Config",
    "LoggingConfig",
    "TCPClientConfig",
    "configure_logging",
]
