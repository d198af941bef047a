"""
Custom exceptions for the TCP JSON-RPC client.
"""
from typing import Any


class TCPClientError(Exception):
    """Base class for all TCP JSON-RPC client errors."""
    pass

class TCPConnectionError(TCPClientError):
    """Raised when the TCP connection to the server cannot be established
    (refused, unreachable, name resolution failure, connect timeout)."""
    def __init__(self, message: str, host: str | None = None, port: int | None = None):
        super().__init__(message)
        self.host = host
        self.port = port

class TCPProtocolError(TCPClientError):
    """Raised when a received frame is not a valid JSON-RPC response."""
    def __init__(self, message: str, frame: bytes | None = None):
        super().__init__(message)
        self.frame = frame

class TCPApplicationError(TCPClientError):
    """The server answered with a non-empty error field.
    The server-supplied value is kept verbatim in `error`."""
    def __init__(self, error: Any, method: str | None = None):
        super().__init__(f"Remote method '{method}' returned an error: {error!r}" if method else f"Remote error: {error!r}")
        self.error = error
        self.method = method

class TCPTimeoutError(TCPClientError):
    """Raised when no complete response frame arrives before the deadline."""
    def __init__(self, message: str, timeout_seconds: float | None = None):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

class TCPIOError(TCPClientError):
    """Base class for transport failures on an established connection.
    The client is always disconnected when one of these is raised."""
    pass

class TCPReadError(TCPIOError):
    """Raised when reading from the socket fails or the peer closes it."""
    pass

class TCPWriteError(TCPIOError):
    """Raised when sending the request frame fails."""
    pass
