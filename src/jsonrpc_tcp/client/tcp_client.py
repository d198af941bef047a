"""
JSON-RPC client over a raw TCP stream with delimiter-framed messages.
"""
import selectors
import socket
import time
import weakref
from typing import Any, NoReturn

import structlog

from ..config import Config, TCPClientConfig
from ..models.rpc import JSONRPCRequest, JSONRPCResponse
from .exceptions import (
    TCPApplicationError,
    TCPClientError,
    TCPConnectionError,
    TCPProtocolError,
    TCPReadError,
    TCPTimeoutError,
    TCPWriteError,
)
from .outcome import CallFailure, CallOutcome, CallSuccess

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_DELIMITER = b"\n"
DEFAULT_READ_CHUNK_SIZE = 512


class _SocketHolder:
    """Owns the client's socket so a finalizer can close it without referencing the client."""

    def __init__(self) -> None:
        self.sock: socket.socket | None = None

    def close(self) -> bool:
        sock, self.sock = self.sock, None
        if sock is None:
            return False
        sock.close()
        return True


class TCPJSONRPCClient:
    """
    Synchronous JSON-RPC client speaking one JSON object per delimiter-terminated
    frame over TCP. The connection is opened lazily by `call` and kept until
    `disconnect`, a fatal I/O error, a timeout, or garbage collection.

    Usage:
        client = TCPJSONRPCClient("127.0.0.1", 3000)
        outcome = client.call("echo", "arg1", "arg2")
        if not outcome:
            raise SystemExit(client.error)
        print(outcome.result)

    A client is not thread-safe; use one instance per logical caller.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        delimiter: bytes | str = DEFAULT_DELIMITER,
        read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
    ):
        if isinstance(delimiter, str):
            delimiter = delimiter.encode("utf-8")
        if not delimiter:
            raise ValueError("Delimiter must not be empty.")
        if timeout <= 0:
            raise ValueError("Timeout must be positive.")
        if read_chunk_size < 1:
            raise ValueError("Read chunk size must be at least 1.")

        self.host = host
        self.port = port
        self.timeout = float(timeout)
        self.delimiter = delimiter
        self.read_chunk_size = read_chunk_size

        self._request_id = 0
        self._last_outcome: CallOutcome | None = None
        self._holder = _SocketHolder()
        # Closes the socket when the client is collected or at interpreter exit.
        self._finalizer = weakref.finalize(self, self._holder.close)

        self.logger = logger.bind(host=host, port=port, transport="tcp")

    @classmethod
    def from_config(cls, config: Config | TCPClientConfig) -> "TCPJSONRPCClient":
        """Builds a client from a TCPClientConfig or the `client` section of a Config."""
        client_cfg = config.client if isinstance(config, Config) else config
        return cls(
            host=client_cfg.host,
            port=client_cfg.port,
            timeout=client_cfg.timeout_seconds,
            delimiter=client_cfg.delimiter,
            read_chunk_size=client_cfg.read_chunk_size,
        )

    def __repr__(self) -> str:
        state = "connected" if self.is_connected else "disconnected"
        return f"<{self.__class__.__name__} {self.host}:{self.port} {state}>"

    # --- Outcome fields ---

    @property
    def last_outcome(self) -> CallOutcome | None:
        return self._last_outcome

    @property
    def result(self) -> Any:
        """Result of the most recent call, None if it failed."""
        return self._last_outcome.result if self._last_outcome is not None else None

    @property
    def error(self) -> Any:
        """Error of the most recent call, None if it succeeded."""
        return self._last_outcome.error if self._last_outcome is not None else None

    @property
    def last_request_id(self) -> int:
        return self._request_id

    def _record(self, outcome: CallOutcome) -> CallOutcome:
        self._last_outcome = outcome
        return outcome

    # --- Connection lifecycle ---

    @property
    def is_connected(self) -> bool:
        return self._holder.sock is not None

    def connect(self, host: str | None = None, port: int | None = None) -> bool:
        """
        (Re)connects to the server. Any existing socket is closed first.
        `host`/`port` override the stored values for this connection only.
        Returns False and records a TCPConnectionError instead of raising.
        """
        if self.is_connected:
            self.disconnect()

        target_host = host or self.host
        target_port = port or self.port
        log = self.logger.bind(target_host=target_host, target_port=target_port)

        try:
            sock = socket.create_connection((target_host, target_port), timeout=self.timeout)
        except OSError as e:
            reason = e.strerror or str(e) or type(e).__name__
            log.warning("Failed to connect.", error=reason, error_type=type(e).__name__)
            self._record(CallFailure(TCPConnectionError(
                f'Unable to connect to "{target_host}:{target_port}": {reason}',
                host=target_host,
                port=target_port,
            )))
            return False

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self._holder.sock = sock
        log.info("Connected.", timeout_seconds=self.timeout)
        return True

    def disconnect(self) -> None:
        """Closes the socket if one is open. Safe to call any number of times."""
        if self._holder.close():
            self.logger.info("Disconnected.")

    def __enter__(self) -> "TCPJSONRPCClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    # --- Calls ---

    def call(self, method: str, *params: Any) -> CallOutcome:
        """
        Calls a remote method with positional parameters.

        Returns CallSuccess with the server's result, or CallFailure for
        recoverable conditions (connection failure, undecodable frame, server
        error field). Raises TCPTimeoutError if no response frame arrives in
        time and TCPReadError/TCPWriteError on transport failures; in both
        cases the client is left disconnected.
        """
        if not self.is_connected and not self.connect():
            return self._last_outcome

        request = JSONRPCRequest(id=self._request_id + 1, method=method, params=list(params))
        frame = request.to_frame(self.delimiter)
        self._request_id = request.id

        log = self.logger.bind(method=method, request_id=request.id)
        self._send_frame(frame, request.id, log)
        response_frame = self._read_frame(request.id, log)

        try:
            response = JSONRPCResponse.from_frame(response_frame)
        except ValueError as e:
            log.warning("Failed to decode response frame.", error=str(e), frame=response_frame[:200])
            return self._record(CallFailure(
                TCPProtocolError(f"JSON parse error: {e}", frame=response_frame), request.id
            ))

        if response.is_error:
            log.warning("Server returned an error.", error=response.error)
            return self._record(CallFailure(TCPApplicationError(response.error, method=method), request.id))

        log.debug("Received result.")
        return self._record(CallSuccess(response.result, request.id))

    def _fail(self, exc: TCPClientError, request_id: int, cause: BaseException | None = None) -> NoReturn:
        """Disconnects, records the failure and raises `exc`."""
        self.disconnect()
        self._record(CallFailure(exc, request_id))
        raise exc from cause

    def _send_frame(self, frame: bytes, request_id: int, log) -> None:
        log.debug("Sending request.", size=len(frame))
        try:
            self._holder.sock.sendall(frame)
        except OSError as e:
            log.error("Error writing request.", error=str(e))
            self._fail(TCPWriteError(f"Error writing: {e}"), request_id, e)

    def _read_frame(self, request_id: int, log) -> bytes:
        """
        Reads until the first delimiter appears anywhere in the accumulated
        buffer or the deadline passes. Each wait is bounded by the time left
        until the deadline, so partial reads do not extend it. Bytes after the
        delimiter are dropped; responses are never pipelined.
        """
        sock = self._holder.sock
        deadline = time.monotonic() + self.timeout
        buffer = bytearray()
        delimiter_len = len(self.delimiter)

        with selectors.DefaultSelector() as selector:
            selector.register(sock, selectors.EVENT_READ)
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0 or not selector.select(remaining):
                    break

                try:
                    chunk = sock.recv(self.read_chunk_size)
                except OSError as e:
                    log.error("Error reading response.", error=str(e))
                    self._fail(TCPReadError(f"Error reading: {e}"), request_id, e)
                if not chunk:
                    log.error("Connection closed by peer before a full response arrived.", buffered=len(buffer))
                    self._fail(TCPReadError("Error reading: connection closed by peer"), request_id)

                # Only the tail can complete a delimiter that spans chunks.
                scan_from = max(0, len(buffer) - delimiter_len + 1)
                buffer += chunk
                end = buffer.find(self.delimiter, scan_from)
                if end != -1:
                    log.debug("Received response frame.", size=end, discarded=len(buffer) - end - delimiter_len)
                    return bytes(buffer[:end])

        log.error("Request timed out.", timeout_seconds=self.timeout, buffered=len(buffer))
        self._fail(TCPTimeoutError(f"Request timed out after {self.timeout}s", timeout_seconds=self.timeout), request_id)
