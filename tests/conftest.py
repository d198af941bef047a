"""
Shared fixtures: small threaded TCP servers speaking delimiter-framed JSON.
"""
import json
import socket
import threading
import time
from collections.abc import Callable
from typing import Any

import pytest

Responder = Callable[[dict[str, Any]], bytes | list[bytes] | None]


class FrameServer:
    """
    Loopback TCP server for exercising the client. For every request frame it
    receives it calls `responder(request)`, which returns the raw bytes to send
    back, a list of chunks sent with `chunk_interval` seconds in between, or
    None to stay silent. With `close_on_accept` every connection is closed
    right after it is accepted; with `close_after_reply` it is closed after
    the first reply.
    """

    def __init__(
        self,
        responder: Responder | None = None,
        delimiter: bytes = b"\n",
        close_on_accept: bool = False,
        close_after_reply: bool = False,
        chunk_interval: float = 0.05,
    ):
        self.responder = responder
        self.delimiter = delimiter
        self.close_on_accept = close_on_accept
        self.close_after_reply = close_after_reply
        self.chunk_interval = chunk_interval

        self.raw_frames: list[bytes] = []
        self.requests: list[dict[str, Any]] = []
        self.accepted = 0
        self._held = 0
        self._lock = threading.Lock()
        self._stopped = threading.Event()

        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(16)
        self._listener.settimeout(0.1)
        self.host, self.port = self._listener.getsockname()

        self._thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._thread.start()

    @property
    def held_connections(self) -> int:
        with self._lock:
            return self._held

    def stop(self) -> None:
        self._stopped.set()
        self._thread.join(timeout=2)
        self._listener.close()

    def _accept_loop(self) -> None:
        while not self._stopped.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with self._lock:
                self.accepted += 1
            if self.close_on_accept:
                conn.close()
                continue
            with self._lock:
                self._held += 1
            threading.Thread(target=self._serve_connection, args=(conn,), daemon=True).start()

    def _serve_connection(self, conn: socket.socket) -> None:
        conn.settimeout(0.1)
        buffer = b""
        try:
            while not self._stopped.is_set():
                try:
                    chunk = conn.recv(4096)
                except socket.timeout:
                    continue
                except OSError:
                    return
                if not chunk:
                    return
                buffer += chunk
                while self.delimiter in buffer:
                    frame, buffer = buffer.split(self.delimiter, 1)
                    self._handle_frame(conn, frame)
                    if self.close_after_reply:
                        return
        finally:
            conn.close()
            with self._lock:
                self._held -= 1

    def _handle_frame(self, conn: socket.socket, frame: bytes) -> None:
        request = json.loads(frame)
        with self._lock:
            self.raw_frames.append(frame)
            self.requests.append(request)
        if self.responder is None:
            return
        reply = self.responder(request)
        if reply is None:
            return
        pieces = [reply] if isinstance(reply, bytes) else reply
        try:
            for piece in pieces:
                conn.sendall(piece)
                if len(pieces) > 1:
                    time.sleep(self.chunk_interval)
        except OSError:
            return # client hung up mid-reply


def json_frame(payload: dict[str, Any], delimiter: bytes = b"\n") -> bytes:
    return json.dumps(payload).encode("utf-8") + delimiter


def echo_responder(request: dict[str, Any]) -> bytes:
    return json_frame({"result": request["params"], "error": None})


def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Polls `predicate` until it holds or `timeout` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def make_server():
    """Factory fixture; every server it creates is stopped at teardown."""
    servers: list[FrameServer] = []

    def _make(*args, **kwargs) -> FrameServer:
        server = FrameServer(*args, **kwargs)
        servers.append(server)
        return server

    yield _make
    for server in servers:
        server.stop()


@pytest.fixture
def echo_server(make_server) -> FrameServer:
    return make_server(echo_responder)


@pytest.fixture
def unused_port() -> int:
    """A port nothing is listening on (bound once, then released)."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
