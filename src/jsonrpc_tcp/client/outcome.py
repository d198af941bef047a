"""
Tagged outcome of a single JSON-RPC call.
"""
from dataclasses import dataclass
from typing import Any

from .exceptions import TCPClientError


@dataclass(frozen=True)
class CallSuccess:
    """The server answered without an error; `value` is its result field."""
    value: Any
    request_id: int

    ok = True

    @property
    def result(self) -> Any:
        return self.value

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> Any:
        return self.value

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class CallFailure:
    """
    The call did not produce a result. `exception` is one of the
    TCPClientError subclasses; `request_id` is None when the failure
    happened before a request id was allocated (e.g. connect failure).
    """
    exception: TCPClientError
    request_id: int | None = None

    ok = False

    @property
    def result(self) -> None:
        return None

    @property
    def error(self) -> Any:
        """The server-supplied value for application errors, the exception otherwise."""
        return getattr(self.exception, "error", self.exception)

    def unwrap(self) -> Any:
        raise self.exception

    def __bool__(self) -> bool:
        return False


CallOutcome = CallSuccess | CallFailure
