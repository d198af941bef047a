"""
Request and response models for line-delimited JSON-RPC over TCP.
"""
import json
from typing import Any

from pydantic import BaseModel, Field


class WireModel(BaseModel):
    """Base for everything that crosses the socket."""
    model_config = {"extra": "forbid"}


class JSONRPCRequest(WireModel):
    id: int = Field(..., ge=1, description="Per-client request id, strictly increasing from 1.")
    method: str = Field(..., description="Remote method name; validated by the server, not here.")
    params: list[Any] = Field(default_factory=list, description="Positional parameters, order preserved.")

    def to_frame(self, delimiter: bytes) -> bytes:
        """Encodes the request as compact JSON followed by the frame delimiter."""
        payload = json.dumps(self.model_dump(), separators=(",", ":"))
        return payload.encode("utf-8") + delimiter


class JSONRPCResponse(WireModel):
    """
    Decoded response frame. Exactly one of result/error is expected per the
    wire contract, but a frame carrying neither still decodes (both None).
    Unknown keys, such as an echoed id, are ignored.
    """
    model_config = {**WireModel.model_config, "extra": "ignore"}

    result: Any = None
    error: Any = None

    @property
    def is_error(self) -> bool:
        # null, false, 0, "" and empty containers all count as "no error"
        return bool(self.error)

    @classmethod
    def from_frame(cls, frame: bytes) -> "JSONRPCResponse":
        """
        Decodes a single frame (delimiter already stripped).
        Raises ValueError (UnicodeDecodeError, json.JSONDecodeError or a
        pydantic ValidationError) if the frame is not a UTF-8 JSON object.
        """
        data = json.loads(frame.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return cls.model_validate(data)
