"""Configuration management for jsonrpc-tcp."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TCPClientConfig(BaseModel): # Nested under Config (BaseSettings)
    """Connection and framing settings for the TCP JSON-RPC client."""

    host: str = Field(default="127.0.0.1", min_length=1, description="Hostname or IP address of the JSON-RPC server.")
    port: int = Field(default=3000, ge=1, le=65535, description="TCP port of the JSON-RPC server.")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Bounds both the connect handshake and the wait for each response.")
    delimiter: str = Field(default="\n", min_length=1, description="Byte sequence terminating every frame on the wire.")
    read_chunk_size: int = Field(default=512, ge=1, description="Maximum number of bytes read from the socket per recv call.")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format ('json' or 'console')")

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value

    @field_validator("format")
    @classmethod
    def _normalize_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "console"):
            raise ValueError(f"Unknown log format: {value}")
        return value


class Config(BaseSettings):
    """Main configuration. Loads from environment variables prefixed with JSONRPC_TCP_."""

    model_config = SettingsConfigDict(
        env_prefix='JSONRPC_TCP_',
        env_nested_delimiter='__', # e.g., JSONRPC_TCP_CLIENT__PORT
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    client: TCPClientConfig = Field(default_factory=TCPClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, file_path: Path) -> "Config":
        """Create configuration strictly from a JSON file.
        Environment variables are not layered on top.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
