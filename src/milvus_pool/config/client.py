"""Connection options for Milvus clients and the YAML loader for named pools."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

DEFAULT_ADDRESS = "localhost:19530"


class ClientOptions(BaseModel):
    """Immutable connection options handed to the client factory.

    Instances are validated on construction and cannot be mutated afterwards;
    use :meth:`with_overrides` to derive a variant.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(default=DEFAULT_ADDRESS, description="host:port or full URI of the server")
    username: str = Field(default="", description="User name when authentication is enabled")
    password: SecretStr = Field(default=SecretStr(""), description="Password for ``username``")
    db_name: str = Field(default="", description="Database selected after connecting")
    api_key: SecretStr | None = Field(default=None, description="API key, preferred over user/password")
    enable_tls: bool = Field(default=False, description="Use a TLS channel")
    connect_timeout: float = Field(default=5.0, gt=0, description="Dial timeout in seconds")
    operation_timeout: float = Field(default=30.0, gt=0, description="Per-call timeout in seconds")
    max_retry: int = Field(
        default=0,
        ge=0,
        description="Retries after the first attempt of a rate limited call; 0 disables retrying",
    )
    max_retry_backoff: float = Field(
        default=3.0,
        ge=0.0,
        description="Ceiling in seconds for the exponential wait between retries; 0 retries at once",
    )
    keepalive_time: float | None = Field(default=None, gt=0, description="gRPC keepalive interval")
    keepalive_timeout: float | None = Field(default=None, gt=0, description="gRPC keepalive timeout")
    max_recv_msg_size: int | None = Field(default=None, gt=0, description="gRPC receive limit in bytes")

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("address must not be empty")
        return value

    @property
    def uri(self) -> str:
        """Return the address as a URI understood by the driver."""
        if "://" in self.address:
            return self.address
        scheme = "https" if self.enable_tls else "http"
        return f"{scheme}://{self.address}"

    @property
    def token(self) -> str:
        """Return the credential token sent to the server, if any."""
        if self.api_key is not None:
            return self.api_key.get_secret_value()
        return ""

    def grpc_options(self) -> dict[str, int]:
        """Translate keepalive and message size settings into channel arguments."""
        options: dict[str, int] = {}
        if self.keepalive_time is not None:
            options["grpc.keepalive_time_ms"] = int(self.keepalive_time * 1000)
        if self.keepalive_timeout is not None:
            options["grpc.keepalive_timeout_ms"] = int(self.keepalive_timeout * 1000)
        if self.max_recv_msg_size is not None:
            options["grpc.max_receive_message_length"] = self.max_recv_msg_size
        return options

    def with_overrides(self, **fields: Any) -> ClientOptions:
        """Return a validated copy with ``fields`` replaced."""
        payload = self.model_dump()
        payload.update(fields)
        return ClientOptions.model_validate(payload)


class PoolConfig(BaseModel):
    """Named connections declared in a YAML document."""

    connections: dict[str, ClientOptions] = Field(default_factory=dict)

    @field_validator("connections")
    @classmethod
    def _validate_names(cls, value: dict[str, ClientOptions]) -> dict[str, ClientOptions]:
        for name in value:
            if not name.strip():
                raise ValueError("connection names must be non-empty")
        return value


def _mapping(value: Any, where: str, *, allow_empty: bool = True) -> Mapping[str, Any]:
    """Return ``value`` as a mapping; ``None`` counts as an empty one when allowed."""
    if value is None and allow_empty:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def load_pool_config(
    path: Path | None = None,
    *,
    defaults: ClientOptions | None = None,
) -> PoolConfig:
    """Load named connections from ``path``.

    Each connection entry is layered over ``defaults`` so a file only needs to
    declare what differs from the baseline. A missing file yields an empty
    configuration.

    Raises:
        ValueError: The document is not valid YAML, a section or entry is not
            a mapping, or an entry fails validation.
    """
    target = path or Path("config/milvus_pool.yaml")
    if not target.exists():
        return PoolConfig()
    try:
        with target.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ValueError(f"{target}: invalid YAML: {exc}") from exc
    data = _mapping(data, f"{target}")
    if "milvus_pool" in data:
        data = _mapping(data["milvus_pool"], f"{target}: milvus_pool", allow_empty=False)
    entries = _mapping(data.get("connections"), f"{target}: connections")

    base = (defaults or ClientOptions()).model_dump()
    connections: dict[str, Any] = {}
    for name, entry in entries.items():
        merged = dict(base)
        merged.update(_mapping(entry, f"{target}: connection '{name}'"))
        connections[str(name)] = merged
    try:
        return PoolConfig.model_validate({"connections": connections})
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


__all__ = [
    "DEFAULT_ADDRESS",
    "ClientOptions",
    "PoolConfig",
    "load_pool_config",
]
