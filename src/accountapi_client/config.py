"""
Client configuration.

``TransportConfig`` holds the connection pool and timeout options of a
transport adapter. ``ClientSettings`` holds what a resource client needs to
locate the accounts collection. Both are plain pydantic models; the
environment and YAML profiles are read once, when the settings are built.
"""

import os
from pathlib import Path
from typing import Dict, Optional, Union

import httpx
import yaml
from pydantic import BaseModel, Field, field_validator

BASE_URL_ENV = "FORM3_ACCOUNTS_API_URL"
TIMEOUT_ENV = "ACCOUNTAPI_TIMEOUT"
DEFAULT_BASE_URL = "http://localhost:8080/v1/organisation/accounts"


class TransportConfig(BaseModel):
    """Timeouts and connection pool limits, in seconds and connection counts."""

    timeout: float = Field(10.0, gt=0, description="Overall request timeout")
    connect_timeout: float = Field(10.0, gt=0, description="Connection establishment timeout")
    keepalive_expiry: float = Field(10.0, ge=0, description="Idle keep-alive interval")
    max_connections: int = Field(100, ge=1, description="Total concurrent connections")
    max_keepalive_connections: int = Field(100, ge=0, description="Idle connections kept in the pool")
    max_connections_per_host: int = Field(100, ge=1, description="Concurrent round trips per host")

    def httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout, connect=self.connect_timeout)

    def httpx_limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=self.max_keepalive_connections,
            keepalive_expiry=self.keepalive_expiry,
        )


class ClientSettings(BaseModel):
    """
    Settings for an accounts resource client.

    Attributes:
        base_url: URL of the accounts collection
        headers: Headers injected into every request (e.g. Authorization)
        transport: Options for an adapter owned by the client; when unset the
            client shares the default adapter
    """

    base_url: str = DEFAULT_BASE_URL
    headers: Dict[str, str] = Field(default_factory=dict)
    transport: Optional[TransportConfig] = None

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("base_url cannot be empty")
        return v.rstrip("/")

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ClientSettings":
        """
        Resolve settings from the environment.

        ``FORM3_ACCOUNTS_API_URL`` supplies the base URL and
        ``ACCOUNTAPI_TIMEOUT`` the request timeout in seconds.
        """
        environ = os.environ if environ is None else environ
        base_url = environ.get(BASE_URL_ENV) or DEFAULT_BASE_URL

        transport = None
        timeout = environ.get(TIMEOUT_ENV)
        if timeout:
            try:
                transport = TransportConfig(timeout=float(timeout))
            except ValueError:
                raise ValueError(
                    f"{TIMEOUT_ENV} must be a positive number of seconds, got {timeout!r}"
                ) from None

        return cls(base_url=base_url, transport=transport)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ClientSettings":
        """
        Load settings from a YAML profile.

        Missing keys fall back to the environment defaults.
        """
        with open(path, "r") as file:
            data = yaml.safe_load(file) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")

        defaults = cls.from_env()
        data.setdefault("base_url", defaults.base_url)
        if defaults.transport is not None:
            data.setdefault("transport", defaults.transport.model_dump())
        if "timeout" in data:
            transport = dict(data.get("transport") or {})
            transport["timeout"] = data.pop("timeout")
            data["transport"] = transport
        return cls.model_validate(data)
