"""
Request and response descriptors.

These are the in-process representation of an HTTP exchange, decoupled from
httpx. The transport adapter turns a ``Request`` into a wire request and the
wire response back into a ``Response``.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import httpx

from accountapi_client.exceptions import MalformedRequestError, exception_from_response


class Method(str, Enum):
    """Supported HTTP verbs."""

    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"
    PUT = "PUT"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, value: Union["Method", str]) -> "Method":
        """
        Resolve a verb, raising MalformedRequestError for anything unsupported.

        Lowercase names are accepted.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise MalformedRequestError(
                f"Invalid method {value!r}",
                details={"method": value},
            ) from None


def _frozen(mapping: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Request:
    """
    Describes a single HTTP request.

    Attributes:
        method: HTTP verb; strings are validated on construction
        url: Absolute target URL, without query parameters
        headers: Headers to send
        params: Query parameters, encoded onto the URL at dispatch
        body: Raw request body
    """

    method: Method
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", Method.parse(self.method))
        object.__setattr__(self, "headers", _frozen(self.headers))
        object.__setattr__(
            self,
            "params",
            MappingProxyType({str(k): str(v) for k, v in (self.params or {}).items()}),
        )
        if self.body is not None and not isinstance(self.body, (bytes, bytearray)):
            raise MalformedRequestError(
                f"Request body must be bytes, got {type(self.body).__name__}"
            )
        if self.body is not None:
            object.__setattr__(self, "body", bytes(self.body))

    @property
    def has_body(self) -> bool:
        return bool(self.body)


@dataclass(frozen=True)
class Response:
    """
    Describes a completed HTTP response.

    Attributes:
        status_code: HTTP status code
        headers: Response headers (case-insensitive)
        body: Response body decoded as text
    """

    status_code: int
    headers: httpx.Headers
    body: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body)

    def raise_for_status(self) -> "Response":
        """
        Raise the matching HTTPStatusError for a non-2xx status.

        Returns the response itself when the status is successful, so calls
        can be chained.
        """
        if self.is_success:
            return self

        message = None
        error_code = None
        details = {}
        try:
            payload = self.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("error_message") or payload.get("message") or payload.get("detail")
            error_code = payload.get("error_code")
            details = payload
        elif self.body:
            message = self.body.strip()

        raise exception_from_response(
            self.status_code,
            message,
            error_code=error_code,
            details=details,
        )
