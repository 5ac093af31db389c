"""
Async HTTP transport for the accounts API client.

This module turns request descriptors into httpx requests and back:
- Query parameter encoding onto the target URL
- Default ``Content-Type: application/json`` for request bodies
- Pooled connections through a shared ``httpx.AsyncClient``
- Per-host concurrency limits
- Deadline and cancellation propagation
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Mapping, Optional
from urllib.parse import urlencode
import logging

import httpx

from accountapi_client.cancellation import CancellationToken
from accountapi_client.config import TransportConfig
from accountapi_client.exceptions import (
    AccountAPIClientError,
    ConnectionError,
    DeadlineExceededError,
    MalformedRequestError,
    TransportError,
)
from accountapi_client.models import Request, Response

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def encode_query(url: str, params: Mapping[str, str]) -> str:
    """
    Append URL-encoded query parameters to ``url``.

    Keys are sorted so the result does not depend on insertion order.
    """
    if not params:
        return url
    separator = "&" if "?" in url else "?"
    return url + separator + urlencode(sorted(params.items()))


class TransportAdapter:
    """
    Executes request descriptors over a pooled HTTP client.

    The underlying ``httpx.AsyncClient`` is created on first use with the
    limits of the current configuration. Later changes to the pool limits only
    take effect after ``close()``; timeout changes apply to the next request.

    A pool is bound to the event loop that created it. When the adapter is
    used from another loop (e.g. a second ``asyncio.run``) a fresh pool is
    built and the old one is dropped.
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the adapter.

        Args:
            config: Timeouts and pool limits, defaults to ``TransportConfig()``
            transport: Custom httpx transport, mainly for tests
        """
        self.config = config or TransportConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._host_slots: Dict[str, asyncio.Semaphore] = {}
        self._host_users: Dict[str, int] = {}

    @property
    def started(self) -> bool:
        """Whether the connection pool has been created."""
        return self._client is not None and not self._client.is_closed

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client for the running loop."""
        loop = asyncio.get_running_loop()
        if self._client is not None and self._loop is not loop:
            # connections of another loop cannot be reused or closed from here
            logger.debug("Event loop changed; discarding connection pool")
            self._client = None
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.config.httpx_timeout(),
                limits=self.config.httpx_limits(),
                transport=self._transport,
            )
            self._loop = loop
            self._host_slots = {}
            self._host_users = {}
            logger.debug(
                "Started connection pool (max_connections=%d, per_host=%d)",
                self.config.max_connections,
                self.config.max_connections_per_host,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed and self._loop is asyncio.get_running_loop():
            await self._client.aclose()
        self._client = None
        self._loop = None

    async def __aenter__(self) -> "TransportAdapter":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_timeout(self, timeout: float) -> None:
        """Set the overall request timeout, in seconds, for later requests."""
        self.config = self.config.model_copy(update={"timeout": float(timeout)})

    def set_transport_options(self, config: TransportConfig) -> None:
        """
        Replace the transport configuration.

        Pool limits of an already started pool are not changed.
        """
        if self.started:
            logger.debug("Connection pool already started; new limits apply after close()")
        self.config = config

    # =========================================================================
    # Request / Response conversion
    # =========================================================================

    def build_request(self, request: Request) -> httpx.Request:
        """
        Convert a request descriptor into an httpx request.

        Raises:
            MalformedRequestError: If the URL cannot be parsed or is not an
                absolute http(s) URL
        """
        target = encode_query(request.url, request.params)

        try:
            url = httpx.URL(target)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise MalformedRequestError(f"Invalid URL {target!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise MalformedRequestError(f"Invalid URL {target!r}: expected an absolute http(s) URL")

        headers = httpx.Headers(dict(request.headers))
        if request.has_body and "Content-Type" not in headers:
            headers["Content-Type"] = JSON_CONTENT_TYPE

        return httpx.Request(
            request.method.value,
            url,
            headers=headers,
            content=request.body or None,
            extensions={"timeout": self.config.httpx_timeout().as_dict()},
        )

    @staticmethod
    async def build_response(response: httpx.Response) -> Response:
        """
        Read a streamed httpx response into a response descriptor.

        The wire response is closed on every path.

        Raises:
            TransportError: If the body cannot be read
        """
        try:
            await response.aread()
        except httpx.TimeoutException as e:
            raise DeadlineExceededError(f"Timed out reading response body: {e}") from e
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise TransportError(f"Failed to read response body: {e}") from e
        finally:
            await response.aclose()

        return Response(
            status_code=response.status_code,
            headers=response.headers,
            body=response.text,
        )

    # =========================================================================
    # Execution
    # =========================================================================

    @asynccontextmanager
    async def _slot(self, host: str) -> AsyncIterator[None]:
        """Hold one of the per-host round trip slots; idle hosts are forgotten."""
        slots, users = self._host_slots, self._host_users
        slot = slots.get(host)
        if slot is None:
            slot = asyncio.Semaphore(self.config.max_connections_per_host)
            slots[host] = slot
        users[host] = users.get(host, 0) + 1
        try:
            async with slot:
                yield
        finally:
            users[host] -= 1
            if not users[host]:
                del users[host]
                del slots[host]

    async def _round_trip(self, wire_request: httpx.Request) -> Response:
        client = self._get_client()
        async with self._slot(wire_request.url.host):
            try:
                response = await client.send(wire_request, stream=True)
            except httpx.TimeoutException as e:
                raise DeadlineExceededError(f"Client timeout exceeded: {e}") from e
            except httpx.ConnectError as e:
                raise ConnectionError(f"Connection failed: {e}") from e
            except httpx.UnsupportedProtocol as e:
                raise MalformedRequestError(f"Unsupported protocol: {e}") from e
            except httpx.HTTPError as e:
                raise TransportError(f"Request failed: {e}") from e
            return await self.build_response(response)

    async def execute(
        self,
        request: Request,
        token: Optional[CancellationToken] = None,
    ) -> Response:
        """
        Execute a request descriptor and return the response descriptor.

        Args:
            request: The request to send
            token: Cancellation token; a background token when omitted

        Returns:
            The response, whatever its status code

        Raises:
            MalformedRequestError: If the request cannot be built
            DeadlineExceededError: If the token deadline or request timeout elapsed
            RequestCancelledError: If the token was cancelled
            TransportError: On connection or other network failures
        """
        token = token or CancellationToken.background()
        wire_request = self.build_request(request)

        try:
            token.raise_if_done()
            logger.debug("%s %s", wire_request.method, wire_request.url)
            response = await token.guard(self._round_trip(wire_request))
        except MalformedRequestError:
            raise
        except AccountAPIClientError as e:
            logger.warning("%s %s failed: %s", wire_request.method, wire_request.url, e)
            raise

        logger.debug(
            "%s %s -> %d",
            wire_request.method,
            wire_request.url,
            response.status_code,
        )
        return response


# =============================================================================
# Default adapter
# =============================================================================

_default_adapter: Optional[TransportAdapter] = None


def get_default_adapter() -> TransportAdapter:
    """The adapter shared by every caller that does not bring its own."""
    global _default_adapter
    if _default_adapter is None:
        _default_adapter = TransportAdapter()
    return _default_adapter


def set_timeout(timeout: float) -> None:
    """Set the request timeout of the default adapter."""
    get_default_adapter().set_timeout(timeout)


def set_transport_options(config: TransportConfig) -> None:
    """Replace the transport configuration of the default adapter."""
    get_default_adapter().set_transport_options(config)


async def send(
    request: Request,
    token: Optional[CancellationToken] = None,
) -> Response:
    """Execute a request on the default adapter."""
    return await get_default_adapter().execute(request, token)
