"""Pytest configuration and fixtures for accountapi-client tests."""

import asyncio
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List

import httpx
import pytest
import respx

from accountapi_client.config import ClientSettings
from accountapi_client.http import TransportAdapter


BASE_URL = "http://accountapi.test/v1/organisation/accounts"


# ============================================================================
# Mock Transports
# ============================================================================


class FailingStream(httpx.AsyncByteStream):
    """Response body that fails on first read and records being closed."""

    def __init__(self) -> None:
        self.closed = False

    async def __aiter__(self):
        raise httpx.ReadError("connection reset by peer")
        yield b""  # pragma: no cover

    async def aclose(self) -> None:
        self.closed = True


def slow_transport(delay: float, calls: List[httpx.Request]) -> httpx.MockTransport:
    """A transport that answers 200 after ``delay`` seconds."""

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        await asyncio.sleep(delay)
        return httpx.Response(200, json={"message": "superfakeapi"})

    return httpx.MockTransport(handler)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def base_url():
    """Accounts collection URL used by the tests."""
    return BASE_URL


@pytest.fixture
def settings(base_url):
    """Client settings pointing at the test collection."""
    return ClientSettings(base_url=base_url)


@pytest.fixture
def account_data() -> Dict[str, Any]:
    """A complete account document."""
    return {
        "data": {
            "id": "f773707e-8fb4-4ab7-a4f8-3f0e8d0d4b7c",
            "organisation_id": "4fd712d9-38cd-4ee0-bc2c-3f0e46b1c0a0",
            "type": "accounts",
            "attributes": {
                "country": "GB",
                "base_currency": "GBP",
                "bank_id": "400300",
                "bank_id_code": "GBDSC",
                "bic": "NWBKGB22",
                "name": ["Samantha Holder"],
                "alternative_names": ["Sam Holder"],
                "account_classification": "Personal",
                "joint_account": False,
                "account_matching_opt_out": False,
                "secondary_identification": "A1B2C3D4",
            },
        }
    }


@pytest.fixture
def respx_mock():
    """Route every httpx request through respx."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def recorded_calls() -> List[httpx.Request]:
    return []


@pytest.fixture
def echo_adapter(recorded_calls):
    """Adapter whose transport records requests and echoes them back."""

    def handler(request: httpx.Request) -> httpx.Response:
        recorded_calls.append(request)
        return httpx.Response(
            200,
            headers={"X-Echo-Method": request.method},
            json={"url": str(request.url)},
        )

    return TransportAdapter(transport=httpx.MockTransport(handler))


class _AccountHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_GET(self):
        body = b'{"data": {"id": "%s"}}' % self.path.rsplit("/", 1)[-1].encode()
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def local_server():
    """A real HTTP server on 127.0.0.1 answering GETs with 200."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _AccountHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield f"http://{host}:{port}/v1/organisation/accounts"
    finally:
        server.shutdown()
        server.server_close()
