"""
Accounts API Client Library.

A thin async HTTP client for the accounts REST resource.

Example usage:
    ```python
    from accountapi_client import AccountsClient, CancellationToken, ClientSettings

    client = AccountsClient(ClientSettings.from_env())

    # Create an account
    response = await client.create(account)

    # Fetch it back within two seconds
    response = await client.fetch(account_id, token=CancellationToken.with_timeout(2))

    # Delete version 0
    response = await client.delete(account_id, 0)
    ```
"""

__version__ = "0.1.0"

# Resource client
from accountapi_client.accounts import AccountsClient

# Transport components (for advanced usage)
from accountapi_client.http import (
    TransportAdapter,
    get_default_adapter,
    send,
    set_timeout,
    set_transport_options,
)
from accountapi_client.cancellation import CancellationToken
from accountapi_client.config import ClientSettings, TransportConfig
from accountapi_client.models import Method, Request, Response

# Resource schema
from accountapi_client.schemas import Account, AccountAttributes, AccountData

# Exceptions
from accountapi_client.exceptions import (
    # Base exception
    AccountAPIClientError,
    # Request construction errors
    SerializationError,
    MalformedRequestError,
    # Transport errors
    TransportError,
    ConnectionError,
    DeadlineExceededError,
    RequestCancelledError,
    # HTTP status errors
    HTTPStatusError,
    ValidationError,
    NotFoundError,
    ConflictError,
    ServerError,
    # Utility
    exception_from_response,
)

__all__ = [
    # Version
    "__version__",
    # Resource client
    "AccountsClient",
    # Transport components
    "TransportAdapter",
    "get_default_adapter",
    "send",
    "set_timeout",
    "set_transport_options",
    "CancellationToken",
    "ClientSettings",
    "TransportConfig",
    "Method",
    "Request",
    "Response",
    # Resource schema
    "Account",
    "AccountAttributes",
    "AccountData",
    # Exceptions
    "AccountAPIClientError",
    "SerializationError",
    "MalformedRequestError",
    "TransportError",
    "ConnectionError",
    "DeadlineExceededError",
    "RequestCancelledError",
    "HTTPStatusError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    "exception_from_response",
]
