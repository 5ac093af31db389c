"""
Client for the accounts resource.

Every operation is a single request/response exchange; the response is
returned as-is, whatever its status code.
"""

import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from accountapi_client.cancellation import CancellationToken
from accountapi_client.config import ClientSettings
from accountapi_client.exceptions import SerializationError
from accountapi_client.http import TransportAdapter, get_default_adapter
from accountapi_client.models import Method, Request, Response
from accountapi_client.schemas import Account


def serialize(resource: Union[BaseModel, Dict[str, Any]]) -> bytes:
    """
    Encode a resource as a JSON payload.

    Raises:
        SerializationError: If the resource cannot be encoded
    """
    try:
        if isinstance(resource, BaseModel):
            return resource.model_dump_json(exclude_none=True).encode("utf-8")
        return json.dumps(resource, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError, PydanticSerializationError) as e:
        raise SerializationError(
            f"Failed to serialize {type(resource).__name__}: {e}"
        ) from e


class AccountsClient:
    """
    Client for the accounts endpoints.

    Example usage:
        ```python
        client = AccountsClient(ClientSettings.from_env())
        response = await client.create(account)
        if response.status_code == 201:
            ...
        ```

    Adapter resolution: an adapter passed here always wins; otherwise, when
    the settings carry a transport configuration, the client builds and owns
    an adapter from it; otherwise it uses the shared default adapter.
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        adapter: Optional[TransportAdapter] = None,
    ) -> None:
        self.settings = settings or ClientSettings.from_env()
        self._adapter = adapter
        self._owned_adapter: Optional[TransportAdapter] = None

    @property
    def adapter(self) -> TransportAdapter:
        if self._adapter is not None:
            return self._adapter
        if self.settings.transport is not None:
            if self._owned_adapter is None:
                self._owned_adapter = TransportAdapter(self.settings.transport)
            return self._owned_adapter
        return get_default_adapter()

    async def close(self) -> None:
        """Close the adapter built from the settings, if any."""
        if self._owned_adapter is not None:
            await self._owned_adapter.close()

    async def __aenter__(self) -> "AccountsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    def _resource_url(self, id: str) -> str:
        return f"{self.base_url}/{id}"

    async def _send(self, request: Request, token: Optional[CancellationToken]) -> Response:
        return await self.adapter.execute(request, token)

    async def create(
        self,
        account: Union[Account, BaseModel, Dict[str, Any]],
        token: Optional[CancellationToken] = None,
    ) -> Response:
        """
        Create an account.

        Args:
            account: Account document (model or plain mapping)
            token: Cancellation token

        Returns:
            The API response, 201 on success and 409 for a duplicate id

        Raises:
            SerializationError: If the account cannot be encoded
        """
        body = serialize(account)
        return await self._send(
            Request(
                method=Method.POST,
                url=self.base_url,
                headers=self.settings.headers,
                body=body,
            ),
            token,
        )

    async def fetch(
        self,
        id: str,
        token: Optional[CancellationToken] = None,
    ) -> Response:
        """Fetch an account by id."""
        return await self._send(
            Request(
                method=Method.GET,
                url=self._resource_url(id),
                headers=self.settings.headers,
            ),
            token,
        )

    async def delete(
        self,
        id: str,
        version: int,
        token: Optional[CancellationToken] = None,
    ) -> Response:
        """Delete version ``version`` of an account."""
        return await self._send(
            Request(
                method=Method.DELETE,
                url=self._resource_url(id),
                headers=self.settings.headers,
                params={"version": str(version)},
            ),
            token,
        )
