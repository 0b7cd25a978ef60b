"""
Shared async HTTP plumbing for collaborator clients.
"""

import logging
from typing import Any

import httpx

from medbook.core.domain import IntegrationException

logger = logging.getLogger(__name__)


class HttpCollaboratorClient:
    """Lazily created ``httpx.AsyncClient`` bound to one service."""

    service_name = "collaborator"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Service base URL
            timeout: Request timeout in seconds
            transport: Optional transport (tests pass ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IntegrationException(
                self.service_name,
                f"{self.service_name} returned HTTP {e.response.status_code}",
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise IntegrationException(
                self.service_name, f"{self.service_name} request failed", original_error=e
            ) from e

        if not response.content:
            return {}
        return response.json()
