"""HTTP transport used by the status prober.

The prober only needs one capability: fetch a URL, follow redirects and
report the status and the URL it ended on. HttpxTransport provides it on
top of httpx.AsyncClient; tests substitute their own implementation of
the HttpTransport protocol.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, runtime_checkable

import httpx

from redirectfinder.core.constants import USER_AGENT
from redirectfinder.core.exceptions import TransportError
from redirectfinder.core.models import FetchResponse


logger = logging.getLogger(__name__)


@runtime_checkable
class HttpTransport(Protocol):
    """Protocol for HTTP transports."""

    async def fetch(
        self,
        url: str,
        *,
        timeout: float,
        max_redirects: int,
    ) -> FetchResponse:
        ...


class HttpxTransport:
    """HttpTransport backed by httpx.

    One AsyncClient is kept per redirect limit, since httpx configures
    the limit on the client rather than per request. Use as an async
    context manager or call aclose() when done.
    """

    def __init__(
        self,
        *,
        user_agent: str = USER_AGENT,
        verify: bool = True,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize transport.

        Args:
            user_agent: User-Agent header sent with every probe
            verify: Whether to verify TLS certificates
            http_transport: Optional low-level httpx transport (for tests)
        """
        self.user_agent = user_agent
        self.verify = verify
        self._http_transport = http_transport
        self._clients: dict[int, httpx.AsyncClient] = {}

    def _get_client(self, max_redirects: int) -> httpx.AsyncClient:
        client = self._clients.get(max_redirects)
        if client is None:
            client = httpx.AsyncClient(
                follow_redirects=max_redirects > 0,
                max_redirects=max_redirects,
                headers={"User-Agent": self.user_agent},
                verify=self.verify,
                transport=self._http_transport,
            )
            self._clients[max_redirects] = client
        return client

    async def fetch(
        self,
        url: str,
        *,
        timeout: float,
        max_redirects: int,
    ) -> FetchResponse:
        """GET a URL without downloading its body.

        Args:
            url: URL to fetch
            timeout: Total seconds allowed for the request and its redirects
            max_redirects: Maximum redirects to follow

        Returns:
            FetchResponse with status and effective URL

        Raises:
            TransportError: If no HTTP response was received
        """
        client = self._get_client(max_redirects)

        try:
            return await asyncio.wait_for(self._get(client, url, timeout), timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"No response from {url} within {timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"No response from {url}: {e!r}") from e
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid URL {url}: {e}") from e

    async def _get(self, client: httpx.AsyncClient, url: str, timeout: float) -> FetchResponse:
        async with client.stream("GET", url, timeout=timeout) as response:
            # httpx re-encodes the request URL; only a followed redirect
            # moves the effective URL away from the input
            effective_url = str(response.url) if response.history else url
            return FetchResponse(status=response.status_code, effective_url=effective_url)

    async def aclose(self) -> None:
        """Close all underlying clients."""
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
