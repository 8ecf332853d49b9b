"""HTTP transport for the etcd v2 keys API."""

import logging
from typing import Dict, Optional

import httpx

from etcdkv.envelope import Envelope, parse_response, raise_for_store_error
from etcdkv.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class Transport:
    """Issues keys API requests over a single httpx session.

    Every request follows redirects (followers answer writes with a 307 to
    the leader), raises for error statuses, and parses the body into an
    Envelope.
    """

    def __init__(
        self,
        timeout: int,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the transport.

        Args:
            timeout: Default request timeout in milliseconds
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
        """
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def open(self) -> None:
        """Create the underlying HTTP session."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            timeout=self._make_timeout(self._timeout),
            follow_redirects=True,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._client is None:
            return

        await self._client.aclose()
        self._client = None

    def is_open(self) -> bool:
        return self._client is not None

    async def request(
        self,
        method: str,
        url: str,
        params: Dict[str, str],
        timeout: Optional[int] = None,
    ) -> Envelope:
        """Send a request and parse the response.

        Args:
            method: HTTP method (GET, PUT, POST, DELETE)
            url: Full key URL
            params: Query parameters, already rendered as strings
            timeout: Optional per-request timeout in milliseconds

        Returns:
            Parsed response envelope

        Raises:
            InvalidArgumentError: If not connected or the timeout is not positive
            StoreError: If the store answered with an error payload
            httpx.HTTPStatusError: For error statuses without a JSON payload
            httpx.TransportError: For connection failures and timeouts
        """
        if self._client is None:
            raise InvalidArgumentError("Client not connected")
        if timeout is not None and timeout <= 0:
            raise InvalidArgumentError("timeout must be greater than 0")

        logger.debug("%s %s %s", method, url, params)
        response = await self._client.request(
            method,
            url,
            params=params,
            timeout=self._make_timeout(self._timeout if timeout is None else timeout),
        )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise_for_store_error(e)

        return parse_response(response)

    @staticmethod
    def _make_timeout(timeout_ms: int) -> httpx.Timeout:
        return httpx.Timeout(timeout_ms / 1000.0)
