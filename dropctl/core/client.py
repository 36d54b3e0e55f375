"""Async HTTP client for the DropServe portal API.

Wraps httpx.AsyncClient with error-body decoding. Requests are never
retried: a failed exchange is reported to the caller as-is.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from dropctl.core.exceptions import PortalRequestError
from dropctl.core.validation import validate_server_url, validate_timeout

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT = 30.0
CLIENT_TOKEN_HEADER = "X-Client-Token"


def read_error(resp: httpx.Response) -> str:
    """Extract a human-readable message from an error response.

    Uses the ``error`` field of a JSON body when present, otherwise the
    HTTP reason phrase.
    """
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return resp.reason_phrase or "request failed"


# =============================================================================
# PortalClient
# =============================================================================


@dataclass
class PortalClient:
    """Async HTTP client bound to one DropServe server."""

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)
    _client: httpx.AsyncClient | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)
        self.timeout = validate_timeout(self.timeout)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
                transport=self.transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> PortalClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        content: bytes | AsyncIterator[bytes] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Execute one HTTP exchange.

        Args:
            method: HTTP method.
            path: API path or absolute URL.
            json: JSON body.
            content: Raw body, either bytes or an async byte iterator.
            headers: Additional headers.
            timeout: Request timeout override.

        Returns:
            Successful (2xx) HTTP response.

        Raises:
            PortalRequestError: On transport failure or non-success status.
        """
        client = self._get_client()
        try:
            resp = await client.request(
                method,
                path,
                json=json,
                content=content,
                headers=headers,
                timeout=timeout or self.timeout,
            )
        except httpx.TimeoutException as e:
            raise PortalRequestError(f"Timeout: {str(e) or 'request timed out'}", url=path) from e
        except httpx.HTTPError as e:
            reason = str(e) or type(e).__name__
            raise PortalRequestError(f"Network error: {reason}", url=path) from e

        if not resp.is_success:
            raise PortalRequestError(read_error(resp), status_code=resp.status_code, url=path)
        return resp

    async def get_json(self, path: str, *, headers: dict[str, str] | None = None) -> Any:
        """GET request returning decoded JSON."""
        resp = await self.request("GET", path, headers=headers)
        return _decode_json(resp)

    async def post_json(
        self,
        path: str,
        payload: Any,
        *,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON payload and return the decoded JSON reply (or None)."""
        resp = await self.request("POST", path, json=payload, headers=headers)
        return _decode_json(resp)


def _decode_json(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError as e:
        raise PortalRequestError(
            "Server returned an invalid JSON body",
            status_code=resp.status_code,
            url=str(resp.request.url),
        ) from e
