"""Base service with common methods for portal API services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dropctl.core.client import PortalClient


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "PortalClient") -> None:
        """Initialize service with a portal client.

        Args:
            client: PortalClient bound to the portal's server
        """
        self.client = client

    async def _get(self, path: str, **kwargs: Any) -> Any:
        """Execute GET request and return JSON data.

        Args:
            path: API endpoint path
            **kwargs: Additional request parameters

        Returns:
            Parsed JSON response data
        """
        return await self.client.get_json(path, **kwargs)

    async def _post(self, path: str, payload: Any = None, **kwargs: Any) -> Any:
        """Execute POST request with a JSON body.

        Args:
            path: API endpoint path
            payload: JSON body (``{}`` when omitted)
            **kwargs: Additional request parameters

        Returns:
            Parsed JSON response, or None for an empty body
        """
        return await self.client.post_json(path, {} if payload is None else payload, **kwargs)

    def _build_path(self, *parts: str) -> str:
        """Build API path from parts.

        Args:
            *parts: Path segments

        Returns:
            Joined path string
        """
        return "/" + "/".join(p.strip("/") for p in parts if p)

    def _portal_path(self, portal_id: str, action: str) -> str:
        return self._build_path("api", "portals", portal_id, action)
