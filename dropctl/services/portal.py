"""Portal session: claim, token handling, and close."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from dropctl.core.client import CLIENT_TOKEN_HEADER, PortalClient
from dropctl.core.exceptions import (
    ClaimError,
    CloseError,
    NotClaimedError,
    PortalRequestError,
)
from dropctl.core.logging import get_audit_logger
from dropctl.models.portal import ClaimResponse, ConflictPolicy, PortalInfo, resolve_policy

from .base import BaseService

logger = logging.getLogger(__name__)


class PortalSession(BaseService):
    """A claimed (or claimable) portal on a DropServe server.

    The session is claimed at most once. After a successful claim its fields
    only change through ``close()``.
    """

    def __init__(self, client: PortalClient, portal_id: str) -> None:
        super().__init__(client)
        self.portal_id = portal_id
        self.client_token: Optional[str] = None
        self.expires_at: Optional[str] = None
        self.policy = ConflictPolicy.OVERWRITE
        self.reusable = True
        self.closed = False
        self.claim_attempted = False
        self._audit = get_audit_logger()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "claimed" if self.claimed else "unclaimed"
        return f"PortalSession({self.portal_id!r}, {state})"

    @property
    def claimed(self) -> bool:
        """Check if a client token has been obtained."""
        return self.client_token is not None

    def auth_headers(self) -> dict[str, str]:
        """Headers that authenticate calls made after the claim.

        Raises:
            NotClaimedError: If the portal has not been claimed.
        """
        if self.client_token is None:
            raise NotClaimedError(self.portal_id)
        return {CLIENT_TOKEN_HEADER: self.client_token}

    async def info(self) -> PortalInfo:
        """Fetch public portal metadata without claiming.

        Raises:
            PortalRequestError: If the server rejects the request.
        """
        data = await self._get(self._portal_path(self.portal_id, "info"))
        try:
            return PortalInfo.model_validate(data)
        except PydanticValidationError as e:
            raise PortalRequestError(f"Unexpected portal info reply: {e.error_count()} error(s)") from e

    async def claim(self) -> "PortalSession":
        """Claim the portal and store the issued token.

        Exactly one request is made. A session that is already claimed is
        returned unchanged without contacting the server.

        Raises:
            ClaimError: If the server refuses the claim or is unreachable.
        """
        if self.claimed:
            return self

        self.claim_attempted = True
        try:
            data = await self._post(self._portal_path(self.portal_id, "claim"))
            reply = ClaimResponse.model_validate(data)
        except PortalRequestError as e:
            self._audit.log_operation("claim", portal=self.portal_id, success=False)
            raise ClaimError(self.portal_id, e.message) from e
        except PydanticValidationError as e:
            self._audit.log_operation("claim", portal=self.portal_id, success=False)
            raise ClaimError(self.portal_id, "Server sent an invalid claim reply") from e

        self.client_token = reply.client_token
        self.expires_at = reply.expires_at or None
        self.policy = resolve_policy(reply.policy)
        self.reusable = reply.reusable is not False
        logger.info(
            "Claimed portal %s (policy=%s, reusable=%s, expires=%s)",
            self.portal_id,
            self.policy.value,
            self.reusable,
            self.expires_at,
        )
        self._audit.log_operation("claim", portal=self.portal_id)
        return self

    async def close(self) -> None:
        """Close the portal on the server.

        Raises:
            NotClaimedError: If the portal was never claimed.
            CloseError: If the server refuses or cannot be reached.
        """
        headers = self.auth_headers()
        try:
            await self._post(self._portal_path(self.portal_id, "close"), headers=headers)
        except PortalRequestError as e:
            self._audit.log_operation("close", portal=self.portal_id, success=False)
            raise CloseError(self.portal_id, e.message) from e

        self.closed = True
        logger.info("Closed portal %s", self.portal_id)
        self._audit.log_operation("close", portal=self.portal_id)
