"""Advisory conflict checking before a transfer."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError

from dropctl.core.exceptions import PortalRequestError, PreflightError
from dropctl.models.portal import (
    ConflictPolicy,
    PreflightConflict,
    PreflightItem,
    PreflightResponse,
)
from dropctl.models.queue import QueueItem

from .base import BaseService
from .portal import PortalSession

logger = logging.getLogger(__name__)


def describe_conflicts(count: int, policy: ConflictPolicy) -> str:
    """Sentence summarising how conflicts will be resolved."""
    noun = "file" if count == 1 else "files"
    verb = "exists" if count == 1 else "exist"
    return f"{count} {noun} already {verb} and will be {policy.verb}."


class PreflightChecker(BaseService):
    """Asks the server which queued paths already exist at the destination.

    The held conflict set is replaced wholesale by each check, never merged.
    """

    def __init__(self, session: PortalSession) -> None:
        super().__init__(session.client)
        self.session = session
        self._conflicts: list[PreflightConflict] = []

    @property
    def conflicts(self) -> list[PreflightConflict]:
        return list(self._conflicts)

    def clear(self) -> None:
        self._conflicts = []

    def describe(self, policy: ConflictPolicy) -> str:
        """Summary of the held conflicts under a policy, empty if none."""
        if not self._conflicts:
            return ""
        return describe_conflicts(len(self._conflicts), policy)

    async def check(
        self,
        items: Sequence[QueueItem],
        *,
        running: bool = False,
    ) -> list[PreflightConflict]:
        """Replace the conflict set with the server's view of ``items``.

        Skipped, with the set cleared, when the portal is not claimed, a run
        is active, or ``items`` is empty.

        Raises:
            PreflightError: If the request fails.
        """
        if not self.session.claimed or running or not items:
            self.clear()
            return []

        payload = {
            "items": [
                PreflightItem(relpath=item.relpath, size=item.size).to_dict() for item in items
            ]
        }
        try:
            data = await self._post(
                self._portal_path(self.session.portal_id, "preflight"),
                payload,
                headers=self.session.auth_headers(),
            )
            reply = PreflightResponse.model_validate(data or {})
        except PortalRequestError as e:
            raise PreflightError(self.session.portal_id, f"Preflight failed: {e.message}") from e
        except PydanticValidationError as e:
            raise PreflightError(
                self.session.portal_id, "Preflight failed: invalid server reply"
            ) from e

        self._conflicts = list(reply.conflicts)
        logger.debug(
            "Preflight of %d item(s) found %d conflict(s)", len(items), len(self._conflicts)
        )
        return self.conflicts
