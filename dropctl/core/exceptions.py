"""Exception hierarchy for dropctl.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class DropCtlError(Exception):
    """Base exception for all dropctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(DropCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(DropCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class InvalidPortalURLError(InvalidURLError):
    """URL does not address a portal (no /p/{portalId} segment)."""

    def __init__(self, url: str):
        super().__init__(url, "expected a portal link like http://host/p/<portal-id>")


class PathValidationError(ValidationError):
    """Relative path cannot be used as a destination path."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid path: {path} - {reason}", field="relpath", value=path)
        self.path = path
        self.reason = reason


# =============================================================================
# Transport Errors
# =============================================================================


class PortalRequestError(DropCtlError):
    """An exchange with the portal server failed.

    Covers both transport failures (no response) and non-success responses.
    ``status_code`` is None for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url


# =============================================================================
# Portal Errors
# =============================================================================


class PortalError(DropCtlError):
    """Error related to a portal session."""

    def __init__(self, portal_id: str, message: str):
        super().__init__(message, {"portal": portal_id} if portal_id else {})
        self.portal_id = portal_id


class ClaimError(PortalError):
    """Portal could not be claimed."""


class PreflightError(PortalError):
    """Conflict check could not be completed."""


class CloseError(PortalError):
    """Portal could not be closed after the transfers finished."""


class NotClaimedError(PortalError):
    """Operation requires a claimed portal."""

    def __init__(self, portal_id: str):
        super().__init__(portal_id, "Portal has not been claimed")


class PortalStateError(PortalError):
    """Operation is not allowed in the current orchestrator state."""


# =============================================================================
# Transfer Errors
# =============================================================================


class TransferFailure(DropCtlError):
    """Base class for per-item transfer failures."""

    def __init__(self, relpath: str, message: str):
        super().__init__(message, {"file": relpath})
        self.relpath = relpath


class InitializeError(TransferFailure):
    """Server refused to open a transfer slot for an item."""


class TransferError(TransferFailure):
    """Byte transfer for an item failed."""


class BatchTransferError(DropCtlError):
    """Run finished with some items failed (continue-on-error mode)."""

    def __init__(self, succeeded: int, failed: int, errors: list[str]):
        super().__init__(
            f"Upload partially failed: {succeeded} succeeded, {failed} failed",
            {"succeeded": succeeded, "failed": failed},
        )
        self.succeeded = succeeded
        self.failed = failed
        self.errors = errors


class InvalidTransitionError(DropCtlError):
    """Queue item state change not permitted by the state machine."""

    def __init__(self, item_id: str, current: str, target: str):
        super().__init__(
            f"Cannot move item from {current} to {target}",
            {"item": item_id},
        )
        self.item_id = item_id
        self.current = current
        self.target = target


class EntryReadError(DropCtlError):
    """A dropped entry could not be read."""

    def __init__(self, path: str, reason: str = ""):
        msg = f"Cannot read entry: {path}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg)
        self.path = path
        self.reason = reason
