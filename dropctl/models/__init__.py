"""Data models for dropctl.

Provides Pydantic models for the portal wire format and dataclasses for
queue state and run outcomes.
"""

from __future__ import annotations

from .base import BaseModel
from .portal import (
    ClaimPolicy,
    ClaimResponse,
    ConflictPolicy,
    InitUploadRequest,
    InitUploadResponse,
    PortalInfo,
    PreflightConflict,
    PreflightItem,
    PreflightResponse,
    UploadCommitResponse,
    resolve_policy,
)
from .progress import RunSummary, StatusMessage, StatusTone
from .queue import ALLOWED_TRANSITIONS, ItemStatus, QueueCandidate, QueueItem, check_transition

__all__ = [
    # Base
    "BaseModel",
    # Wire format
    "ConflictPolicy",
    "ClaimPolicy",
    "ClaimResponse",
    "PortalInfo",
    "PreflightItem",
    "PreflightConflict",
    "PreflightResponse",
    "InitUploadRequest",
    "InitUploadResponse",
    "UploadCommitResponse",
    "resolve_policy",
    # Queue
    "ItemStatus",
    "ALLOWED_TRANSITIONS",
    "check_transition",
    "QueueCandidate",
    "QueueItem",
    # Progress
    "StatusTone",
    "StatusMessage",
    "RunSummary",
]
