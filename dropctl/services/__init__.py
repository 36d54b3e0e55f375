"""Service layer for portal operations.

Provides service classes that encapsulate the DropServe portal REST API.
"""

from __future__ import annotations

from .base import BaseService
from .portal import PortalSession
from .preflight import PreflightChecker, describe_conflicts
from .uploads import UploadService

__all__ = [
    "BaseService",
    "PortalSession",
    "PreflightChecker",
    "describe_conflicts",
    "UploadService",
]
