"""dropctl - A client for DropServe LAN upload portals.

This package claims a portal from the link a DropServe server prints,
collects local files and folders, checks them for destination conflicts,
and uploads them one at a time with byte-level progress:
- Claim and close portal sessions
- Flatten nested folders into destination-relative paths
- Advisory conflict preflight with overwrite/autorename policies
- Sequential uploads with throughput sampling
"""

__version__ = "0.1.0"

from dropctl.core.client import PortalClient
from dropctl.core.config import Config
from dropctl.core.exceptions import (
    ClaimError,
    CloseError,
    ConfigurationError,
    DropCtlError,
    InitializeError,
    PortalRequestError,
    PreflightError,
    TransferError,
    ValidationError,
)
from dropctl.services.uploads import UploadService

__all__ = [
    "__version__",
    "PortalClient",
    "Config",
    "UploadService",
    "DropCtlError",
    "ConfigurationError",
    "ValidationError",
    "PortalRequestError",
    "ClaimError",
    "PreflightError",
    "InitializeError",
    "TransferError",
    "CloseError",
]
