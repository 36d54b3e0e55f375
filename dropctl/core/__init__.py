"""Core modules for dropctl."""

from dropctl.core.client import CLIENT_TOKEN_HEADER, PortalClient, read_error
from dropctl.core.config import CONFIG_DIR, CONFIG_FILE, Config
from dropctl.core.exceptions import (
    BatchTransferError,
    ClaimError,
    CloseError,
    ConfigurationError,
    DropCtlError,
    EntryReadError,
    InitializeError,
    InvalidPortalURLError,
    InvalidTransitionError,
    InvalidURLError,
    NotClaimedError,
    PathValidationError,
    PortalError,
    PortalRequestError,
    PortalStateError,
    PreflightError,
    TransferError,
    TransferFailure,
    ValidationError,
)
from dropctl.core.logging import LogContext, get_audit_logger, get_logger, setup_logging
from dropctl.core.output import (
    OutputFormat,
    console,
    format_bytes,
    print_error,
    print_json,
    print_output,
    print_status,
    print_success,
    print_table,
    print_warning,
)
from dropctl.core.validation import (
    get_portal_id,
    normalize_relpath,
    parse_portal_url,
    sanitize_relpath,
    validate_server_url,
)

__all__ = [
    # Exceptions
    "DropCtlError",
    "ConfigurationError",
    "ValidationError",
    "InvalidURLError",
    "InvalidPortalURLError",
    "PathValidationError",
    "PortalRequestError",
    "PortalError",
    "ClaimError",
    "PreflightError",
    "CloseError",
    "NotClaimedError",
    "PortalStateError",
    "TransferFailure",
    "InitializeError",
    "TransferError",
    "BatchTransferError",
    "InvalidTransitionError",
    "EntryReadError",
    # Validation
    "validate_server_url",
    "get_portal_id",
    "parse_portal_url",
    "normalize_relpath",
    "sanitize_relpath",
    # Config
    "Config",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "PortalClient",
    "CLIENT_TOKEN_HEADER",
    "read_error",
    # Output
    "OutputFormat",
    "print_table",
    "print_json",
    "print_output",
    "print_error",
    "print_warning",
    "print_success",
    "print_status",
    "format_bytes",
    "console",
    # Logging
    "get_logger",
    "get_audit_logger",
    "setup_logging",
    "LogContext",
]
