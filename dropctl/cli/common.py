"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click
import httpx

from dropctl.core.client import PortalClient
from dropctl.core.config import Config
from dropctl.core.exceptions import DropCtlError, PortalRequestError
from dropctl.core.logging import setup_logging
from dropctl.core.output import OutputFormat, print_error

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False
        # Tests inject an httpx.MockTransport here
        self.transport: Optional[httpx.AsyncBaseTransport] = None

    def get_config(self) -> Config:
        if self.config is None:
            self.config = Config.load()
        return self.config

    def make_client(self, base_url: str) -> PortalClient:
        """Create a portal client for a server using configured timeouts."""
        config = self.get_config()
        return PortalClient(
            base_url=base_url,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            transport=self.transport,
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default=None,
        help="Output format (default from config)",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimal output (paths only)",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        output_format: Optional[str],
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)

        config = ctx.get_config()
        ctx.output_format = OutputFormat.from_string(output_format or config.output_format)

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exit codes."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except PortalRequestError as e:
            print_error(str(e))
            sys.exit(ExitCode.NETWORK_ERROR if e.status_code is None else ExitCode.GENERAL_ERROR)
        except DropCtlError as e:
            print_error(str(e))
            sys.exit(ExitCode.GENERAL_ERROR)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            print_error("Interrupted")
            sys.exit(ExitCode.USER_CANCELLED)
        except Exception as e:
            print_error(f"Unexpected error: {e}")
            sys.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    CLAIM_ERROR = 2
    NETWORK_ERROR = 3
    USER_CANCELLED = 5
