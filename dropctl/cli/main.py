"""Main CLI entry point for dropctl."""

from __future__ import annotations

import click

from dropctl import __version__
from dropctl.cli.config_cmd import config
from dropctl.cli.send import info, send

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="dropctl")
def cli() -> None:
    """dropctl - Upload files to a DropServe portal on your network.

    Open the portal link shared with you, then send files or whole
    folders to it. Folder structure is kept on the receiving side.

    Get started:

      dropctl info http://HOST/p/PORTAL_ID

      dropctl send http://HOST/p/PORTAL_ID report.pdf photos/

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Commands
# =============================================================================

cli.add_command(config)
cli.add_command(send)
cli.add_command(info)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
