"""Config commands for dropctl."""

from __future__ import annotations

import click

from dropctl.cli.common import Context, global_options, handle_errors
from dropctl.core.config import Config, default_config_path
from dropctl.core.output import OutputFormat, print_error, print_key_value, print_output, print_success


@click.group()
def config() -> None:
    """Manage dropctl configuration."""
    pass


@config.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing config")
def config_init(force: bool) -> None:
    """Write a config file with default settings.

    Example:
        dropctl config init
    """
    path = default_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists at {path}. Use --force to overwrite.")
        raise SystemExit(1)

    cfg = Config()
    cfg.save(path)

    print_success(f"Configuration saved to {path}")
    print_key_value(cfg.to_dict())


@config.command("show")
@global_options
@handle_errors
def config_show(ctx: Context) -> None:
    """Show the effective configuration, including environment overrides."""
    cfg = ctx.get_config()
    data = {"config_file": str(default_config_path()), **cfg.to_dict()}

    if ctx.output_format == OutputFormat.JSON:
        print_output(data, format=OutputFormat.JSON)
    else:
        print_key_value(data, title="Configuration")


@config.command("set")
@click.argument("key", type=click.Choice(Config.keys()))
@click.argument("value")
@handle_errors
def config_set(key: str, value: str) -> None:
    """Set a single configuration value.

    Example:
        dropctl config set chunk_size 1048576
        dropctl config set stop_on_error false
    """
    path = default_config_path()
    # Environment overrides must not be persisted
    cfg = Config.load(path, use_env=False)
    cfg.set_value(key, value)
    cfg.save(path)

    print_success(f"Set {key} = {getattr(cfg, key)}")
