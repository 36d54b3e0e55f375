"""Terminal output for dropctl.

Tables, key/value panels, JSON, and tone-coloured status lines rendered with
Rich. Status text may come straight from a server error body, so it is
escaped before it reaches Rich markup.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

# =============================================================================
# Console Instances
# =============================================================================

console = Console()
err_console = Console(stderr=True)

# tone -> (colour, prefix, goes to stderr)
TONES: dict[str, tuple[str, str, bool]] = {
    "info": ("blue", "", False),
    "ok": ("green", "", False),
    "warn": ("yellow", "Warning: ", True),
    "error": ("red", "Error: ", True),
}

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


class OutputFormat(Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        return cls(value.lower())


# =============================================================================
# Formatting Helpers
# =============================================================================


def format_bytes(num_bytes: float | None) -> str:
    """Human-readable byte count using 1024 steps, e.g. ``1.5 MB``."""
    value = float(num_bytes or 0)
    if value <= 0:
        return "0 B"
    unit = 0
    while value >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0 or value >= 10:
        return f"{value:.0f} {BYTE_UNITS[unit]}"
    return f"{value:.1f} {BYTE_UNITS[unit]}"


def format_rate(bytes_per_second: float) -> str:
    """Transfer rate such as ``2.4 MB/s``."""
    return f"{format_bytes(bytes_per_second)}/s"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def _label(key: str, labels: dict[str, str] | None) -> str:
    return (labels or {}).get(key) or key.replace("_", " ").title()


# =============================================================================
# Structured Output
# =============================================================================


def print_table(
    rows: Sequence[dict[str, Any]],
    columns: Sequence[str],
    *,
    title: str | None = None,
    column_labels: dict[str, str] | None = None,
) -> None:
    """Print rows as a Rich table.

    Args:
        rows: Row dictionaries.
        columns: Keys to show, in order.
        title: Optional table title.
        column_labels: Header text per key; defaults to the title-cased key.
    """
    if not rows:
        console.print("[dim]Nothing to show[/dim]")
        return

    table = Table(title=title, header_style="bold")
    for col in columns:
        table.add_column(_label(col, column_labels))
    for row in rows:
        table.add_row(*(escape(_cell(row.get(col))) for col in columns))
    console.print(table)


def print_key_value(
    data: dict[str, Any],
    *,
    title: str | None = None,
    key_labels: dict[str, str] | None = None,
) -> None:
    """Print a mapping as an aligned two-column grid."""
    if title:
        console.print(f"[bold]{escape(title)}[/bold]")

    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()
    for key, value in data.items():
        grid.add_row(_label(key, key_labels), escape(_cell(value)) or "[dim]-[/dim]")
    console.print(grid)


def print_json(data: Any, *, indent: int = 2) -> None:
    """Print data as JSON on stdout, bypassing Rich."""
    print(json.dumps(data, indent=indent, default=str))


def print_output(
    data: Any,
    *,
    format: OutputFormat = OutputFormat.TABLE,
    columns: Sequence[str] | None = None,
    column_labels: dict[str, str] | None = None,
    title: str | None = None,
    quiet: bool = False,
    id_field: str = "relpath",
) -> None:
    """Print a row, a list of rows, or a mapping in the requested format.

    Args:
        data: A dict or list of dicts.
        format: Output format.
        columns: Columns for table format; a dict without columns is shown
            as key/value pairs.
        column_labels: Labels for columns or keys.
        title: Optional title.
        quiet: Print only ``id_field`` of each row, one per line.
        id_field: Identifying key used in quiet mode.
    """
    rows = data if isinstance(data, list) else [data]
    if quiet:
        for row in rows:
            print(row.get(id_field, "") if isinstance(row, dict) else row)
        return

    if format == OutputFormat.JSON:
        print_json(data)
    elif columns:
        print_table(rows, columns, title=title, column_labels=column_labels)
    elif isinstance(data, dict):
        print_key_value(data, title=title, key_labels=column_labels)
    else:
        print_json(data)


# =============================================================================
# Status Lines
# =============================================================================


def _emit(tone: str, message: str, *, prefix: bool = True) -> None:
    colour, label, to_stderr = TONES.get(tone, TONES["info"])
    target = err_console if to_stderr else console
    head = f"[{colour}]{label}[/{colour}]" if prefix and label else ""
    body = escape(message) if head else f"[{colour}]{escape(message)}[/{colour}]"
    target.print(f"{head}{body}")


def print_error(message: str) -> None:
    """Print an error line to stderr."""
    _emit("error", message)


def print_warning(message: str) -> None:
    """Print a warning line to stderr."""
    _emit("warn", message)


def print_success(message: str) -> None:
    _emit("ok", f"✓ {message}")


def print_info(message: str) -> None:
    _emit("info", message)


def print_status(status: Any) -> None:
    """Print the orchestrator status line, coloured by its tone.

    Args:
        status: Object with ``message`` and ``tone`` (an enum whose value is
            one of info, ok, warn, error). Warnings and errors go to stderr.
    """
    tone = getattr(status.tone, "value", status.tone)
    _emit(tone, status.message, prefix=False)


# =============================================================================
# Progress
# =============================================================================


def create_transfer_progress() -> Progress:
    """Rich progress display for a byte transfer.

    Tasks must carry a ``speed`` field holding a preformatted rate.
    """
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        DownloadColumn(),
        TextColumn("{task.fields[speed]}"),
        TimeElapsedColumn(),
        console=console,
    )
