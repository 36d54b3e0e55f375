"""Upload commands for dropctl."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from dropctl.cli.common import Context, ExitCode, global_options, handle_errors
from dropctl.core.exceptions import ClaimError
from dropctl.core.output import (
    OutputFormat,
    create_transfer_progress,
    format_bytes,
    format_rate,
    print_error,
    print_info,
    print_json,
    print_output,
    print_status,
    print_success,
    print_table,
    print_warning,
)
from dropctl.core.validation import parse_portal_url
from dropctl.models.portal import ConflictPolicy
from dropctl.models.progress import RunSummary, StatusMessage, StatusTone
from dropctl.models.queue import QueueItem
from dropctl.services.portal import PortalSession
from dropctl.services.uploads import UploadService
from dropctl.uploaders.collector import collect_paths

QUEUE_LABELS = {
    "relpath": "Path",
    "size": "Size",
    "status": "Status",
    "progress": "Progress",
    "final_relpath": "Stored As",
}


def _queue_rows(items: list[QueueItem]) -> list[dict[str, str]]:
    rows = []
    for item in items:
        row = item.to_row()
        row["size"] = format_bytes(item.size)
        rows.append(row)
    return rows


def _echo_status(status: StatusMessage) -> None:
    # Errors surface through the raised exception instead
    if status.tone is not StatusTone.ERROR:
        print_status(status)


def _print_conflicts(service: UploadService) -> None:
    conflicts = service.conflicts
    if not conflicts:
        return
    print_warning(service.conflict_message)
    print_table(
        [c.to_dict() for c in conflicts],
        ["relpath", "reason"],
        title="Filename conflicts",
        column_labels={"relpath": "Path", "reason": "Reason"},
    )


async def _send(
    ctx: Context,
    base_url: str,
    portal_id: str,
    paths: tuple[Path, ...],
    policy: Optional[str],
    dry_run: bool,
    stop_on_error: bool,
    checksum: bool,
) -> tuple[UploadService, Optional[RunSummary]]:
    config = ctx.get_config()
    show_progress = not ctx.quiet and ctx.output_format == OutputFormat.TABLE

    async with ctx.make_client(base_url) as client:
        service = UploadService(
            client,
            portal_id,
            chunk_size=config.chunk_size,
            sample_interval=config.sample_interval,
            stop_on_error=stop_on_error,
            checksum=checksum,
        )
        if show_progress:
            service.add_status_listener(_echo_status)

        await service.claim()
        await service.add(await collect_paths(paths))
        if not service.items:
            return service, None
        if policy:
            service.set_policy(ConflictPolicy(policy))

        if show_progress:
            _print_conflicts(service)
        if dry_run:
            return service, None

        if not show_progress:
            return service, await service.run()

        with create_transfer_progress() as progress:
            task = progress.add_task(
                "Uploading", total=service.total_bytes or None, speed=""
            )

            def refresh(item: QueueItem) -> None:
                progress.update(
                    task,
                    completed=service.uploaded_bytes,
                    description=item.relpath,
                    speed=format_rate(service.speed_bps),
                )

            unsubscribe = service.queue.subscribe(refresh)
            try:
                summary = await service.run()
            finally:
                unsubscribe()
                progress.update(task, completed=service.uploaded_bytes, speed="")
        return service, summary


@click.command("send")
@click.argument("portal_url")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--policy",
    type=click.Choice([p.value for p in ConflictPolicy]),
    default=None,
    help="Conflict policy (default: the portal's)",
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Keep uploading after a failed file",
)
@click.option("--checksum", is_flag=True, help="Send a SHA-256 of each file for verification")
@click.option("--dry-run", is_flag=True, help="Claim and check conflicts without uploading")
@global_options
@handle_errors
def send(
    ctx: Context,
    portal_url: str,
    paths: tuple[Path, ...],
    policy: Optional[str],
    continue_on_error: bool,
    checksum: bool,
    dry_run: bool,
) -> None:
    """Upload files and folders to a portal.

    Folders are uploaded recursively and keep their structure under the
    portal's destination.

    Example:
        dropctl send http://192.168.1.42/p/p_abc123 report.pdf photos/
        dropctl send http://192.168.1.42/p/p_abc123 photos/ --policy autorename
    """
    config = ctx.get_config()
    base_url, portal_id = parse_portal_url(portal_url)
    stop_on_error = config.stop_on_error and not continue_on_error

    try:
        service, summary = asyncio.run(
            _send(
                ctx,
                base_url,
                portal_id,
                paths,
                policy,
                dry_run,
                stop_on_error,
                checksum or config.checksum,
            )
        )
    except ClaimError as e:
        print_error(str(e))
        sys.exit(ExitCode.CLAIM_ERROR)

    if ctx.output_format == OutputFormat.JSON and not ctx.quiet:
        print_json(
            {
                "portal_id": portal_id,
                "policy": service.policy.value,
                "conflicts": [c.to_dict() for c in service.conflicts],
                "items": [item.to_dict() for item in service.items],
                "total_bytes": service.total_bytes,
                "uploaded_bytes": service.uploaded_bytes,
                "status": {"message": service.status.message, "tone": service.status.tone.value},
            }
        )
        return

    if not service.items:
        print_warning("No files to upload")
        return

    if dry_run:
        if not ctx.quiet:
            print_success(f"{len(service.items)} file(s) ready, {format_bytes(service.total_bytes)}")
        return

    print_output(
        _queue_rows(service.items),
        format=ctx.output_format,
        columns=QueueItem.table_columns(),
        column_labels=QUEUE_LABELS,
        title="Queue",
        quiet=ctx.quiet,
    )
    if summary is None:
        return
    if ctx.quiet:
        if summary.close_error:
            print_warning(service.status.message)
        return
    print_info(
        f"{summary.succeeded} file(s), {format_bytes(summary.bytes_sent)} in "
        f"{summary.duration:.1f}s ({format_rate(summary.throughput_bps)})"
    )


@click.command("info")
@click.argument("portal_url")
@global_options
@handle_errors
def info(ctx: Context, portal_url: str) -> None:
    """Show a portal's expiry and policy without claiming it.

    Example:
        dropctl info http://192.168.1.42/p/p_abc123
    """
    base_url, portal_id = parse_portal_url(portal_url)

    async def _info():
        async with ctx.make_client(base_url) as client:
            return await PortalSession(client, portal_id).info()

    portal = asyncio.run(_info())
    if ctx.output_format == OutputFormat.JSON:
        print_json(portal.to_dict())
        return
    print_output(
        portal.to_row(),
        format=ctx.output_format,
        column_labels={
            "portal_id": "Portal",
            "expires_at": "Expires",
            "policy": "Policy",
            "reusable": "Reusable",
        },
        quiet=ctx.quiet,
        id_field="portal_id",
    )
