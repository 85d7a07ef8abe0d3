"""
Human-readable output formatting.

Centralizes all CLI output formatting so commands stay thin.
"""
from __future__ import annotations

import json
from typing import Iterable, List

import typer

from ..json_patch import PatchOperation
from ..resources import Image, Member

_IMAGE_SUMMARY_FIELDS = (
    ("ID", "id"),
    ("Name", "name"),
    ("Status", "status"),
    ("Visibility", "visibility"),
    ("Protected", "protected"),
    ("Disk format", "disk_format"),
    ("Container format", "container_format"),
    ("Min disk (GB)", "min_disk"),
    ("Min RAM (MB)", "min_ram"),
    ("Owner", "owner_id"),
    ("Checksum", "checksum"),
)


def print_image(image: Image, as_json: bool = False) -> None:
    """
    Print image details.

    Args:
        image: Image to display
        as_json: Emit the full wire representation instead of a summary
    """
    if as_json:
        typer.echo(json.dumps(image.model_dump(mode="json", by_alias=True, exclude_none=True),
                              indent=2, sort_keys=True))
        return

    for label, attr in _IMAGE_SUMMARY_FIELDS:
        value = getattr(image, attr)
        if value is not None:
            typer.echo(f"{label}: {value}")
    if image.size is not None:
        typer.echo(f"Size: {_format_bytes(image.size)}")
    if image.tags:
        typer.echo(f"Tags: {', '.join(image.tags)}")
    extras = image.model_extra or {}
    if extras:
        typer.echo("Properties:")
    for key, value in sorted(extras.items()):
        typer.echo(f"  {key}: {value}")


def print_patch(patch: List[PatchOperation]) -> None:
    """Print a patch one operation per line, e.g. ``REPLACE /name "b"``."""
    if not patch:
        typer.echo("No changes")
        return
    for operation in patch:
        line = f"{operation.op.upper()} {operation.path}"
        if operation.op != "remove":
            line = f"{line} {json.dumps(operation.value, sort_keys=True)}"
        typer.echo(line)


def print_members(members: Iterable[Member]) -> None:
    members = list(members)
    if not members:
        typer.echo("No members")
        return
    for member in members:
        typer.echo(f"{member.id}  {member.status}")


def _format_bytes(size: int) -> str:
    """Format byte size in human-readable form."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"
