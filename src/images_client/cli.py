"""
Images client CLI

Commands:
- image show/update/delete/deactivate/reactivate/upload/download
- member list/add/update/remove
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from .cli_context import CLIContext
from .operations import run_and_exit
from .operations.printers import print_image, print_members, print_patch
from .schema import PropertySchema

app = typer.Typer(name="images-client", help="OpenStack Images v2 client")
image_app = typer.Typer(help="Manage images")
member_app = typer.Typer(help="Manage image members")
app.add_typer(image_app, name="image")
app.add_typer(member_app, name="member")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _context() -> CLIContext:
    return CLIContext.from_env()


def _parse_assignments(assignments: List[str]) -> Dict[str, str]:
    """
    Split ``key=value`` pairs, leaving values undecoded.

    Raises:
        ValueError: If an item has no ``=`` or an empty key
    """
    parsed: Dict[str, str] = {}
    for item in assignments:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {item!r}")
        parsed[key] = raw
    return parsed


def _decode_value(raw: str, prop: Optional[PropertySchema]) -> Any:
    """
    Decode an assignment value.

    Properties the schema types as plain strings keep the raw text, so
    ``name=123`` stays ``"123"``. Anything else is decoded as JSON when
    possible (``min_disk=10``, ``tags='["a","b"]'``, ``protected=true``)
    and kept as a string otherwise.
    """
    if prop is not None and "string" in prop.types and set(prop.types) <= {"string", "null"}:
        if raw == "null" and "null" in prop.types:
            return None
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@image_app.command("show")
def image_show(
    image_id: str = typer.Argument(..., help="Image ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw image document")
) -> None:
    """Show image details."""

    def _show() -> None:
        image = _context().service.get_image(image_id)
        print_image(image, as_json=as_json)

    run_and_exit(_show)


@image_app.command("update")
def image_update(
    image_id: str = typer.Argument(..., help="Image ID"),
    assignments: Optional[List[str]] = typer.Argument(None, help="Properties to set, as key=value"),
    remove: Optional[List[str]] = typer.Option(None, "--remove", help="Custom property to remove (repeatable)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the patch without sending it")
) -> None:
    """Update image properties with a JSON Patch request."""

    def _update() -> None:
        raw_changes = _parse_assignments(assignments or [])
        image = _context().service.get_image(image_id)

        aliases = image.aliases()
        schema = image.get_schema()
        changes = {
            key: _decode_value(raw, schema.properties.get(aliases.wire(key)))
            for key, raw in raw_changes.items()
        }

        # state() is keyed by in-memory names; align overrides with it
        desired = image.state()
        desired.update({aliases.canonical(key): value for key, value in changes.items()})
        for key in remove or []:
            desired.pop(aliases.canonical(key), None)

        if dry_run:
            print_patch(image.plan_update(desired))
            return

        image.update(desired)
        print_image(image)

    run_and_exit(_update)


@image_app.command("delete")
def image_delete(image_id: str = typer.Argument(..., help="Image ID")) -> None:
    """Delete an image."""

    def _delete() -> None:
        _context().service.delete_image(image_id)
        typer.echo(f"Deleted image {image_id}")

    run_and_exit(_delete)


@image_app.command("deactivate")
def image_deactivate(image_id: str = typer.Argument(..., help="Image ID")) -> None:
    """Deactivate an image (data downloads are refused)."""

    def _deactivate() -> None:
        _context().service.image(image_id).deactivate()
        typer.echo(f"Deactivated image {image_id}")

    run_and_exit(_deactivate)


@image_app.command("reactivate")
def image_reactivate(image_id: str = typer.Argument(..., help="Image ID")) -> None:
    """Reactivate a deactivated image."""

    def _reactivate() -> None:
        _context().service.image(image_id).reactivate()
        typer.echo(f"Reactivated image {image_id}")

    run_and_exit(_reactivate)


@image_app.command("upload")
def image_upload(
    image_id: str = typer.Argument(..., help="Image ID"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to upload")
) -> None:
    """Upload image data from a file."""

    def _upload() -> None:
        with open(path, "rb") as f:
            _context().service.image(image_id).upload_data(f)
        typer.echo(f"Uploaded {path} to image {image_id}")

    run_and_exit(_upload)


@image_app.command("download")
def image_download(
    image_id: str = typer.Argument(..., help="Image ID"),
    dest: Path = typer.Argument(..., help="Destination file")
) -> None:
    """Download image data to a file."""

    def _download() -> None:
        data = _context().service.image(image_id).download_data()
        dest.write_bytes(data)
        typer.echo(f"Downloaded {len(data)} bytes to {dest}")

    run_and_exit(_download)


@member_app.command("list")
def member_list(image_id: str = typer.Argument(..., help="Image ID")) -> None:
    """List projects an image is shared with."""

    def _list() -> None:
        print_members(_context().service.image(image_id).list_members())

    run_and_exit(_list)


@member_app.command("add")
def member_add(
    image_id: str = typer.Argument(..., help="Image ID"),
    member_id: str = typer.Argument(..., help="Project ID to share with")
) -> None:
    """Share an image with a project."""

    def _add() -> None:
        member = _context().service.image(image_id).add_member(member_id)
        typer.echo(f"Added member {member.id} ({member.status})")

    run_and_exit(_add)


@member_app.command("update")
def member_update(
    image_id: str = typer.Argument(..., help="Image ID"),
    member_id: str = typer.Argument(..., help="Member project ID"),
    status: str = typer.Argument(..., help="accepted, rejected or pending")
) -> None:
    """Accept or reject a shared image."""

    def _update() -> None:
        member = _context().service.image(image_id).get_member(member_id).update(status)
        typer.echo(f"Member {member.id} is now {member.status}")

    run_and_exit(_update)


@member_app.command("remove")
def member_remove(
    image_id: str = typer.Argument(..., help="Image ID"),
    member_id: str = typer.Argument(..., help="Member project ID")
) -> None:
    """Stop sharing an image with a project."""

    def _remove() -> None:
        _context().service.image(image_id).get_member(member_id).delete()
        typer.echo(f"Removed member {member_id}")

    run_and_exit(_remove)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
