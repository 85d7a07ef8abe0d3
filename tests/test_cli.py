"""
CLI tests with a fake transport.

Commands are wired to an ImagesService over FakeTransport, so these exercise
argument parsing, output formatting and exit codes without a server.
"""
from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from images_client import cli
from images_client.cli_context import CLIContext
from images_client.service import ImagesService

from .fixtures.image_documents import IMAGE_ID, MEMBER_ID, image_body, member_body

IMAGE_PATH = f"/v2/images/{IMAGE_ID}"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def cli_context(monkeypatch, settings, transport):
    """Route every command through the fake transport."""
    context = CLIContext(settings=settings, _service=ImagesService(transport))
    monkeypatch.setattr(cli, "_context", lambda: context)
    return context


class TestImageShow:
    """Test image show command."""

    def test_summary(self, runner):
        result = runner.invoke(cli.app, ["image", "show", IMAGE_ID])

        assert result.exit_code == 0
        assert f"ID: {IMAGE_ID}" in result.output
        assert "Name: cirros" in result.output
        assert "Protected: False" in result.output
        assert "Size: 12.7 MB" in result.output
        assert "Tags: test" in result.output
        assert "Properties:" in result.output
        assert "hw_disk_bus: scsi" in result.output

    def test_json_uses_wire_names(self, runner):
        result = runner.invoke(cli.app, ["image", "show", IMAGE_ID, "--json"])

        assert result.exit_code == 0
        document = json.loads(result.output)
        assert document["owner"] == image_body()["owner"]
        assert document["file"] == f"{IMAGE_PATH}/file"
        assert document["hw_disk_bus"] == "scsi"
        assert "owner_id" not in document

    def test_not_found_exit_code(self, runner):
        result = runner.invoke(cli.app, ["image", "show", "missing"])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestImageUpdate:
    """Test image update command."""

    def test_dry_run_prints_patch_without_writing(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "name=renamed", "min_disk=10", "--dry-run"])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            'REPLACE /min_disk 10',
            'REPLACE /name "renamed"',
        ]
        assert transport.writes == []

    def test_dry_run_without_changes(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "--dry-run"])

        assert result.exit_code == 0
        assert "No changes" in result.output

    def test_remove_custom_property(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "--remove", "hw_disk_bus", "--dry-run"])

        assert result.exit_code == 0
        assert result.output.strip() == "REMOVE /hw_disk_bus"

    def test_removing_base_property_is_ignored(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "--remove", "min_ram", "--dry-run"])

        assert result.exit_code == 0
        assert "No changes" in result.output

    def test_wire_name_overrides_in_memory_value(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "owner=someone-else", "--dry-run"])

        assert result.exit_code == 0
        assert result.output.strip() == 'REPLACE /owner "someone-else"'

    def test_string_properties_keep_numeric_looking_text(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "name=123", "--dry-run"])

        assert result.exit_code == 0
        assert result.output.strip() == 'REPLACE /name "123"'

    def test_nullable_string_accepts_null(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "name=null", "--dry-run"])

        assert result.exit_code == 0
        assert result.output.strip() == "REPLACE /name null"

    def test_non_string_properties_decoded_as_json(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "protected=true", "--dry-run"])

        assert result.exit_code == 0
        assert result.output.strip() == "REPLACE /protected true"

    def test_update_sends_patch_and_prints_image(self, runner, transport):
        transport.add("PATCH", IMAGE_PATH, image_body(name="renamed", tags=["a", "b"]))

        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "name=renamed", 'tags=["a","b"]'])

        assert result.exit_code == 0
        assert "Name: renamed" in result.output
        assert transport.calls_to("PATCH")[0].json_body() == [
            {"op": "replace", "path": "/name", "value": "renamed"},
            {"op": "replace", "path": "/tags", "value": ["a", "b"]},
        ]

    def test_validation_failure_exit_code(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "min_disk=ten", "visibility=secret"])

        assert result.exit_code == 2
        assert "2 error(s)" in result.output
        assert "/min_disk" in result.output
        assert transport.writes == []

    def test_malformed_assignment_exit_code(self, runner, transport):
        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "name"])

        assert result.exit_code == 2
        assert "Expected key=value" in result.output
        assert transport.calls == []

    def test_unparseable_schema_exit_code(self, runner, transport):
        transport.add("GET", "/v2/schemas/image", content=b"not json")

        result = runner.invoke(cli.app, ["image", "update", IMAGE_ID, "name=renamed"])

        assert result.exit_code == 4
        assert transport.writes == []


class TestImageLifecycle:
    """Test delete, activation and data commands."""

    def test_delete(self, runner, transport):
        transport.add("DELETE", IMAGE_PATH, status=204)

        result = runner.invoke(cli.app, ["image", "delete", IMAGE_ID])

        assert result.exit_code == 0
        assert f"Deleted image {IMAGE_ID}" in result.output

    def test_deactivate_and_reactivate(self, runner, transport):
        transport.add("POST", f"{IMAGE_PATH}/actions/deactivate", status=204)
        transport.add("POST", f"{IMAGE_PATH}/actions/reactivate", status=204)

        first = runner.invoke(cli.app, ["image", "deactivate", IMAGE_ID])
        second = runner.invoke(cli.app, ["image", "reactivate", IMAGE_ID])

        assert first.exit_code == 0 and second.exit_code == 0
        assert f"Deactivated image {IMAGE_ID}" in first.output
        assert f"Reactivated image {IMAGE_ID}" in second.output

    def test_server_error_exit_code(self, runner, transport):
        transport.add("DELETE", IMAGE_PATH, {"message": "in use"}, status=500)

        result = runner.invoke(cli.app, ["image", "delete", IMAGE_ID])

        assert result.exit_code == 3

    def test_upload(self, runner, transport, tmp_path):
        source = tmp_path / "cirros.qcow2"
        source.write_bytes(b"qcow2-bytes")
        transport.add("PUT", f"{IMAGE_PATH}/file", status=204)

        result = runner.invoke(cli.app, ["image", "upload", IMAGE_ID, str(source)])

        assert result.exit_code == 0
        assert "Uploaded" in result.output
        assert len(transport.calls_to("PUT")) == 1

    def test_download(self, runner, transport, tmp_path):
        dest = tmp_path / "out.img"
        transport.add("GET", f"{IMAGE_PATH}/file", content=b"image-bytes")

        result = runner.invoke(cli.app, ["image", "download", IMAGE_ID, str(dest)])

        assert result.exit_code == 0
        assert "Downloaded 11 bytes" in result.output
        assert dest.read_bytes() == b"image-bytes"


class TestMemberCommands:
    """Test member subcommands."""

    def test_list(self, runner, transport):
        transport.add("GET", f"{IMAGE_PATH}/members", {"members": [member_body("accepted")]})

        result = runner.invoke(cli.app, ["member", "list", IMAGE_ID])

        assert result.exit_code == 0
        assert f"{MEMBER_ID}  accepted" in result.output

    def test_list_empty(self, runner, transport):
        transport.add("GET", f"{IMAGE_PATH}/members", {"members": []})

        result = runner.invoke(cli.app, ["member", "list", IMAGE_ID])

        assert result.exit_code == 0
        assert "No members" in result.output

    def test_add(self, runner, transport):
        transport.add("POST", f"{IMAGE_PATH}/members", member_body())

        result = runner.invoke(cli.app, ["member", "add", IMAGE_ID, MEMBER_ID])

        assert result.exit_code == 0
        assert f"Added member {MEMBER_ID} (pending)" in result.output

    def test_update(self, runner, transport):
        transport.add("PUT", f"{IMAGE_PATH}/members/{MEMBER_ID}", member_body("accepted"))

        result = runner.invoke(cli.app, ["member", "update", IMAGE_ID, MEMBER_ID, "accepted"])

        assert result.exit_code == 0
        assert f"Member {MEMBER_ID} is now accepted" in result.output

    def test_update_invalid_status(self, runner, transport):
        result = runner.invoke(cli.app, ["member", "update", IMAGE_ID, MEMBER_ID, "maybe"])

        assert result.exit_code == 2
        assert "Invalid member status" in result.output
        assert transport.calls == []

    def test_remove(self, runner, transport):
        transport.add("DELETE", f"{IMAGE_PATH}/members/{MEMBER_ID}", status=204)

        result = runner.invoke(cli.app, ["member", "remove", IMAGE_ID, MEMBER_ID])

        assert result.exit_code == 0
        assert f"Removed member {MEMBER_ID}" in result.output
