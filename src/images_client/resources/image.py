"""
Image resource.

Besides plain CRUD this implements the schema-driven update cycle:

    retrieve current state -> fetch schema (once per instance) -> normalize
    desired and current state -> validate desired -> diff -> drop restricted
    removals -> PATCH -> repopulate from the response
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, BinaryIO, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import Field, PrivateAttr

from .. import api
from .. import schema as schema_model
from ..json_patch import Patch, diff, filter_restricted_removals, serialize
from ..schema import SchemaDocument
from .base import Resource, decode_json
from .member import Member

logger = logging.getLogger(__name__)

ImageData = Union[bytes, BinaryIO, Iterable[bytes]]


class Image(Resource):
    """An image record in the Images v2 service."""

    id: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    visibility: Optional[str] = None
    protected: Optional[bool] = None
    tags: Optional[List[str]] = None
    container_format: Optional[str] = None
    disk_format: Optional[str] = None
    min_disk: Optional[int] = None
    min_ram: Optional[int] = None
    owner_id: Optional[str] = Field(default=None, alias="owner")
    size: Optional[int] = None
    virtual_size: Optional[int] = None
    checksum: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    file_uri: Optional[str] = Field(default=None, alias="file")
    schema_uri: Optional[str] = Field(default=None, alias="schema")
    self_uri: Optional[str] = Field(default=None, alias="self")

    _json_schema: Optional[SchemaDocument] = PrivateAttr(default=None)

    def create(self, data: Mapping[str, Any]) -> Image:
        """Register a new image (no data is uploaded)."""
        response = self.execute(api.POST_IMAGES, {"body": self._to_wire(data)})
        self.populate_from_response(response)
        logger.info(f"Created image {self.id}")
        return self

    def retrieve(self) -> Image:
        response = self.execute(api.GET_IMAGE, {"id": self.id})
        return self.populate_from_response(response)

    def get_schema(self) -> SchemaDocument:
        """
        Image schema, fetched on first use and kept for this instance's lifetime.

        Raises:
            SchemaParseError: If the served document cannot be parsed
        """
        if self._json_schema is None:
            response = self.execute(api.GET_IMAGE_SCHEMA)
            self._json_schema = schema_model.load(response.content)
        return self._json_schema

    def plan_update(self, desired: Mapping[str, Any]) -> Patch:
        """
        Compute the patch ``update`` would send, without writing anything.

        The current state is refreshed from the server first so the diff is
        taken against what is actually stored.

        Raises:
            ValidationError: If ``desired`` violates the image schema
            SchemaParseError: If the schema cannot be parsed
            TransportError: If either read fails
        """
        # retrieve latest state so we can accurately produce a diff
        self.retrieve()

        schema = self.get_schema()
        aliases = self.aliases()

        dst = schema.normalize(desired, aliases)
        src = schema.normalize(self.state(), aliases)

        schema.validate_instance(dst)

        raw_patch = diff(src, dst, schema.property_paths())
        patch = filter_restricted_removals(raw_patch, schema.removable_paths())
        logger.debug(f"Image {self.id}: {len(raw_patch)} change(s), {len(patch)} after filtering restricted removals")
        return patch

    def update(self, desired: Optional[Mapping[str, Any]] = None, **fields: Any) -> Image:
        """
        Bring the image to ``desired`` with a single JSON Patch request.

        ``desired`` may use wire names (``min_disk``, ``owner``) or in-memory
        names (``owner_id``). Omitted base properties are left untouched;
        omitted custom properties are removed.

        Raises:
            ValidationError: Before any write if ``desired`` violates the schema
            SchemaParseError: If the schema cannot be parsed
            TransportError: Propagated from the transport
        """
        desired = {**(desired or {}), **fields}
        patch = self.plan_update(desired)

        response = self.execute(api.PATCH_IMAGE, {"id": self.id, "body": serialize(patch)})
        logger.info(f"Patched image {self.id} with {len(patch)} operation(s)")
        return self.populate_from_response(response)

    def delete(self) -> None:
        self.execute(api.DELETE_IMAGE, {"id": self.id})

    def deactivate(self) -> None:
        self.execute(api.DEACTIVATE_IMAGE, {"id": self.id})

    def reactivate(self) -> None:
        self.execute(api.REACTIVATE_IMAGE, {"id": self.id})

    def upload_data(self, data: ImageData) -> None:
        """Upload the image payload as ``application/octet-stream``."""
        self.execute(api.PUT_IMAGE_DATA, {"id": self.id, "body": data})

    def download_data(self) -> bytes:
        response = self.execute(api.GET_IMAGE_DATA, {"id": self.id})
        return response.content

    def add_member(self, member_id: str) -> Member:
        """Share this image with another project."""
        return self.new(Member, image_id=self.id, member_id=member_id).create()

    def list_members(self) -> List[Member]:
        response = self.execute(api.GET_IMAGE_MEMBERS, {"image_id": self.id})
        body = decode_json(response)
        return [self.new(Member).populate_from_dict(item) for item in body.get("members", [])]

    def get_member(self, member_id: str) -> Member:
        """Unfetched handle on a member; call ``retrieve()`` to load it."""
        return self.new(Member, image_id=self.id, member_id=member_id)

    def _to_wire(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        aliases = self.aliases()
        return {aliases.wire(name): value for name, value in data.items()}


__all__ = ["Image"]
