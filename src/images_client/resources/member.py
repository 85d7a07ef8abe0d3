"""Image member resource (image sharing between projects)."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .. import api
from .base import Resource

MEMBER_STATUSES = ("pending", "accepted", "rejected")


class Member(Resource):
    """A project an image is shared with, and whether it accepted."""

    image_id: Optional[str] = None
    id: Optional[str] = Field(default=None, alias="member_id")
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    schema_uri: Optional[str] = Field(default=None, alias="schema")

    def create(self) -> Member:
        response = self.execute(api.POST_IMAGE_MEMBERS, {
            "image_id": self.image_id,
            "body": {"member": self.id},
        })
        return self.populate_from_response(response)

    def retrieve(self) -> Member:
        response = self.execute(api.GET_IMAGE_MEMBER, {"image_id": self.image_id, "id": self.id})
        return self.populate_from_response(response)

    def update(self, status: Optional[str] = None) -> Member:
        """
        Send the member status (as set on the instance, or ``status``).

        Raises:
            ValueError: If the status is not one the service accepts
        """
        if status is not None:
            self.status = status
        if self.status not in MEMBER_STATUSES:
            raise ValueError(f"Invalid member status {self.status!r}. "
                             f"Expected one of: {', '.join(MEMBER_STATUSES)}")

        response = self.execute(api.PUT_IMAGE_MEMBER, {
            "image_id": self.image_id,
            "id": self.id,
            "body": {"status": self.status},
        })
        return self.populate_from_response(response)

    def delete(self) -> None:
        self.execute(api.DELETE_IMAGE_MEMBER, {"image_id": self.image_id, "id": self.id})


__all__ = ["Member", "MEMBER_STATUSES"]
