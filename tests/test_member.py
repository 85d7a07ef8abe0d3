"""
Tests for the image Member resource.
"""
from __future__ import annotations

import pytest

from images_client.errors import NotFound
from images_client.resources import MEMBER_STATUSES, Member

from .fixtures.image_documents import IMAGE_ID, MEMBER_ID, member_body

MEMBER_PATH = f"/v2/images/{IMAGE_ID}/members/{MEMBER_ID}"


@pytest.fixture
def member(transport):
    return Member(transport, image_id=IMAGE_ID, member_id=MEMBER_ID)


class TestMember:
    """Test member retrieval, status changes and removal."""

    def test_retrieve(self, transport, member):
        transport.add("GET", MEMBER_PATH, member_body("accepted"))

        member.retrieve()

        assert member.status == "accepted"
        assert member.image_id == IMAGE_ID
        assert member.id == MEMBER_ID
        assert member.schema_uri == "/v2/schemas/member"

    def test_retrieve_unknown_member_raises(self, member):
        with pytest.raises(NotFound):
            member.retrieve()

    def test_update_sends_status(self, transport, member):
        transport.add("PUT", MEMBER_PATH, member_body("rejected"))

        member.update("rejected")

        call = transport.calls_to("PUT", MEMBER_PATH)[0]
        assert call.body == {"status": "rejected"}
        assert member.status == "rejected"

    def test_update_uses_status_set_on_instance(self, transport, member):
        transport.add("PUT", MEMBER_PATH, member_body("accepted"))
        member.status = "accepted"

        member.update()

        assert transport.calls_to("PUT")[0].body == {"status": "accepted"}

    @pytest.mark.parametrize("status", [None, "", "approved", "ACCEPTED"])
    def test_invalid_status_rejected_before_request(self, transport, member, status):
        if status is not None:
            member.status = status

        with pytest.raises(ValueError, match="Invalid member status"):
            member.update()
        assert transport.calls == []

    def test_delete(self, transport, member):
        transport.add("DELETE", MEMBER_PATH, status=204)

        member.delete()

        assert [c.method for c in transport.calls] == ["DELETE"]

    def test_statuses(self):
        assert MEMBER_STATUSES == ("pending", "accepted", "rejected")
