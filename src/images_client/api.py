"""
Operation descriptors for the Images v2 REST API.

Each descriptor names the HTTP method, the path template (placeholders are
filled from call parameters) and how the request body is carried.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from . import media_types


@dataclass(frozen=True)
class Operation:
    """
    One REST call.

    json_body: send ``params["body"]`` JSON-encoded
    content_type: send ``params["body"]`` as-is with this Content-Type
    """
    name: str
    method: str
    path: str
    json_body: bool = False
    content_type: Optional[str] = None

    def url_path(self, params: Mapping[str, Any]) -> str:
        try:
            return self.path.format(**params)
        except KeyError as e:
            raise ValueError(f"Missing path parameter {e} for operation {self.name}") from e


GET_IMAGE_SCHEMA = Operation("get_image_schema", "GET", "/v2/schemas/image")

POST_IMAGES = Operation("create_image", "POST", "/v2/images", json_body=True)
GET_IMAGE = Operation("get_image", "GET", "/v2/images/{id}")
PATCH_IMAGE = Operation("patch_image", "PATCH", "/v2/images/{id}",
                        content_type=media_types.JSON_PATCH_V21)
DELETE_IMAGE = Operation("delete_image", "DELETE", "/v2/images/{id}")
DEACTIVATE_IMAGE = Operation("deactivate_image", "POST", "/v2/images/{id}/actions/deactivate")
REACTIVATE_IMAGE = Operation("reactivate_image", "POST", "/v2/images/{id}/actions/reactivate")

PUT_IMAGE_DATA = Operation("upload_image_data", "PUT", "/v2/images/{id}/file",
                           content_type=media_types.OCTET_STREAM)
GET_IMAGE_DATA = Operation("download_image_data", "GET", "/v2/images/{id}/file")

GET_IMAGE_MEMBERS = Operation("list_image_members", "GET", "/v2/images/{image_id}/members")
POST_IMAGE_MEMBERS = Operation("create_image_member", "POST", "/v2/images/{image_id}/members", json_body=True)
GET_IMAGE_MEMBER = Operation("get_image_member", "GET", "/v2/images/{image_id}/members/{id}")
PUT_IMAGE_MEMBER = Operation("update_image_member", "PUT", "/v2/images/{image_id}/members/{id}", json_body=True)
DELETE_IMAGE_MEMBER = Operation("delete_image_member", "DELETE", "/v2/images/{image_id}/members/{id}")
