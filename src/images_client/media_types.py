"""
Media types used on the Images v2 wire.

Single source of truth for content types sent and accepted by the client.
"""
from __future__ import annotations

JSON = "application/json"
OCTET_STREAM = "application/octet-stream"

# PATCH dialect understood by Images API v2.1+
JSON_PATCH_V21 = "application/openstack-images-v2.1-json-patch"


__all__ = ["JSON", "OCTET_STREAM", "JSON_PATCH_V21"]
