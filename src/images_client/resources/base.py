"""
Base class for Images v2 resources.

Resources are pydantic models whose fields use in-memory (canonical) names and
declare the wire name as a field alias where the two differ. A resource is
bound to a Transport and repopulates itself wholesale from response bodies.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import BaseModel, ConfigDict, PrivateAttr

from ..api import Operation
from ..errors import TransportError
from ..schema import AliasTable
from ..transport import Transport

logger = logging.getLogger(__name__)


class Resource(BaseModel):
    """
    A server-side object plus the transport used to act on it.

    Fields the server sends that are not declared on the model (operator
    custom properties) are kept as extras.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    _transport: Optional[Transport] = PrivateAttr(default=None)

    def __init__(self, transport: Optional[Transport] = None, /, **data: Any):
        super().__init__(**data)
        self._transport = transport

    @classmethod
    def aliases(cls) -> AliasTable:
        """Wire name to in-memory name table derived from field aliases."""
        return AliasTable({
            field.alias: name
            for name, field in cls.model_fields.items()
            if field.alias and field.alias != name
        })

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to a transport")
        return self._transport

    def state(self) -> Dict[str, Any]:
        """
        Current field values keyed by in-memory name.

        Only fields actually populated are included, so a property the server
        omitted reads as absent rather than as ``None``.
        """
        data = self.model_dump(mode="json", by_alias=False)
        populated = set(self.model_fields_set) | set(self.model_extra or {})
        return {name: value for name, value in data.items() if name in populated}

    def populate_from_dict(self, data: Mapping[str, Any]) -> Resource:
        """Replace the entire in-memory state with ``data`` (wire names)."""
        fresh = type(self).model_validate(dict(data))
        object.__setattr__(self, "__dict__", fresh.__dict__)
        object.__setattr__(self, "__pydantic_extra__", fresh.__pydantic_extra__)
        object.__setattr__(self, "__pydantic_fields_set__", fresh.__pydantic_fields_set__)
        return self

    def populate_from_response(self, response: httpx.Response) -> Resource:
        return self.populate_from_dict(decode_json(response))

    def execute(self, operation: Operation, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        return self.transport.execute(operation, params)

    def new(self, model_cls: type, **data: Any) -> Any:
        """Create another resource sharing this one's transport."""
        return model_cls(self._transport, **data)


def decode_json(response: httpx.Response) -> Dict[str, Any]:
    """Decode a JSON object body."""
    try:
        body = response.json()
    except ValueError as e:
        raise TransportError(f"Response body is not valid JSON: {e}",
                             status_code=response.status_code) from e
    if not isinstance(body, dict):
        raise TransportError(f"Expected a JSON object, got {type(body).__name__}",
                             status_code=response.status_code)
    return body


__all__ = ["Resource", "decode_json"]
