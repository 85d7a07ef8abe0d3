"""
Schema model for Images v2 resource types.

The Images service publishes a JSON Schema (draft 4) for every resource type
at ``/v2/schemas/<type>``. This module parses that document into an immutable
property tree and uses it to:

- enumerate the JSON pointer paths the schema declares
- normalize an arbitrary mapping (wire names or in-memory names) onto the
  declared property set, so current and desired state compare directly
- validate desired state, reporting every violated constraint at once
"""
from __future__ import annotations

import copy
import json
import logging
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple, Union

import jsonschema
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import SchemaParseError, ValidationError

logger = logging.getLogger(__name__)

__all__ = ["AliasTable", "PropertySchema", "SchemaDocument", "load", "escape_token"]


def escape_token(token: Any) -> str:
    """Escape a single JSON pointer reference token (RFC 6901)."""
    return str(token).replace("~", "~0").replace("/", "~1")


class AliasTable:
    """
    Two-way mapping between wire names and in-memory (canonical) names.

    Only names that differ need an entry; anything not listed maps to itself.
    """

    def __init__(self, wire_to_canonical: Optional[Mapping[str, str]] = None):
        self._to_canonical: Dict[str, str] = dict(wire_to_canonical or {})
        self._to_wire: Dict[str, str] = {v: k for k, v in self._to_canonical.items()}

    def canonical(self, wire_name: str) -> str:
        return self._to_canonical.get(wire_name, wire_name)

    def wire(self, canonical_name: str) -> str:
        return self._to_wire.get(canonical_name, canonical_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AliasTable):
            return NotImplemented
        return self._to_canonical == other._to_canonical

    def __repr__(self) -> str:
        return f"AliasTable({self._to_canonical!r})"


class PropertySchema(BaseModel):
    """
    One node of the constraint tree: a declared property and what it may hold.

    ``properties`` is populated for object-typed nodes that declare members,
    ``items`` for array-typed nodes.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: Union[str, Tuple[str, ...], None] = None
    read_only: bool = Field(default=False, alias="readOnly")
    is_base: bool = True
    properties: Dict[str, "PropertySchema"] = Field(default_factory=dict)
    items: Optional["PropertySchema"] = None
    required: Tuple[str, ...] = ()

    @classmethod
    def from_descriptor(cls, name: str, descriptor: Any) -> PropertySchema:
        """Build a node (and its children) from a raw JSON Schema descriptor."""
        if not isinstance(descriptor, Mapping):
            raise SchemaParseError(f"Descriptor for property '{name}' must be an object, "
                                   f"got {type(descriptor).__name__}")

        raw_type = descriptor.get("type")
        if isinstance(raw_type, list):
            raw_type = tuple(raw_type)

        children = descriptor.get("properties") or {}
        if not isinstance(children, Mapping):
            raise SchemaParseError(f"'properties' of '{name}' must be an object")

        items = descriptor.get("items")
        # Tuple-style "items" (a list of schemas) is not addressable per element
        items_node = cls.from_descriptor(f"{name}[]", items) if isinstance(items, Mapping) else None

        return cls(
            name=name,
            type=raw_type,
            read_only=bool(descriptor.get("readOnly", False)),
            is_base=bool(descriptor.get("is_base", True)),
            properties={k: cls.from_descriptor(k, v) for k, v in children.items()},
            items=items_node,
            required=_required_names(descriptor.get("required"), f"property '{name}'"),
        )

    @property
    def types(self) -> Tuple[str, ...]:
        if self.type is None:
            return ()
        if isinstance(self.type, str):
            return (self.type,)
        return self.type


class SchemaDocument(BaseModel):
    """
    Parsed JSON Schema describing one resource type.

    Immutable once loaded. The raw document is kept for constraint checking.
    """
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    properties: Dict[str, PropertySchema]
    required: Tuple[str, ...] = ()
    document: Dict[str, Any] = Field(repr=False)

    def property_paths(self) -> FrozenSet[str]:
        """
        All declared property locations as JSON pointers.

        Members of nested declared objects are included (``/a/b``); array
        elements are not individually addressable.
        """
        return frozenset(path for path, _ in self._walk())

    def removable_paths(self) -> FrozenSet[str]:
        """
        Declared paths that may be cleared with a ``remove`` operation.

        Only operator-defined custom properties (``"is_base": false``) and
        members declared under them are removable; base properties and
        anything nested under them are not.
        """
        walked = list(self._walk())
        roots = [path for path, prop in walked if not prop.is_base]
        return frozenset(
            path for path, _ in walked
            if any(path == root or path.startswith(f"{root}/") for root in roots)
        )

    def _walk(self) -> Iterator[Tuple[str, PropertySchema]]:
        stack: List[Tuple[str, PropertySchema]] = [
            (f"/{escape_token(name)}", prop) for name, prop in self.properties.items()
        ]
        while stack:
            path, prop = stack.pop()
            yield path, prop
            for child_name, child in prop.properties.items():
                stack.append((f"{path}/{escape_token(child_name)}", child))

    def normalize(self, source: Mapping[str, Any],
                  aliases: Optional[AliasTable] = None) -> Dict[str, Any]:
        """
        Project ``source`` onto the declared property set.

        For each declared property the value is looked up first under the
        in-memory name the alias table maps it to, then under the wire name.
        Absent properties are omitted, read-only properties are skipped and
        undeclared keys are dropped. Output is keyed by wire name.

        Args:
            source: Mapping keyed by wire names, in-memory names or a mix
            aliases: Wire name to in-memory name table

        Returns:
            Normalized structure, directly comparable with any other
            structure normalized against the same schema
        """
        return _normalize_object(self.properties, source, aliases or AliasTable())

    def validate_instance(self, instance: Mapping[str, Any]) -> None:
        """
        Check ``instance`` against the schema constraints.

        Raises:
            ValidationError: Carrying every violated constraint
        """
        validator_cls = jsonschema.validators.validator_for(self.document, default=jsonschema.Draft4Validator)
        validator = validator_cls(self.document)

        errors = sorted(validator.iter_errors(dict(instance)), key=_error_sort_key)
        if errors:
            messages = [_format_error(e) for e in errors]
            logger.debug(f"Schema {self.name or '<anonymous>'} rejected instance: {messages}")
            raise ValidationError(messages)


def load(raw: Union[str, bytes, Mapping[str, Any]]) -> SchemaDocument:
    """
    Parse a JSON Schema document into a SchemaDocument.

    Args:
        raw: JSON text/bytes, or an already decoded document

    Returns:
        Immutable SchemaDocument

    Raises:
        SchemaParseError: If the text is not valid JSON, is not a schema
            object, or has no recognizable property map
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SchemaParseError(f"Schema document is not valid JSON: {e}") from e
    else:
        document = raw

    if not isinstance(document, Mapping):
        raise SchemaParseError(f"Schema document must be a JSON object, got {type(document).__name__}")

    properties = document.get("properties")
    if not isinstance(properties, Mapping):
        raise SchemaParseError("Schema document has no 'properties' object")

    document = copy.deepcopy(dict(document))

    try:
        tree = {name: PropertySchema.from_descriptor(name, desc) for name, desc in document["properties"].items()}
    except PydanticValidationError as e:
        raise SchemaParseError(f"Malformed property descriptor: {e}") from e

    validator_cls = jsonschema.validators.validator_for(document, default=jsonschema.Draft4Validator)
    try:
        validator_cls.check_schema(document)
    except jsonschema.exceptions.SchemaError as e:
        raise SchemaParseError(f"Invalid JSON Schema: {e.message}") from e

    parsed = SchemaDocument(
        name=document.get("name"),
        properties=tree,
        required=_required_names(document.get("required"), "schema document"),
        document=document,
    )
    logger.debug(f"Loaded schema {parsed.name or '<anonymous>'} with {len(parsed.properties)} properties")
    return parsed


_ABSENT = object()


def _lookup(source: Mapping[str, Any], wire_name: str, aliases: AliasTable) -> Any:
    canonical = aliases.canonical(wire_name)
    if canonical in source:
        return source[canonical]
    if wire_name in source:
        return source[wire_name]
    return _ABSENT


def _normalize_object(properties: Mapping[str, PropertySchema], source: Mapping[str, Any],
                      aliases: AliasTable) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name in sorted(properties):
        prop = properties[name]
        if prop.read_only:
            continue
        value = _lookup(source, name, aliases)
        if value is _ABSENT:
            continue
        out[name] = _normalize_value(prop, value, aliases)
    return out


def _normalize_value(prop: PropertySchema, value: Any, aliases: AliasTable) -> Any:
    if prop.properties and isinstance(value, Mapping):
        return _normalize_object(prop.properties, value, aliases)
    if isinstance(value, (list, tuple)):
        if prop.items is not None:
            return [_normalize_value(prop.items, v, aliases) for v in value]
        return copy.deepcopy(list(value))
    return copy.deepcopy(value)


def _error_sort_key(error: jsonschema.exceptions.ValidationError) -> Tuple[str, str]:
    return ("/".join(str(p) for p in error.absolute_path), error.message)


def _format_error(error: jsonschema.exceptions.ValidationError) -> str:
    if error.absolute_path:
        pointer = "/" + "/".join(escape_token(p) for p in error.absolute_path)
        return f"{pointer}: {error.message}"
    return error.message


def _required_names(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SchemaParseError(f"'required' of {where} must be an array of property names")
    return tuple(value)
