"""
JSON Patch (RFC 6902) generation for resource updates.

Only the ``add``, ``remove`` and ``replace`` vocabulary is produced. Diffs are
deterministic: operations come out sorted by path so that diffing identical
inputs twice yields byte-identical serialized patches.
"""
from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Collection, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Union

from .schema import escape_token

logger = logging.getLogger(__name__)

OP_ADD = "add"
OP_REMOVE = "remove"
OP_REPLACE = "replace"

__all__ = [
    "OP_ADD",
    "OP_REMOVE",
    "OP_REPLACE",
    "PatchOperation",
    "diff",
    "filter_restricted_removals",
    "serialize",
    "apply_patch",
    "json_equal",
]


@dataclass(frozen=True)
class PatchOperation:
    """A single patch operation; ``value`` is ignored for ``remove``."""
    op: str
    path: str
    value: Any = None

    def __post_init__(self):
        if self.op not in (OP_ADD, OP_REMOVE, OP_REPLACE):
            raise ValueError(f"Unsupported patch operation: {self.op}")

    def to_dict(self) -> Dict[str, Any]:
        if self.op == OP_REMOVE:
            return {"op": self.op, "path": self.path}
        return {"op": self.op, "path": self.path, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PatchOperation:
        return cls(op=data["op"], path=data["path"], value=data.get("value"))


Patch = List[PatchOperation]


def diff(src: Mapping[str, Any], dst: Mapping[str, Any],
         declared_paths: Optional[Collection[str]] = None) -> Patch:
    """
    Compute the patch that turns ``src`` into ``dst``.

    Nested objects are diffed member by member so operations land on the
    deepest differing path. Arrays are compared element-wise in order and
    replaced wholesale when they differ.

    When ``declared_paths`` is given, only objects whose members are declared
    there are descended into; any other object is opaque and a change
    anywhere inside it replaces it at its own path.

    Args:
        src: Normalized current state
        dst: Normalized desired state
        declared_paths: JSON pointers the schema declares

    Returns:
        Operations sorted by ascending path
    """
    containers = None
    if declared_paths is not None:
        containers = frozenset(path.rsplit("/", 1)[0] for path in declared_paths)

    patch: Patch = []
    _diff_objects(src, dst, "", patch, containers)
    patch.sort(key=lambda operation: operation.path)
    return patch


def _diff_objects(src: Mapping[str, Any], dst: Mapping[str, Any], prefix: str, patch: Patch,
                  containers: Optional[FrozenSet[str]]) -> None:
    for key in sorted(set(src) | set(dst), key=str):
        path = f"{prefix}/{escape_token(key)}"
        if key not in dst:
            patch.append(PatchOperation(OP_REMOVE, path))
        elif key not in src:
            patch.append(PatchOperation(OP_ADD, path, copy.deepcopy(dst[key])))
        else:
            _diff_values(src[key], dst[key], path, patch, containers)


def _diff_values(old: Any, new: Any, path: str, patch: Patch,
                 containers: Optional[FrozenSet[str]]) -> None:
    addressable = containers is None or path in containers
    if isinstance(old, Mapping) and isinstance(new, Mapping) and addressable:
        _diff_objects(old, new, path, patch, containers)
    elif not json_equal(old, new):
        patch.append(PatchOperation(OP_REPLACE, path, copy.deepcopy(new)))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def json_equal(a: Any, b: Any) -> bool:
    """
    Structural equality with JSON typing.

    ``True`` is not ``1`` and ``"1"`` is not ``1``; integers and floats
    compare numerically.
    """
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return set(a) == set(b) and all(json_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    if _is_number(a) and _is_number(b):
        return a == b
    return type(a) is type(b) and a == b


def filter_restricted_removals(patch: Iterable[PatchOperation], removable_paths: Collection[str]) -> Patch:
    """
    Drop ``remove`` operations on properties that may not be cleared.

    Every ``remove`` whose path is not in ``removable_paths`` is dropped;
    ``add`` and ``replace`` pass through. Surviving order is preserved.
    """
    kept: Patch = []
    for operation in patch:
        if operation.op == OP_REMOVE and operation.path not in removable_paths:
            logger.debug(f"Dropping removal of restricted property {operation.path}")
            continue
        kept.append(operation)
    return kept


def serialize(patch: Iterable[PatchOperation]) -> str:
    """Render a patch as the compact JSON array sent on the wire."""
    return json.dumps([operation.to_dict() for operation in patch],
                      sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _split_pointer(path: str) -> List[str]:
    if path == "":
        return []
    if not path.startswith("/"):
        raise ValueError(f"Invalid JSON pointer: {path!r}")
    return [token.replace("~1", "/").replace("~0", "~") for token in path[1:].split("/")]


def _list_index(container: Sequence[Any], token: str, *, allow_end: bool) -> int:
    if token == "-" and allow_end:
        return len(container)
    if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
        raise ValueError(f"Invalid array index: {token!r}")
    index = int(token)
    limit = len(container) if allow_end else len(container) - 1
    if index > limit:
        raise ValueError(f"Array index out of range: {index}")
    return index


def apply_patch(document: Mapping[str, Any],
                patch: Iterable[Union[PatchOperation, Mapping[str, Any]]]) -> Any:
    """
    Apply a patch to a deep copy of ``document`` and return the result.

    Raises:
        ValueError: If an operation targets a location that does not exist
    """
    result: Any = copy.deepcopy(dict(document))
    for item in patch:
        operation = item if isinstance(item, PatchOperation) else PatchOperation.from_dict(item)
        tokens = _split_pointer(operation.path)

        if not tokens:
            if operation.op == OP_REMOVE:
                raise ValueError("Cannot remove the document root")
            result = copy.deepcopy(operation.value)
            continue

        parent = result
        for token in tokens[:-1]:
            if isinstance(parent, list):
                parent = parent[_list_index(parent, token, allow_end=False)]
            elif isinstance(parent, dict) and token in parent:
                parent = parent[token]
            else:
                raise ValueError(f"Path not found: {operation.path}")

        last = tokens[-1]
        value = copy.deepcopy(operation.value)
        if isinstance(parent, list):
            if operation.op == OP_ADD:
                parent.insert(_list_index(parent, last, allow_end=True), value)
            elif operation.op == OP_REPLACE:
                parent[_list_index(parent, last, allow_end=False)] = value
            else:
                del parent[_list_index(parent, last, allow_end=False)]
        elif isinstance(parent, dict):
            if operation.op != OP_ADD and last not in parent:
                raise ValueError(f"Path not found: {operation.path}")
            if operation.op == OP_REMOVE:
                del parent[last]
            else:
                parent[last] = value
        else:
            raise ValueError(f"Path not found: {operation.path}")
    return result
