# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Set
from typing import Any

from pycrdt import Array, Map, Text

from .classify import LensKind, Path, SchemaNode

__all__ = (
    "build_tree",
    "check_supported",
    "container_type",
    "ensure_container",
)

logger = logging.getLogger(__name__)

LIST_ITEM = "[]"
RECORD_VALUE = "{}"

_CONTAINER_TYPES: dict[LensKind, type] = {
    LensKind.STRUCT: Map,
    LensKind.RECORD: Map,
    LensKind.ARRAY: Array,
    LensKind.NODE_LIST: Array,
    LensKind.TEXT: Text,
}


def container_type(kind: LensKind) -> type | None:
    """The pycrdt type holding a value of ``kind``; ``None`` for primitives."""
    return _CONTAINER_TYPES.get(kind)


def ensure_container(parent: Map, key: str, kind: LensKind) -> Any:
    """Return the container in ``parent[key]``, creating it if absent.

    A slot already holding a container of the right type is left untouched.
    """
    cls = _CONTAINER_TYPES[kind]
    existing = parent.get(key)
    if isinstance(existing, cls):
        return existing
    parent[key] = cls()
    logger.debug(f"Created {cls.__name__} for '{key}'")
    return parent[key]


def build_tree(
    node: SchemaNode,
    parent: Map,
    path: Path = (),
    _ancestors: Set[Any] = frozenset(),
) -> None:
    """Materialize the containers of a struct region into ``parent``.

    Nested structs are created and populated immediately; lists, node lists
    and records are created empty. Re-running against a populated map only
    fills in missing slots.

    Raises:
        UnsupportedSchemaError: when a discriminated union appears anywhere in
            the schema. Siblings created before the failure are not rolled
            back; run the build inside one transaction.
    """
    if node.kind is not LensKind.STRUCT:
        check_supported(node, path)
        return

    ancestors = _ancestors | {node.core}
    for name in node.fields:
        field_path = (*path, name)
        child = node.child(name, field_path)

        match child.kind:
            case LensKind.PRIMITIVE:
                continue
            case LensKind.STRUCT:
                child_map = ensure_container(parent, name, LensKind.STRUCT)
                if child.core in ancestors:
                    # recursive model: expanded on first focus instead
                    check_supported(child, field_path, ancestors)
                    continue
                build_tree(child, child_map, field_path, ancestors)
            case LensKind.TEXT:
                ensure_container(parent, name, LensKind.TEXT)
            case _:
                ensure_container(parent, name, child.kind)
                check_supported(child, field_path, ancestors)


def check_supported(
    node: SchemaNode,
    path: Path = (),
    _seen: Set[Any] = frozenset(),
) -> None:
    """Walk a schema without materializing it, rejecting unsupported shapes."""
    match node.kind:
        case LensKind.STRUCT:
            if node.core in _seen:
                return
            seen = _seen | {node.core}
            for name in node.fields:
                field_path = (*path, name)
                check_supported(node.child(name, field_path), field_path, seen)
        case LensKind.ARRAY | LensKind.NODE_LIST | LensKind.RECORD:
            segment = RECORD_VALUE if node.kind is LensKind.RECORD else LIST_ITEM
            item_path = (*path, segment)
            if (item := node.item_node(item_path)) is not None:
                check_supported(item, item_path, _seen)
