# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Conversion between schema values and pycrdt containers.

Reads rebuild plain Python data (dicts, lists, primitives) from a container
subtree; ``Text`` containers are returned as-is. Writes take data that has
already been validated and dumped to JSON mode.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pycrdt import Array, Map
from pydantic import BaseModel, ValidationError
from uuid6 import uuid7

from .._errors import LensValidationError
from ..config import settings
from ..schema.classify import LensKind, Path, SchemaNode
from ..schema.markers import YText
from ..schema.traversal import build_tree, container_type, ensure_container

__all__ = (
    "clear_array",
    "decode",
    "encode",
    "insert_node",
    "new_node_id",
    "prepare_input",
    "read_array",
    "read_nodes",
    "read_record",
    "read_struct",
    "read_value",
    "restore_int",
    "write_array",
    "write_nodes",
    "write_record",
    "write_slot",
    "write_struct",
)


def new_node_id() -> str:
    """Time-ordered unique id for a node list element."""
    return str(uuid7())


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def prepare_input(node: SchemaNode, value: Any) -> Any:
    """Fill text placeholders so input that omits text fields validates.

    Model instances are flattened to the fields they were given.
    """
    match node.kind:
        case LensKind.TEXT:
            return YText()
        case LensKind.STRUCT:
            if isinstance(value, BaseModel):
                value = {name: getattr(value, name) for name in value.model_fields_set}
            if not isinstance(value, Mapping):
                return value
            prepared = dict(value)
            for name in node.fields:
                child = node.child(name)
                if child.kind is LensKind.TEXT:
                    prepared[name] = YText()
                elif name in prepared:
                    prepared[name] = prepare_input(child, prepared[name])
            return prepared
        case LensKind.RECORD if isinstance(value, Mapping):
            if (item := node.item_node()) is None:
                return value
            return {k: prepare_input(item, v) for k, v in value.items()}
        case LensKind.ARRAY | LensKind.NODE_LIST if isinstance(value, (list, tuple)):
            if (item := node.item_node()) is None:
                return value
            return [prepare_input(item, v) for v in value]
    return value


def encode(node: SchemaNode, value: Any, context: str) -> Any:
    """Validate ``value`` against ``node`` and dump it to storable data.

    Raises:
        LensValidationError: if ``value`` does not match the schema.
    """
    try:
        validated = node.adapter.validate_python(prepare_input(node, value))
    except ValidationError as e:
        raise LensValidationError(context, e) from e
    return node.adapter.dump_python(validated, mode="json", exclude_unset=True)


def decode(node: SchemaNode, raw: Any, context: str) -> Any:
    """Validate stored data against ``node``.

    Raises:
        LensValidationError: if the stored data does not match the schema.
    """
    try:
        return node.adapter.validate_python(raw)
    except ValidationError as e:
        raise LensValidationError(context, e) from e


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def restore_int(node: SchemaNode, raw: Any) -> Any:
    """Whole-number floats back to ``int`` where the schema declares one.

    Yjs stores numbers below 2**53 as doubles.
    """
    if node.core is int and isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return raw


def read_value(node: SchemaNode | None, raw: Any, path: Path = ()) -> Any:
    if node is None:
        return raw
    match node.kind:
        case LensKind.STRUCT if isinstance(raw, Map):
            return read_struct(raw, node, path)
        case LensKind.RECORD if isinstance(raw, Map):
            return read_record(raw, node, path)
        case LensKind.ARRAY if isinstance(raw, Array):
            return read_array(raw, node, path)
        case LensKind.ARRAY if isinstance(raw, list):
            # nested lists are stored inline
            item = node.item_node(path)
            return [read_value(item, value, path) for value in raw]
        case LensKind.NODE_LIST if isinstance(raw, Array):
            return read_nodes(raw, node, path)
    return restore_int(node, raw)


def read_struct(ymap: Map, node: SchemaNode, path: Path = ()) -> dict[str, Any]:
    """Declared fields present in ``ymap``. Absent fields are omitted."""
    out = {}
    for name in node.fields:
        if name not in ymap:
            continue
        field_path = (*path, name)
        out[name] = read_value(node.child(name, field_path), ymap[name], field_path)
    return out


def read_record(ymap: Map, node: SchemaNode, path: Path = ()) -> dict[str, Any]:
    item = node.item_node(path)
    return {
        key: read_value(item, value, (*path, key)) for key, value in ymap.items()
    }


def read_array(yarray: Array, node: SchemaNode, path: Path = ()) -> list[Any]:
    item = node.item_node(path)
    return [read_value(item, value, path) for value in yarray]


def read_nodes(yarray: Array, node: SchemaNode, path: Path = ()) -> list[dict]:
    """Elements of a node list, without their identity field."""
    item = node.item_node(path)
    return [read_struct(value, item, path) for value in yarray if isinstance(value, Map)]


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def write_slot(parent: Map, key: str, node: SchemaNode, value: Any, path: Path) -> None:
    """Store ``value`` under ``parent[key]``, reusing a container in place."""
    if node.kind is LensKind.PRIMITIVE:
        parent[key] = value
        return
    if node.kind is LensKind.TEXT:
        ensure_container(parent, key, LensKind.TEXT)
        return
    if value is None:
        parent[key] = None
        return

    fresh = not isinstance(parent.get(key), container_type(node.kind))
    container = ensure_container(parent, key, node.kind)
    match node.kind:
        case LensKind.STRUCT:
            if fresh:
                build_tree(node, container, path)
            write_struct(container, node, value, path)
        case LensKind.RECORD:
            write_record(container, node, value, path)
        case LensKind.ARRAY:
            write_array(container, node, value, path)
        case LensKind.NODE_LIST:
            write_nodes(container, node, value, path)


def write_struct(ymap: Map, node: SchemaNode, data: Mapping, path: Path = ()) -> None:
    """Write the declared fields present in ``data``. Text fields are skipped."""
    for name in node.fields:
        if name not in data:
            continue
        field_path = (*path, name)
        child = node.child(name, field_path)
        if child.kind is LensKind.TEXT:
            continue
        write_slot(ymap, name, child, data[name], field_path)


def write_record(ymap: Map, node: SchemaNode, data: Mapping, path: Path = ()) -> None:
    """Replace every entry of ``ymap`` with ``data``."""
    for key in list(ymap.keys()):
        del ymap[key]
    item = node.item_node(path)
    for key, value in data.items():
        if item is None:
            ymap[key] = value
        else:
            write_slot(ymap, key, item, value, (*path, key))


def clear_array(yarray: Array) -> None:
    if (length := len(yarray)) > 0:
        del yarray[0:length]


def write_array(yarray: Array, node: SchemaNode, data: list, path: Path = ()) -> None:
    """Replace the contents of ``yarray``.

    Struct elements get their own map; anything else is stored inline.
    """
    clear_array(yarray)
    item = node.item_node(path)
    if item is None or item.kind is not LensKind.STRUCT:
        if data:
            yarray.extend(list(data))
        return
    for index, value in enumerate(data):
        if value is None:
            yarray.append(None)
            continue
        yarray.append(Map())
        element = yarray[index]
        build_tree(item, element, path)
        write_struct(element, item, value, path)


def insert_node(
    yarray: Array,
    index: int,
    item: SchemaNode,
    data: Mapping,
    id_field: str,
    path: Path = (),
) -> str:
    """Insert one identity-carrying struct element. Returns its new id."""
    node_id = new_node_id()
    yarray.insert(index, Map())
    element = yarray[index]
    element[id_field] = node_id
    build_tree(item, element, path)
    write_struct(element, item, data, path)
    return node_id


def write_nodes(
    yarray: Array,
    node: SchemaNode,
    data: list,
    path: Path = (),
    id_field: str | None = None,
) -> list[str]:
    """Replace a node list; every element gets a fresh id."""
    id_field = id_field or settings.NODE_ID_FIELD
    clear_array(yarray)
    item = node.item_node(path)
    return [
        insert_node(yarray, len(yarray), item, value, id_field, path)
        for value in data
    ]
