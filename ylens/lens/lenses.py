# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Any

from pycrdt import Array, Doc, Map, Text

from .._errors import ItemNotFoundError, LensMisuseError
from ..reactive.atom import Atom, never_equal
from ..reactive.bridge import ObserveMode, make_reactive
from ..schema.classify import LensKind, Path, SchemaNode, schema_node
from ..schema.traversal import build_tree, container_type, ensure_container
from .base import Bound, KeySlot, Lens, ValidationResult
from .codec import (
    read_array,
    read_record,
    read_struct,
    read_value,
    write_array,
    write_record,
    write_struct,
)

__all__ = (
    "ArrayLens",
    "PrimitiveLens",
    "RecordLens",
    "StructLens",
    "TextLens",
    "child_lens",
)

logger = logging.getLogger(__name__)


def _resolve(lens: Lens, expected: type) -> Any:
    container = lens.binding.resolve()
    if not isinstance(container, expected):
        raise ItemNotFoundError(
            f"No {expected.__name__} container at {lens.context}",
            details={"path": list(lens.path)},
        )
    return container


class StructLens(Lens[dict]):
    """Lens over a fixed-field model stored as a ``Map``."""

    kind = LensKind.STRUCT

    @property
    def ymap(self) -> Map:
        return _resolve(self, Map)

    def focus(self, key: str) -> Lens:
        """Child lens for a declared field.

        A structural field whose slot holds no container (after being set to
        ``None``, or on a recursive model) gets a fresh one.

        Raises:
            LensMisuseError: if ``key`` is not a declared field.
        """
        field_path = (*self.path, key)
        child = self.node.child(key, field_path)
        if child is None:
            raise LensMisuseError(
                f"Unknown field '{key}' at {self.context}",
                details={"key": key, "fields": list(self.node.fields)},
            )
        return child_lens(child, self.ymap, key, self.doc, field_path)

    def get(self) -> dict[str, Any]:
        return read_struct(self.ymap, self.node, self.path)

    def _write(self, data: Any) -> None:
        ymap = self.ymap
        with self.doc.transaction():
            write_struct(ymap, self.node, data, self.path)

    def subscribe(self) -> Atom[dict[str, Any]]:
        ymap = self.ymap
        return make_reactive(
            ymap,
            ObserveMode.DEEP,
            lambda: read_struct(ymap, self.node, self.path),
            name=self.context,
        )


class RecordLens(Lens[dict]):
    """Lens over a string-keyed dictionary stored as a ``Map``."""

    kind = LensKind.RECORD

    @property
    def ymap(self) -> Map:
        return _resolve(self, Map)

    @property
    def item(self) -> SchemaNode:
        item = self.node.item_node(self.path)
        return item if item is not None else schema_node(Any)

    def focus(self, key: str) -> Lens:
        """Child lens for one entry; a missing struct entry is created."""
        return child_lens(self.item, self.ymap, key, self.doc, (*self.path, key))

    def get(self) -> dict[str, Any]:
        return read_record(self.ymap, self.node, self.path)

    def keys(self) -> list[str]:
        return list(self.ymap.keys())

    def delete(self, key: str) -> None:
        """Remove one entry.

        Raises:
            ItemNotFoundError: if ``key`` is absent.
        """
        ymap = self.ymap
        if key not in ymap:
            raise ItemNotFoundError(
                f"No entry '{key}' at {self.context}", details={"key": key}
            )
        del ymap[key]

    def _write(self, data: Any) -> None:
        ymap = self.ymap
        with self.doc.transaction():
            write_record(ymap, self.node, data, self.path)

    def subscribe(self) -> Atom[dict[str, Any]]:
        ymap = self.ymap
        return make_reactive(
            ymap,
            ObserveMode.DEEP,
            lambda: read_record(ymap, self.node, self.path),
            name=self.context,
        )


class ArrayLens(Lens[list]):
    """Lens over an ordered list stored as an ``Array``. Whole-value writes."""

    kind = LensKind.ARRAY

    @property
    def yarray(self) -> Array:
        return _resolve(self, Array)

    def get(self) -> list[Any]:
        return read_array(self.yarray, self.node, self.path)

    def length(self) -> int:
        return len(self.yarray)

    def _write(self, data: Any) -> None:
        yarray = self.yarray
        with self.doc.transaction():
            write_array(yarray, self.node, data, self.path)

    def subscribe(self) -> Atom[list[Any]]:
        yarray = self.yarray
        return make_reactive(
            yarray,
            ObserveMode.DEEP,
            lambda: read_array(yarray, self.node, self.path),
            name=self.context,
        )


class TextLens(Lens[Text]):
    """Lens over a collaborative ``Text``.

    The container is mutated directly (``insert``, ``del``); it is never
    replaced through the lens.
    """

    kind = LensKind.TEXT

    @property
    def ytext(self) -> Text:
        return _resolve(self, Text)

    def get(self) -> Text:
        return self.ytext

    def safe_get(self) -> ValidationResult[Text]:
        return ValidationResult.ok(self.ytext)

    def set(self, value: Any) -> None:
        raise LensMisuseError(
            f"Text at {self.context} is edited through its container, not set()"
        )

    def safe_set(self, value: Any) -> ValidationResult[None]:
        raise LensMisuseError(
            f"Text at {self.context} is edited through its container, not safe_set()"
        )

    def _write(self, data: Any) -> None:
        raise LensMisuseError(f"Text at {self.context} cannot be replaced")

    def subscribe(self) -> Atom[Text]:
        # the container is the value; every edit must notify
        ytext = self.ytext
        return make_reactive(
            ytext,
            ObserveMode.SHALLOW,
            lambda: ytext,
            equals=never_equal,
            name=self.context,
        )


class PrimitiveLens(Lens[Any]):
    """Lens over a value stored inline in its parent map."""

    kind = LensKind.PRIMITIVE
    binding: KeySlot

    def get(self) -> Any:
        return read_value(self.node, self.binding.resolve(), self.path)

    def _write(self, data: Any) -> None:
        self.binding.store(data)

    def subscribe(self) -> Atom[Any]:
        parent, key = self.binding.parent, self.binding.key
        node = self.node
        return make_reactive(
            parent,
            ObserveMode.SHALLOW,
            lambda: read_value(node, parent.get(key)),
            name=self.context,
        )


def _lens_types() -> dict[LensKind, type[Lens]]:
    from .node_list import NodeListLens

    return {
        LensKind.STRUCT: StructLens,
        LensKind.RECORD: RecordLens,
        LensKind.ARRAY: ArrayLens,
        LensKind.NODE_LIST: NodeListLens,
        LensKind.TEXT: TextLens,
    }


def child_lens(node: SchemaNode, parent: Map, key: str, doc: Doc, path: Path) -> Lens:
    """Lens for ``parent[key]``, creating the container if the slot is empty."""
    if node.kind is LensKind.PRIMITIVE:
        return PrimitiveLens(node, KeySlot(parent, key), doc, path)

    container = parent.get(key)
    if not isinstance(container, container_type(node.kind)):
        with doc.transaction():
            container = ensure_container(parent, key, node.kind)
            if node.kind is LensKind.STRUCT:
                build_tree(node, container, path)
        logger.debug(f"Vivified {node.kind.value} at {'.'.join(path)}")
    return _lens_types()[node.kind](node, Bound(container), doc, path)
