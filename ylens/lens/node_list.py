# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Ordered list of structs with stable generated identities."""

from __future__ import annotations

import logging
from typing import Any

from pycrdt import Array, Map

from .._errors import ItemNotFoundError, LensMisuseError
from ..config import settings
from ..reactive.atom import Atom, AtomFamily
from ..reactive.bridge import ObserveMode, detach_tolerant, identity_set, make_reactive
from ..schema.classify import LensKind, SchemaNode
from ..schema.traversal import LIST_ITEM
from .base import Bound, IndexSlot, Lens
from .codec import encode, insert_node, read_nodes, read_struct, write_nodes
from .lenses import StructLens

__all__ = ("NodeListLens",)

logger = logging.getLogger(__name__)


class NodeListLens(Lens[list]):
    """Lens over a ``YLinkedList``.

    Every element is a ``Map`` carrying its id under
    ``settings.NODE_ID_FIELD``. Ids are assigned on insert, survive
    reordering of other elements, and are never part of the values this lens
    returns.
    """

    kind = LensKind.NODE_LIST

    @property
    def yarray(self) -> Array:
        container = self.binding.resolve()
        if not isinstance(container, Array):
            raise ItemNotFoundError(f"No node list at {self.context}")
        return container

    @property
    def item(self) -> SchemaNode:
        return self.node.item_node((*self.path, LIST_ITEM))

    @property
    def id_field(self) -> str:
        return settings.NODE_ID_FIELD

    def focus(self, key: str) -> Lens:
        raise LensMisuseError(
            f"Node list at {self.context} is addressed with find(id) or at(index)",
            details={"key": key},
        )

    # -- mutation ----------------------------------------------------------

    def append(self, value: Any) -> str:
        """Validate and append one element. Returns its id."""
        return self.insert_at(len(self.yarray), value)

    def prepend(self, value: Any) -> str:
        return self.insert_at(0, value)

    def insert_at(self, index: int, value: Any) -> str:
        """Validate and insert one element at ``index``. Returns its id.

        Raises:
            LensValidationError: if ``value`` does not match the item schema.
            IndexError: if ``index`` is outside ``0..length``.
        """
        data = encode(self.item, value, f"{self.context}[{index}]")
        yarray = self.yarray
        if not 0 <= index <= len(yarray):
            raise IndexError(f"Index {index} out of range for node list of {len(yarray)}")
        with self.doc.transaction():
            node_id = insert_node(
                yarray, index, self.item, data, self.id_field, self.path
            )
        logger.debug(f"Inserted node {node_id} at {self.context}[{index}]")
        return node_id

    def insert_after(self, node_id: str, value: Any) -> str:
        """Insert directly after the element with ``node_id``.

        Raises:
            ItemNotFoundError: if no element has ``node_id``.
        """
        return self.insert_at(self.index_of(node_id) + 1, value)

    def remove_at(self, index: int) -> None:
        yarray = self.yarray
        if not 0 <= index < len(yarray):
            raise IndexError(f"Index {index} out of range for node list of {len(yarray)}")
        with self.doc.transaction():
            del yarray[index]

    def remove(self, node_id: str) -> None:
        """Remove the element with ``node_id``.

        Raises:
            ItemNotFoundError: if no element has ``node_id``.
        """
        self.remove_at(self.index_of(node_id))

    def _write(self, data: Any) -> None:
        yarray = self.yarray
        with self.doc.transaction():
            write_nodes(yarray, self.node, data, self.path, self.id_field)

    # -- lookup --------------------------------------------------------------

    def index_of(self, node_id: str) -> int:
        for index, element in enumerate(self.yarray):
            if isinstance(element, Map) and element.get(self.id_field) == node_id:
                return index
        raise ItemNotFoundError(
            f"Node not found: {node_id}", details={"id": node_id, "path": list(self.path)}
        )

    def contains(self, node_id: str) -> bool:
        try:
            self.index_of(node_id)
        except ItemNotFoundError:
            return False
        return True

    def at(self, index: int) -> StructLens:
        """Lens over whatever element occupies ``index`` when it is used.

        Raises:
            ItemNotFoundError: if ``index`` is currently empty.
        """
        slot = IndexSlot(self.yarray, index)
        if not isinstance(slot.resolve(), Map):
            raise ItemNotFoundError(
                f"No node at index {index} of {self.context}", details={"index": index}
            )
        return StructLens(self.item, slot, self.doc, (*self.path, str(index)))

    def find(self, node_id: str) -> StructLens:
        """Lens bound to the element with ``node_id``, wherever it moves.

        Raises:
            ItemNotFoundError: if no element has ``node_id``.
        """
        element = self.yarray[self.index_of(node_id)]
        return StructLens(self.item, Bound(element), self.doc, (*self.path, node_id))

    def nodes(self) -> dict[str, StructLens]:
        """Element lenses keyed by id, in list order."""
        out = {}
        for element in self.yarray:
            if isinstance(element, Map):
                node_id = element.get(self.id_field)
                out[node_id] = StructLens(
                    self.item, Bound(element), self.doc, (*self.path, node_id)
                )
        return out

    def get(self) -> list[dict[str, Any]]:
        return read_nodes(self.yarray, self.node, self.path)

    def length(self) -> int:
        return len(self.yarray)

    # -- reactive ------------------------------------------------------------

    def subscribe(self) -> Atom[list[dict[str, Any]]]:
        """Whole-list view; recomputes on any change in any element."""
        yarray = self.yarray
        return make_reactive(
            yarray,
            ObserveMode.DEEP,
            lambda: read_nodes(yarray, self.node, self.path),
            name=self.context,
        )

    def ids(self) -> Atom[list[str]]:
        """Element ids; recomputes only when elements are added or removed."""
        return identity_set(self.yarray, self.id_field, name=f"{self.context}.ids")

    def node_atom(self, node_id: str) -> Atom[dict[str, Any]]:
        """One element's value. Keeps its last value after the element is removed.

        Raises:
            ItemNotFoundError: if no element has ``node_id``.
        """
        element = self.yarray[self.index_of(node_id)]
        item = self.item
        return detach_tolerant(
            element,
            lambda: read_struct(element, item, self.path),
            lambda: self.contains(node_id),
            name=f"{self.context}[{node_id}]",
        )

    def node_family(self) -> AtomFamily[str, dict[str, Any]]:
        """Stable per-id element atoms."""
        return AtomFamily(self.node_atom)
