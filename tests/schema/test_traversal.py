# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for materializing a schema into pycrdt containers."""

from typing import Literal, Optional

import pytest
from pycrdt import Array, Map, Text
from pydantic import BaseModel

from ylens import UnsupportedSchemaError
from ylens.schema import YLinkedList, YText, build_tree, check_supported, schema_node


class Position(BaseModel):
    x: float = 0
    y: float = 0


class Card(BaseModel):
    title: str
    done: bool = False


class Board(BaseModel):
    name: str = ""
    notes: YText
    tags: list[str] = []
    position: Position
    labels: dict[str, str] = {}
    cards: YLinkedList(Card)


class Circle(BaseModel):
    kind: Literal["circle"]
    radius: float


class Square(BaseModel):
    kind: Literal["square"]
    side: float


class Scene(BaseModel):
    title: str = ""
    shape: Circle | Square


class Gallery(BaseModel):
    shapes: list[Circle | Square] = []


class Holder(BaseModel):
    inner: Scene


class Tree(BaseModel):
    label: str = ""
    children: list["Tree"] = []


def _root(doc):
    return doc.get("root", type=Map)


class TestBuildTree:
    """Each field kind gets the container it needs."""

    def test_container_per_kind(self, doc):
        root = _root(doc)
        with doc.transaction():
            build_tree(schema_node(Board), root)

        assert isinstance(root["notes"], Text)
        assert isinstance(root["tags"], Array)
        assert isinstance(root["position"], Map)
        assert isinstance(root["labels"], Map)
        assert isinstance(root["cards"], Array)
        assert "name" not in root

    def test_nested_struct_is_populated(self, doc):
        class Outer(BaseModel):
            board: Board

        root = _root(doc)
        with doc.transaction():
            build_tree(schema_node(Outer), root)
        assert isinstance(root["board"]["notes"], Text)
        assert isinstance(root["board"]["position"], Map)

    def test_rebuild_keeps_existing_data(self, doc):
        root = _root(doc)
        node = schema_node(Board)
        with doc.transaction():
            build_tree(node, root)
        root["notes"].insert(0, "hello")
        root["tags"].append("a")
        state = doc.get_state()

        with doc.transaction():
            build_tree(node, root)

        assert str(root["notes"]) == "hello"
        assert list(root["tags"]) == ["a"]
        assert doc.get_state() == state

    def test_recursive_schema_terminates(self, doc):
        Tree.model_rebuild()
        root = _root(doc)
        with doc.transaction():
            build_tree(schema_node(Tree), root)
        assert isinstance(root["children"], Array)


class TestUnsupportedSchemas:
    """Discriminated unions abort the build with their path."""

    def test_field(self, doc):
        with pytest.raises(UnsupportedSchemaError) as exc_info:
            build_tree(schema_node(Scene), _root(doc))
        assert exc_info.value.path == ("shape",)

    def test_nested_field(self, doc):
        with pytest.raises(UnsupportedSchemaError) as exc_info:
            build_tree(schema_node(Holder), _root(doc))
        assert exc_info.value.path == ("inner", "shape")

    def test_list_item(self, doc):
        with pytest.raises(UnsupportedSchemaError) as exc_info:
            build_tree(schema_node(Gallery), _root(doc))
        assert exc_info.value.path == ("shapes", "[]")

    def test_check_supported_creates_nothing(self, doc):
        root = _root(doc)
        check_supported(schema_node(Board))
        assert len(root) == 0

    def test_literal_union_is_fine(self, doc):
        class Settings(BaseModel):
            mode: Optional[Literal["light", "dark"]] = None

        root = _root(doc)
        with doc.transaction():
            build_tree(schema_node(Settings), root)
        assert len(root) == 0
