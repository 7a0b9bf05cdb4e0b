# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for record (keyed map) and ordered-list lenses."""

import pytest
from pydantic import BaseModel

from ylens import (
    ArrayLens,
    ItemNotFoundError,
    LensMisuseError,
    LensValidationError,
    PrimitiveLens,
    RecordLens,
    StructLens,
    YDocument,
)


class Position(BaseModel):
    x: float = 0
    y: float = 0


class Layout(BaseModel):
    counts: dict[str, int] = {}
    places: dict[str, Position] = {}
    anything: dict = {}
    tags: list[str] = []
    points: list[Position] = []
    matrix: list[list[int]] = []
    ids: list[int] = []


@pytest.fixture
def root():
    _, root = YDocument.make(Layout)
    return root


class TestRecordLens:
    """String-keyed maps."""

    def test_kind(self, root):
        assert isinstance(root.focus("counts"), RecordLens)

    def test_round_trip(self, root):
        root.focus("counts").set({"a": 1, "b": 2})
        assert root.focus("counts").get() == {"a": 1, "b": 2}

    def test_set_replaces_every_entry(self, root):
        counts = root.focus("counts")
        counts.set({"a": 1})
        counts.set({"b": 2})
        assert counts.get() == {"b": 2}

    def test_struct_values(self, root):
        value = {"home": {"x": 1.0, "y": 2.0}}
        root.focus("places").set(value)
        assert root.focus("places").get() == value

    def test_focus_primitive_entry(self, root):
        entry = root.focus("counts").focus("a")
        assert isinstance(entry, PrimitiveLens)
        entry.set(3)
        assert root.focus("counts").get() == {"a": 3}

    def test_focus_vivifies_struct_entry(self, root):
        places = root.focus("places")
        entry = places.focus("work")
        assert isinstance(entry, StructLens)
        assert places.keys() == ["work"]
        entry.focus("x").set(4)
        assert places.get() == {"work": {"x": 4.0}}

    def test_untyped_record(self, root):
        anything = root.focus("anything")
        anything.set({"k": [1, "two"]})
        assert anything.get() == {"k": [1, "two"]}
        anything.focus("n").set(None)
        assert anything.get()["n"] is None

    def test_delete(self, root):
        counts = root.focus("counts")
        counts.set({"a": 1, "b": 2})
        counts.delete("a")
        assert counts.get() == {"b": 2}
        with pytest.raises(ItemNotFoundError):
            counts.delete("a")

    def test_invalid_entry(self, root):
        with pytest.raises(LensValidationError):
            root.focus("counts").set({"a": "many"})
        assert root.focus("counts").get() == {}

    def test_safe_get(self, root):
        root.focus("places").set({"home": {"x": 1, "y": 1}})
        result = root.focus("places").safe_get()
        assert result.success is True
        assert result.value == {"home": Position(x=1, y=1)}


class TestArrayLens:
    """Ordered lists replaced as a whole."""

    def test_kind(self, root):
        assert isinstance(root.focus("tags"), ArrayLens)

    def test_round_trip(self, root):
        root.focus("tags").set(["a", "b"])
        assert root.focus("tags").get() == ["a", "b"]
        assert root.focus("tags").length() == 2

    def test_set_replaces(self, root):
        tags = root.focus("tags")
        tags.set(["a", "b", "c"])
        tags.set(["z"])
        assert tags.get() == ["z"]

    def test_struct_elements(self, root):
        value = [{"x": 1.0, "y": 2.0}, {"x": 3.0}]
        root.focus("points").set(value)
        assert root.focus("points").get() == value

    def test_nested_lists_stored_inline(self, root):
        root.focus("matrix").set([[1, 2], [3]])
        assert root.focus("matrix").get() == [[1, 2], [3]]

    def test_no_focus(self, root):
        with pytest.raises(LensMisuseError):
            root.focus("tags").focus("0")

    def test_integer_list_keeps_type(self, root):
        root.focus("ids").set([1, 2])
        assert [type(v) for v in root.focus("ids").get()] == [int, int]

    def test_integer_elements_keep_type(self, root):
        root.focus("matrix").set([[1, 2], [3]])
        assert all(
            type(v) is int for row in root.focus("matrix").get() for v in row
        )

    def test_integer_record_values_keep_type(self, root):
        root.focus("counts").set({"a": 1, "b": 2})
        assert all(type(v) is int for v in root.focus("counts").get().values())
        assert type(root.focus("counts").focus("a").get()) is int

    def test_invalid_element(self, root):
        result = root.focus("tags").safe_set(["ok", {"not": "a string"}])
        assert result.success is False
        assert root.focus("tags").get() == []
