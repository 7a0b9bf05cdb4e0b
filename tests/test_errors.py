# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for ylens error classes."""

import pytest
from pydantic import BaseModel, ValidationError

from ylens import (
    ItemNotFoundError,
    LensError,
    LensMisuseError,
    LensValidationError,
    UnsupportedSchemaError,
)


class Point(BaseModel):
    x: int


def _pydantic_error():
    try:
        Point(x="nope")
    except ValidationError as e:
        return e
    raise AssertionError("expected a validation error")


class TestLensError:
    """Tests for base LensError class."""

    def test_default_initialization(self):
        error = LensError()
        assert str(error) == "ylens error"
        assert error.message == "ylens error"
        assert error.details == {}

    def test_custom_message_and_details(self):
        error = LensError("Custom", details={"key": "value"})
        assert str(error) == "Custom"
        assert error.details == {"key": "value"}

    def test_with_cause(self):
        cause = ValueError("Original error")
        error = LensError("Wrapped", cause=cause)
        assert error.get_cause() is cause
        assert error.__cause__ is cause

    def test_to_dict(self):
        error = LensError("Error", details={"a": 1}, cause=ValueError("inner"))
        data = error.to_dict()
        assert data == {"error": "LensError", "message": "Error", "details": {"a": 1}}
        assert "inner" in error.to_dict(include_cause=True)["cause"]

    def test_to_dict_without_details(self):
        assert "details" not in LensError("plain").to_dict()


class TestLensValidationError:
    """Validation failures carry the lens path and the pydantic error."""

    def test_context_and_cause(self):
        cause = _pydantic_error()
        error = LensValidationError("position.x", cause)
        assert error.context == "position.x"
        assert error.parse_error is cause
        assert error.details == {"context": "position.x"}
        assert str(error).startswith("Validation failed at position.x")

    def test_without_cause(self):
        error = LensValidationError("root")
        assert error.parse_error is None
        assert "invalid value" in str(error)


class TestUnsupportedSchemaError:
    def test_path_in_message(self):
        error = UnsupportedSchemaError("Discriminated union", ["scene", "shape"])
        assert error.path == ("scene", "shape")
        assert error.schema_type == "Discriminated union"
        assert str(error) == 'Unsupported schema type "Discriminated union" at path: scene.shape'


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_cls",
        [LensValidationError, UnsupportedSchemaError, ItemNotFoundError, LensMisuseError],
    )
    def test_all_derive_from_lens_error(self, error_cls):
        assert issubclass(error_cls, LensError)

    def test_defaults(self):
        assert str(ItemNotFoundError()) == "Item not found"
        assert str(LensMisuseError()) == "Operation not supported by this lens"
