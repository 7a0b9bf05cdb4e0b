# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Schema markers for the two container kinds a plain annotation cannot express.

``YText`` marks a collaborative text field; ``YLinkedList(Model)`` marks an
ordered list whose elements carry a stable generated identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

from pycrdt import Text
from pydantic import BaseModel
from pydantic_core import core_schema

__all__ = (
    "YText",
    "LinkedListMarker",
    "YLinkedList",
)


class YText:
    """Collaborative text field marker.

    Values of a ``YText`` field are never written through a lens; they are
    mutated through the ``pycrdt.Text`` container the field is bound to.
    An instance of this class is the placeholder used while validating
    input that may omit text fields.
    """

    __slots__ = ()
    _tag = "YText"

    def __repr__(self) -> str:
        return "YText()"

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any):
        return core_schema.no_info_plain_validator_function(
            _validate_text,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda _: None
            ),
        )


def _validate_text(value: Any) -> Any:
    if isinstance(value, (YText, Text)):
        return value
    raise ValueError(
        f"Expected a collaborative text container, got {type(value).__name__}"
    )


@dataclass(frozen=True, slots=True)
class LinkedListMarker:
    """Annotation metadata carrying the element model of a node list."""

    item: type[BaseModel]


def YLinkedList(item: type[BaseModel]) -> Any:
    """Declare an ordered node list of ``item`` structs.

    The result validates like ``list[item]``; the marker makes the
    classifier treat it as an identity-carrying list.
    """
    if not (isinstance(item, type) and issubclass(item, BaseModel)):
        raise TypeError("YLinkedList items must be pydantic models")
    return Annotated[list[item], LinkedListMarker(item)]
