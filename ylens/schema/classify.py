# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Container classification for schema annotations.

Every annotation is classified once into a closed set of kinds
(:class:`LensKind`). The tree builder and the lens hierarchy both dispatch on
the cached :class:`SchemaNode`, so the two can never disagree about which
container a position holds.
"""

from __future__ import annotations

import collections.abc
import types
import typing
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Annotated, Any, Literal, Union, get_args, get_origin

import typing_extensions
from pydantic import BaseModel, TypeAdapter
from pydantic.fields import FieldInfo

from .._errors import UnsupportedSchemaError
from .markers import LinkedListMarker, YText

__all__ = (
    "LensKind",
    "SchemaNode",
    "classify",
    "field_annotation",
    "is_discriminated_union",
    "schema_node",
    "unwrap",
)

Path = tuple[str, ...]

_UNION_ORIGINS = (Union, types.UnionType)
_ALIAS_TYPES = tuple(
    {
        typing_extensions.TypeAliasType,
        getattr(typing, "TypeAliasType", typing_extensions.TypeAliasType),
    }
)
_MAPPING_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)
_SEQUENCE_ORIGINS = (
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)


class LensKind(str, Enum):
    STRUCT = "struct"
    RECORD = "record"
    ARRAY = "array"
    NODE_LIST = "node_list"
    TEXT = "text"
    PRIMITIVE = "primitive"

    @property
    def is_structural(self) -> bool:
        return self is not LensKind.PRIMITIVE


def field_annotation(info: FieldInfo) -> Any:
    """Rebuild the declared annotation of a model field.

    pydantic moves ``Annotated`` metadata onto the ``FieldInfo``; markers and
    refinements live there, so they are folded back in.
    """
    if info.metadata:
        return Annotated[(info.annotation, *info.metadata)]
    return info.annotation


def _metadata(annotation: Any) -> tuple[Any, ...]:
    if get_origin(annotation) is Annotated:
        return annotation.__metadata__
    return ()


def _is_text(annotation: Any) -> bool:
    if annotation is YText:
        return True
    if isinstance(annotation, type) and issubclass(annotation, YText):
        return True
    return any(m is YText or isinstance(m, YText) for m in _metadata(annotation))


def _linked_list_marker(annotation: Any) -> LinkedListMarker | None:
    for meta in _metadata(annotation):
        if isinstance(meta, LinkedListMarker):
            return meta
    return None


def _non_null_members(annotation: Any) -> list[Any]:
    return [a for a in get_args(annotation) if a is not type(None)]


def _unwrap_once(annotation: Any) -> Any | None:
    """Peel one refinement / alias / nullable layer, or return ``None``."""
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    if isinstance(annotation, _ALIAS_TYPES):
        return annotation.__value__
    if isinstance(annotation, typing.NewType):
        return annotation.__supertype__
    if get_origin(annotation) in _UNION_ORIGINS:
        members = _non_null_members(annotation)
        if len(members) == 1:
            return members[0]
    return None


def unwrap(annotation: Any) -> Any:
    """Strip refinements, transforms, aliases and ``Optional`` wrappers."""
    current = annotation
    while (inner := _unwrap_once(current)) is not None:
        current = inner
    return current


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _is_literal(annotation: Any) -> bool:
    return get_origin(unwrap(annotation)) is Literal


def is_discriminated_union(annotation: Any) -> bool:
    """True for a union of >= 2 models sharing a ``Literal``-typed field."""
    if get_origin(annotation) not in _UNION_ORIGINS:
        return False
    members = [unwrap(m) for m in _non_null_members(annotation)]
    if len(members) < 2 or not _is_model(members[0]):
        return False

    candidates = [
        name
        for name, info in members[0].model_fields.items()
        if _is_literal(info.annotation)
    ]
    return any(
        all(
            _is_model(member)
            and name in member.model_fields
            and _is_literal(member.model_fields[name].annotation)
            for member in members
        )
        for name in candidates
    )


def _resolve(annotation: Any, path: Path) -> tuple[LensKind, Any, Any]:
    """Return ``(kind, core, item)`` for ``annotation``."""
    current = annotation
    while True:
        if _is_text(current):
            return LensKind.TEXT, current, None
        if (marker := _linked_list_marker(current)) is not None:
            return LensKind.NODE_LIST, current, marker.item
        inner = _unwrap_once(current)
        if inner is None:
            break
        current = inner

    core = current
    origin = get_origin(core)
    args = get_args(core)

    if origin in _UNION_ORIGINS:
        if is_discriminated_union(core):
            raise UnsupportedSchemaError("Discriminated union", path)
        return LensKind.PRIMITIVE, core, None

    if _is_model(core):
        if core.model_fields:
            return LensKind.STRUCT, core, None
        return LensKind.PRIMITIVE, core, None

    if core in _MAPPING_ORIGINS or origin in _MAPPING_ORIGINS:
        if not args:
            return LensKind.RECORD, core, None
        if unwrap(args[0]) is str:
            return LensKind.RECORD, core, args[1]
        return LensKind.PRIMITIVE, core, None

    if core in (list, tuple) or origin in _SEQUENCE_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            # fixed-shape tuples keep their items inline
            return LensKind.ARRAY, core, None
        return LensKind.ARRAY, core, args[0] if args else None

    return LensKind.PRIMITIVE, core, None


def classify(annotation: Any, path: Path = ()) -> LensKind:
    """Classify an annotation into the container kind that stores it.

    Raises:
        UnsupportedSchemaError: if a discriminated union is encountered.
    """
    return schema_node(annotation, path).kind


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """One classified schema position. Immutable, cached per annotation."""

    annotation: Any
    kind: LensKind
    core: Any
    item: Any = None

    @cached_property
    def fields(self) -> dict[str, Any]:
        """Field name -> declared annotation, for struct nodes."""
        if self.kind is not LensKind.STRUCT:
            return {}
        return {
            name: field_annotation(info)
            for name, info in self.core.model_fields.items()
        }

    @cached_property
    def adapter(self) -> TypeAdapter:
        return TypeAdapter(self.annotation)

    @property
    def model(self) -> type[BaseModel] | None:
        return self.core if self.kind is LensKind.STRUCT else None

    def child(self, name: str, path: Path = ()) -> SchemaNode | None:
        """The node of struct field ``name``, or ``None`` if undeclared."""
        if name not in self.fields:
            return None
        return schema_node(self.fields[name], path)

    def item_node(self, path: Path = ()) -> SchemaNode | None:
        """The element / value node of a list, node list or record."""
        if self.item is None:
            return None
        return schema_node(self.item, path)

    def __repr__(self) -> str:
        return f"SchemaNode(kind={self.kind.value}, annotation={self.annotation!r})"


_NODE_CACHE: dict[Any, SchemaNode] = {}


def schema_node(annotation: Any, path: Path = ()) -> SchemaNode:
    """Classify ``annotation`` once and return its cached :class:`SchemaNode`.

    ``path`` only names the position in error messages; it is not part of the
    cache key. Failures are never cached, so every encounter of an unsupported
    schema raises with its own path.
    """
    try:
        cached = _NODE_CACHE.get(annotation)
        hashable = True
    except TypeError:
        cached, hashable = None, False
    if cached is not None:
        return cached

    kind, core, item = _resolve(annotation, tuple(path))
    node = SchemaNode(annotation=annotation, kind=kind, core=core, item=item)
    if hashable:
        _NODE_CACHE[annotation] = node
    return node
