# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Entry points: bind a model schema to a pycrdt document."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from pycrdt import Doc, Map
from pydantic import BaseModel

from ._errors import LensMisuseError
from .config import settings
from .lens.base import Bound
from .lens.lenses import StructLens
from .schema.classify import LensKind, schema_node
from .schema.traversal import build_tree

__all__ = (
    "DocumentRoot",
    "YDocument",
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


class DocumentRoot(StructLens):
    """Struct lens over a document's root map, with transaction helpers."""

    @property
    def root_map(self) -> Map:
        return self.binding.resolve()

    @contextmanager
    def batch(self) -> Iterator[DocumentRoot]:
        """Group writes into one transaction; observers see one change.

        Nested batches join the outer one.
        """
        with self.doc.transaction():
            yield self

    def transact(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        with self.batch():
            return fn(*args, **kwargs)


class YDocument:
    """Factory for schema-bound documents."""

    @classmethod
    def make(cls, schema: type[BaseModel]) -> tuple[Doc, DocumentRoot]:
        """Create a fresh document and bind ``schema`` to it."""
        doc = Doc()
        return doc, cls.bind(schema, doc)

    @classmethod
    def bind(
        cls,
        schema: type[BaseModel],
        doc: Doc,
        *,
        root_name: str | None = None,
    ) -> DocumentRoot:
        """Bind ``schema`` to an existing document.

        Missing containers are created; existing ones, and the data in them,
        are kept. Binding the same schema twice is a no-op on the document.

        Raises:
            UnsupportedSchemaError: if the schema contains a discriminated
                union anywhere.
            LensMisuseError: if ``schema`` is not a model with fields.
        """
        node = schema_node(schema)
        if node.kind is not LensKind.STRUCT:
            raise LensMisuseError(
                f"Document schema must be a model with fields, got {schema!r}",
                details={"kind": node.kind.value},
            )
        name = root_name or settings.ROOT_MAP_NAME
        root_map = doc.get(name, type=Map)
        with doc.transaction():
            build_tree(node, root_map)
        logger.debug(f"Bound {node.core.__name__} to root map '{name}'")
        return DocumentRoot(node, Bound(root_map), doc)

    @staticmethod
    def transact(root: DocumentRoot, fn: Callable[[], R]) -> R:
        """Run ``fn`` inside one transaction of ``root``'s document."""
        return root.transact(fn)
