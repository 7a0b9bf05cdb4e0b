# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .classify import LensKind, SchemaNode, classify, schema_node, unwrap
from .markers import LinkedListMarker, YLinkedList, YText
from .traversal import build_tree, check_supported

__all__ = (
    "LensKind",
    "LinkedListMarker",
    "SchemaNode",
    "YLinkedList",
    "YText",
    "build_tree",
    "check_supported",
    "classify",
    "schema_node",
    "unwrap",
)
