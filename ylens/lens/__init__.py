# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .base import Bound, IndexSlot, KeySlot, Lens, ReadonlyLens, ValidationResult
from .lenses import (
    ArrayLens,
    PrimitiveLens,
    RecordLens,
    StructLens,
    TextLens,
    child_lens,
)
from .node_list import NodeListLens

__all__ = (
    "ArrayLens",
    "Bound",
    "IndexSlot",
    "KeySlot",
    "Lens",
    "NodeListLens",
    "PrimitiveLens",
    "ReadonlyLens",
    "RecordLens",
    "StructLens",
    "TextLens",
    "ValidationResult",
    "child_lens",
)
