# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import TYPE_CHECKING

from ._errors import (
    ItemNotFoundError,
    LensError,
    LensMisuseError,
    LensValidationError,
    UnsupportedSchemaError,
)
from .config import settings
from .document import DocumentRoot, YDocument
from .lens import (
    ArrayLens,
    Lens,
    NodeListLens,
    PrimitiveLens,
    ReadonlyLens,
    RecordLens,
    StructLens,
    TextLens,
    ValidationResult,
)
from .reactive import Atom, AtomFamily
from .schema import LensKind, YLinkedList, YText, classify
from .version import __version__

if TYPE_CHECKING:
    from .awareness import AwarenessHandle, AwarenessLike, YAwareness

logger = logging.getLogger(__name__)
logger.setLevel(settings.LOG_LEVEL.upper())

_lazy_imports = {}


def __getattr__(name: str):
    if name in _lazy_imports:
        return _lazy_imports[name]

    match name:
        case "YAwareness" | "AwarenessHandle" | "AwarenessLike":
            from . import awareness

            obj_ = getattr(awareness, name)
            _lazy_imports[name] = obj_
            return obj_
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = (
    "__version__",
    "ArrayLens",
    "Atom",
    "AtomFamily",
    "AwarenessHandle",
    "AwarenessLike",
    "DocumentRoot",
    "ItemNotFoundError",
    "Lens",
    "LensError",
    "LensKind",
    "LensMisuseError",
    "LensValidationError",
    "NodeListLens",
    "PrimitiveLens",
    "ReadonlyLens",
    "RecordLens",
    "StructLens",
    "TextLens",
    "UnsupportedSchemaError",
    "ValidationResult",
    "YAwareness",
    "YDocument",
    "YLinkedList",
    "YText",
    "classify",
    "logger",
    "settings",
)
