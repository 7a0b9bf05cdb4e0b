# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .atoms import awareness_atom
from .handle import AwarenessHandle, YAwareness
from .lens import LocalAwarenessLens, RemoteAwarenessLens
from .protocol import AwarenessChanges, AwarenessLike, PycrdtAwareness

__all__ = (
    "AwarenessChanges",
    "AwarenessHandle",
    "AwarenessLike",
    "LocalAwarenessLens",
    "PycrdtAwareness",
    "RemoteAwarenessLens",
    "YAwareness",
    "awareness_atom",
)
