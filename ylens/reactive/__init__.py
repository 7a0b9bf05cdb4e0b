# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .atom import Atom, AtomContext, AtomFamily, never_equal
from .bridge import ObserveMode, detach_tolerant, identity_set, make_reactive

__all__ = (
    "Atom",
    "AtomContext",
    "AtomFamily",
    "ObserveMode",
    "detach_tolerant",
    "identity_set",
    "make_reactive",
    "never_equal",
)
