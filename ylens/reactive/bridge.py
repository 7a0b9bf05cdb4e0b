# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Bridge from pycrdt mutation observers to :class:`Atom` values."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from pycrdt import Array, Map

from .atom import Atom, AtomContext

__all__ = (
    "ObserveMode",
    "detach_tolerant",
    "identity_set",
    "make_reactive",
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObserveMode(str, Enum):
    SHALLOW = "shallow"
    """Structural changes of the container itself."""

    DEEP = "deep"
    """Any change in the container's subtree."""


def make_reactive(
    container: Any,
    mode: ObserveMode | str,
    read_value: Callable[[], T],
    *,
    equals: Callable[[Any, Any], bool] | None = None,
    guard: Callable[[], bool] | None = None,
    name: str | None = None,
) -> Atom[T]:
    """Wrap a container's observer API into a pull-based atom.

    The observer is installed when the atom is first read and removed when it
    is disposed. ``guard``, when given, must hold for a notification to
    recompute the value.
    """
    mode = ObserveMode(mode)

    def read(ctx: AtomContext[T]) -> T:
        def on_change(_event: Any) -> None:
            if guard is None or guard():
                ctx.set_self(read_value())

        if mode is ObserveMode.SHALLOW:
            subscription = container.observe(on_change)
        else:
            subscription = container.observe_deep(on_change)
        ctx.add_finalizer(lambda: _unobserve(container, subscription))
        return read_value()

    return Atom(read, equals=equals, name=name)


def _unobserve(container: Any, subscription: Any) -> None:
    try:
        container.unobserve(subscription)
    except Exception as e:
        # detached or already-collected containers
        logger.debug(f"Observer on stale container not removed: {e}")


def identity_set(
    array: Array, id_field: str, *, name: str | None = None
) -> Atom[list[str]]:
    """Identities of a node list, recomputed on structural changes only.

    Field edits inside an existing element are not structural changes of the
    array and do not reach this atom.
    """

    def read_ids() -> list[str]:
        return [
            item.get(id_field)
            for item in array
            if isinstance(item, Map) and item.get(id_field) is not None
        ]

    return make_reactive(array, ObserveMode.SHALLOW, read_ids, name=name)


def detach_tolerant(
    container: Map,
    read_value: Callable[[], T],
    is_attached: Callable[[], bool],
    *,
    name: str | None = None,
) -> Atom[T]:
    """Deep view of one element that freezes once the element is detached."""
    return make_reactive(
        container,
        ObserveMode.DEEP,
        read_value,
        guard=is_attached,
        name=name,
    )
