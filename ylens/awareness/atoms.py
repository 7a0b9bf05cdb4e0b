# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Atoms driven by awareness events instead of container observers."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from ..reactive.atom import Atom, AtomContext
from .protocol import AwarenessChanges, AwarenessEvent, AwarenessLike, touches

__all__ = ("awareness_atom",)

T = TypeVar("T")


def awareness_atom(
    awareness: AwarenessLike,
    event: AwarenessEvent,
    read_value: Callable[[], T],
    *,
    client_id: int | None = None,
    name: str | None = None,
) -> Atom[T]:
    """Recompute ``read_value`` on ``event``.

    With ``client_id`` set, only events touching that client recompute.
    """

    def read(ctx: AtomContext[T]) -> T:
        def handler(changes: AwarenessChanges, _origin: Any) -> None:
            if client_id is None or touches(client_id, changes):
                ctx.set_self(read_value())

        awareness.on(event, handler)
        ctx.add_finalizer(lambda: awareness.off(event, handler))
        return read_value()

    return Atom(read, name=name)
