# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal, Protocol, TypedDict, runtime_checkable

from pycrdt import Awareness

__all__ = (
    "AwarenessChanges",
    "AwarenessEvent",
    "AwarenessHandler",
    "AwarenessLike",
    "PycrdtAwareness",
    "touches",
)

logger = logging.getLogger(__name__)

AwarenessEvent = Literal["change", "update"]
"""``change`` fires when a state's content changes; ``update`` also fires
on heartbeat renewals with identical content."""


class AwarenessChanges(TypedDict):
    added: list[int]
    updated: list[int]
    removed: list[int]


AwarenessHandler = Callable[[AwarenessChanges, Any], None]


@runtime_checkable
class AwarenessLike(Protocol):
    """Minimal surface of an awareness store the lenses rely on."""

    @property
    def client_id(self) -> int: ...

    def get_local_state(self) -> dict[str, Any] | None: ...

    def set_local_state(self, state: dict[str, Any] | None) -> None: ...

    def set_local_state_field(self, field: str, value: Any) -> None: ...

    def get_states(self) -> dict[int, dict[str, Any]]: ...

    def on(self, event: AwarenessEvent, handler: AwarenessHandler) -> None: ...

    def off(self, event: AwarenessEvent, handler: AwarenessHandler) -> None: ...


def touches(client_id: int, changes: AwarenessChanges) -> bool:
    """True if ``client_id`` was added, updated or removed."""
    return any(client_id in changes.get(kind, ()) for kind in ("added", "updated", "removed"))


class PycrdtAwareness:
    """Adapts ``pycrdt.Awareness`` to :class:`AwarenessLike`.

    pycrdt delivers every topic to one callback as ``(topic, (changes,
    origin))``; this adapter routes them to per-event handlers.
    """

    def __init__(self, awareness: Awareness):
        self.awareness = awareness
        self._subscriptions: dict[tuple[str, AwarenessHandler], str] = {}

    @property
    def client_id(self) -> int:
        return self.awareness.client_id

    def get_local_state(self) -> dict[str, Any] | None:
        return self.awareness.get_local_state()

    def set_local_state(self, state: dict[str, Any] | None) -> None:
        self.awareness.set_local_state(state)

    def set_local_state_field(self, field: str, value: Any) -> None:
        self.awareness.set_local_state_field(field, value)

    def get_states(self) -> dict[int, dict[str, Any]]:
        return dict(self.awareness.states)

    def on(self, event: AwarenessEvent, handler: AwarenessHandler) -> None:
        if (event, handler) in self._subscriptions:
            return

        def dispatch(topic: str, payload: tuple[AwarenessChanges, Any]) -> None:
            if topic == event:
                changes, origin = payload
                handler(changes, origin)

        self._subscriptions[(event, handler)] = self.awareness.observe(dispatch)

    def off(self, event: AwarenessEvent, handler: AwarenessHandler) -> None:
        if (subscription := self._subscriptions.pop((event, handler), None)) is None:
            logger.debug(f"No '{event}' handler registered for {handler!r}")
            return
        self.awareness.unobserve(subscription)
