# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Any

from pycrdt import Awareness, Doc
from pydantic import BaseModel

from .._errors import LensValidationError
from ..lens.base import ValidationResult
from ..lens.codec import decode
from ..reactive.atom import Atom, AtomFamily
from ..schema.classify import schema_node
from ..schema.traversal import check_supported
from .atoms import awareness_atom
from .lens import LocalAwarenessLens, RemoteAwarenessLens
from .protocol import AwarenessLike, PycrdtAwareness

__all__ = (
    "AwarenessHandle",
    "YAwareness",
)

logger = logging.getLogger(__name__)


class AwarenessHandle:
    """Schema-bound access to every client's presence state.

    Attributes:
        local: Read-write lens over this client's state.
        remote_state_family: Stable per-client state atoms, recomputed on
            ``update`` events so heartbeat timeouts are observed too.
    """

    def __init__(self, schema: type[BaseModel], awareness: AwarenessLike):
        self.node = schema_node(schema)
        check_supported(self.node)
        self.awareness = awareness
        self.local = LocalAwarenessLens(self.node, awareness)
        self.remote_state_family: AtomFamily[int, dict[str, Any] | None] = AtomFamily(
            self._remote_state_atom
        )

    @property
    def client_id(self) -> int:
        return self.awareness.client_id

    def remote(self, client_id: int) -> RemoteAwarenessLens:
        return RemoteAwarenessLens(self.node, self.awareness, client_id)

    def clear_local(self) -> None:
        """Drop this client's state; peers see it as offline."""
        self.awareness.set_local_state(None)

    def get_states(self) -> dict[int, dict[str, Any]]:
        """Every client's raw state, unvalidated."""
        return self.awareness.get_states()

    def safe_get_states(self) -> ValidationResult[dict[int, Any]]:
        """Every client's state decoded against the schema."""
        try:
            decoded = {
                client_id: decode(self.node, state, f"awareness[{client_id}]")
                for client_id, state in self.awareness.get_states().items()
            }
        except LensValidationError as e:
            return ValidationResult.fail(e)
        return ValidationResult.ok(decoded)

    def states_atom(self) -> Atom[dict[int, dict[str, Any]]]:
        return awareness_atom(self.awareness, "change", self.get_states, name="states")

    def client_ids_atom(self) -> Atom[list[int]]:
        """Connected client ids, including heartbeat-driven presence changes."""
        return awareness_atom(
            self.awareness,
            "update",
            lambda: list(self.awareness.get_states()),
            name="client_ids",
        )

    def _remote_state_atom(self, client_id: int) -> Atom[dict[str, Any] | None]:
        return awareness_atom(
            self.awareness,
            "update",
            lambda: self.awareness.get_states().get(client_id),
            client_id=client_id,
            name=f"remote[{client_id}]",
        )


class YAwareness:
    """Factory for schema-bound awareness handles."""

    @classmethod
    def make(cls, schema: type[BaseModel], doc: Doc) -> AwarenessHandle:
        """Create an awareness store for ``doc`` and bind ``schema`` to it."""
        return cls.bind(schema, Awareness(doc))

    @classmethod
    def bind(
        cls, schema: type[BaseModel], awareness: AwarenessLike | Awareness
    ) -> AwarenessHandle:
        """Bind ``schema`` to an existing awareness store.

        A bare ``pycrdt.Awareness`` is wrapped in :class:`PycrdtAwareness`.
        """
        if isinstance(awareness, Awareness):
            awareness = PycrdtAwareness(awareness)
        handle = AwarenessHandle(schema, awareness)
        logger.debug(f"Bound awareness schema for client {handle.client_id}")
        return handle
