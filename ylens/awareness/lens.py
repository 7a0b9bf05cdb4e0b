# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Schema-bound lenses over awareness states.

Awareness states are plain JSON objects replaced wholesale on every write,
so these lenses address them by path instead of by container.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from .._errors import LensMisuseError, LensValidationError
from ..lens.base import ValidationResult
from ..lens.codec import decode, encode
from ..reactive.atom import Atom
from ..schema.classify import SchemaNode
from .atoms import awareness_atom
from .protocol import AwarenessLike

__all__ = (
    "LocalAwarenessLens",
    "RemoteAwarenessLens",
    "get_at_path",
    "set_at_path",
)


def get_at_path(state: Any, path: Sequence[str]) -> Any:
    current = state
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def set_at_path(state: Mapping[str, Any], path: Sequence[str], value: Any) -> Any:
    """Copy of ``state`` with ``value`` at ``path``; siblings are preserved."""
    if not path:
        return value
    head, *tail = path
    inner = state.get(head)
    return {
        **state,
        head: set_at_path(inner if isinstance(inner, Mapping) else {}, tail, value),
    }


class _AwarenessView(ABC):
    __slots__ = ("node", "awareness", "path")

    def __init__(
        self,
        node: SchemaNode,
        awareness: AwarenessLike,
        path: tuple[str, ...] = (),
    ):
        self.node = node
        self.awareness = awareness
        self.path = path

    @property
    def context(self) -> str:
        return ".".join(("awareness", *self.path))

    @property
    @abstractmethod
    def client_id(self) -> int: ...

    @abstractmethod
    def _state(self) -> dict[str, Any] | None: ...

    def _child(self, key: str) -> SchemaNode:
        child = self.node.child(key, (*self.path, key))
        if child is None:
            raise LensMisuseError(
                f"Unknown field: {key}",
                details={"key": key, "path": list(self.path)},
            )
        return child

    def get(self) -> Any:
        """Raw value at this path, ``None`` when absent."""
        return get_at_path(self._state(), self.path)

    def safe_get(self) -> ValidationResult[Any]:
        try:
            return ValidationResult.ok(decode(self.node, self.get(), self.context))
        except LensValidationError as e:
            return ValidationResult.fail(e)

    def subscribe(self) -> Atom[Any]:
        """Recomputes when this client's state changes."""
        return awareness_atom(
            self.awareness,
            "change",
            self.get,
            client_id=self.client_id,
            name=self.context,
        )

    def __repr__(self) -> str:
        name = self.__class__.__name__
        return f"{name}(client_id={self.client_id}, path={self.context!r})"


class LocalAwarenessLens(_AwarenessView):
    """Read-write lens over this client's own awareness state."""

    __slots__ = ()

    @property
    def client_id(self) -> int:
        return self.awareness.client_id

    def _state(self) -> dict[str, Any] | None:
        return self.awareness.get_local_state()

    def focus(self, key: str) -> LocalAwarenessLens:
        return LocalAwarenessLens(self._child(key), self.awareness, (*self.path, key))

    def set(self, value: Any) -> None:
        """Validate and write ``value`` at this path.

        Raises:
            LensValidationError: if ``value`` does not match the schema.
        """
        data = encode(self.node, value, self.context)
        if not self.path:
            self.awareness.set_local_state(data)
            return
        current = self.awareness.get_local_state() or {}
        self.awareness.set_local_state(set_at_path(current, self.path, data))

    def safe_set(self, value: Any) -> ValidationResult[None]:
        try:
            self.set(value)
        except LensValidationError as e:
            return ValidationResult.fail(e)
        return ValidationResult.ok()


class RemoteAwarenessLens(_AwarenessView):
    """Read-only lens over another client's awareness state."""

    __slots__ = ("_client_id",)

    def __init__(
        self,
        node: SchemaNode,
        awareness: AwarenessLike,
        client_id: int,
        path: tuple[str, ...] = (),
    ):
        super().__init__(node, awareness, path)
        self._client_id = client_id

    @property
    def client_id(self) -> int:
        return self._client_id

    def _state(self) -> dict[str, Any] | None:
        return self.awareness.get_states().get(self._client_id)

    def focus(self, key: str) -> RemoteAwarenessLens:
        return RemoteAwarenessLens(
            self._child(key), self.awareness, self._client_id, (*self.path, key)
        )
