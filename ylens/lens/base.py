# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from pycrdt import Array, Doc, Map

from .._errors import LensMisuseError, LensValidationError
from ..schema.classify import LensKind, SchemaNode
from .codec import decode, encode

if TYPE_CHECKING:
    from ..reactive.atom import Atom

__all__ = (
    "Binding",
    "Bound",
    "IndexSlot",
    "KeySlot",
    "Lens",
    "ReadonlyLens",
    "ValidationResult",
)

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Outcome of a validated read or write."""

    success: bool
    value: T | None = None
    error: LensValidationError | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> ValidationResult[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: LensValidationError) -> ValidationResult[T]:
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if not self.success:
            raise self.error
        return self.value


# ---------------------------------------------------------------------------
# Bindings: how a lens reaches its container or value
# ---------------------------------------------------------------------------


class Binding(ABC):
    @abstractmethod
    def resolve(self) -> Any: ...


@dataclass(frozen=True, eq=False)
class Bound(Binding):
    """Bound to one container, wherever it moves."""

    container: Any

    def resolve(self) -> Any:
        return self.container


@dataclass(frozen=True, eq=False)
class KeySlot(Binding):
    """Bound to ``parent[key]``; the value is stored inline in the parent."""

    parent: Map
    key: str

    def resolve(self) -> Any:
        return self.parent.get(self.key)

    def store(self, value: Any) -> None:
        self.parent[self.key] = value


@dataclass(frozen=True, eq=False)
class IndexSlot(Binding):
    """Bound to whatever occupies ``parent[index]`` at access time."""

    parent: Array
    index: int

    def resolve(self) -> Any:
        if 0 <= self.index < len(self.parent):
            return self.parent[self.index]
        return None


# ---------------------------------------------------------------------------
# Lens
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Lens(ABC, Generic[T]):
    """Typed accessor bound to one position of a document.

    Lenses are cheap value handles: creating one never subscribes to
    anything, and two lenses on the same path are interchangeable.
    """

    node: SchemaNode
    binding: Binding
    doc: Doc
    path: tuple[str, ...] = ()

    kind: ClassVar[LensKind]

    @property
    def context(self) -> str:
        """Dotted path used in error messages."""
        return ".".join(self.path) or "root"

    def focus(self, key: str) -> Lens:
        raise LensMisuseError(
            f"Cannot focus into a {self.kind.value} lens at {self.context}",
            details={"key": key, "kind": self.kind.value},
        )

    @abstractmethod
    def get(self) -> T | None:
        """Current value as stored, without validation."""

    def safe_get(self) -> ValidationResult[T]:
        """Current value decoded against the schema."""
        try:
            return ValidationResult.ok(decode(self.node, self.get(), self.context))
        except LensValidationError as e:
            return ValidationResult.fail(e)

    def set(self, value: T) -> None:
        """Validate ``value`` and write it.

        Raises:
            LensValidationError: if ``value`` does not match the schema.
            LensMisuseError: if a container lens is set to ``None``; clear
                an optional container field through its parent instead.
        """
        data = encode(self.node, value, self.context)
        if data is None and self.kind.is_structural:
            raise LensMisuseError(
                f"Cannot replace the {self.kind.value} container at "
                f"{self.context} with None; set the parent field instead"
            )
        self._write(data)

    def safe_set(self, value: Any) -> ValidationResult[None]:
        """Like :meth:`set`, but returns the validation failure instead."""
        try:
            self.set(value)
        except LensValidationError as e:
            return ValidationResult.fail(e)
        return ValidationResult.ok()

    @abstractmethod
    def subscribe(self) -> Atom[T]:
        """A reactive view of this position. Mounts on first read."""

    def readonly(self) -> ReadonlyLens[T]:
        return ReadonlyLens(self)

    @abstractmethod
    def _write(self, data: Any) -> None: ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.context!r})"


class ReadonlyLens(Generic[T]):
    """Read-only view over a lens: focus, get, safe_get and subscribe."""

    __slots__ = ("_lens",)

    def __init__(self, lens: Lens[T]):
        self._lens = lens

    @property
    def node(self) -> SchemaNode:
        return self._lens.node

    @property
    def path(self) -> tuple[str, ...]:
        return self._lens.path

    def focus(self, key: str) -> ReadonlyLens:
        """Read-only child lens. Still creates a missing child container."""
        return ReadonlyLens(self._lens.focus(key))

    def get(self) -> T | None:
        return self._lens.get()

    def safe_get(self) -> ValidationResult[T]:
        return self._lens.safe_get()

    def subscribe(self) -> Atom[T]:
        return self._lens.subscribe()

    def __repr__(self) -> str:
        return f"ReadonlyLens({self._lens!r})"
