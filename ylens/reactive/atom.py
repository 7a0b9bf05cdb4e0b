# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Pull-based cached reactive values.

An :class:`Atom` computes its value lazily on first read. The read function
receives an :class:`AtomContext` to push later values (``set_self``) and to
register teardown (``add_finalizer``). Between two pushes every read returns
the identical cached object.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

__all__ = (
    "Atom",
    "AtomContext",
    "AtomFamily",
    "never_equal",
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def never_equal(_a: Any, _b: Any) -> bool:
    """Equality for values that mutate in place; every push notifies."""
    return False


class AtomContext(Generic[T]):
    """Handle given to an atom's read function while it is mounted."""

    __slots__ = ("_atom",)

    def __init__(self, atom: Atom[T]):
        self._atom = atom

    def set_self(self, value: T) -> None:
        self._atom._refresh(value)

    def add_finalizer(self, finalizer: Callable[[], None]) -> None:
        self._atom._finalizers.append(finalizer)


class Atom(Generic[T]):
    """A cached value with an install step and finalizers.

    Args:
        read: Computes the initial value and installs whatever will call
            ``ctx.set_self`` later.
        equals: Decides whether a pushed value is a change. Listeners are
            only notified for changes. Defaults to ``==``.
        name: Optional label used in ``repr`` and log records.
    """

    def __init__(
        self,
        read: Callable[[AtomContext[T]], T],
        *,
        equals: Callable[[Any, Any], bool] | None = None,
        name: str | None = None,
    ):
        self._read = read
        self._equals = equals or operator.eq
        self.name = name
        self._value: Any = None
        self._computed = False
        self._mounted = False
        self._finalizers: list[Callable[[], None]] = []
        self._listeners: list[Callable[[T], None]] = []
        self.recompute_count = 0
        """Number of values pushed since the atom was mounted."""

    @property
    def mounted(self) -> bool:
        return self._mounted

    def get(self) -> T:
        """Current value, mounting the atom on first read."""
        if not self._mounted:
            self._mount()
        return self._value

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Call ``listener`` on every change. Returns the unsubscribe callable."""
        self.get()
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispose(self) -> None:
        """Run finalizers and drop listeners. Safe to call repeatedly."""
        if not self._mounted:
            return
        self._mounted = False
        finalizers, self._finalizers = self._finalizers, []
        self._listeners.clear()
        for finalizer in reversed(finalizers):
            try:
                finalizer()
            except Exception as e:
                logger.warning(f"Error in finalizer of {self!r}: {e}")

    def _mount(self) -> None:
        self._mounted = True
        self.recompute_count = 0
        try:
            self._value = self._read(AtomContext(self))
            self._computed = True
        except Exception:
            self.dispose()
            raise

    def _refresh(self, value: T) -> None:
        if not self._mounted:
            return
        self.recompute_count += 1
        if self._computed and self._equals(self._value, value):
            return
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                logger.error(f"Error in atom listener: {e}", exc_info=True)

    def __repr__(self) -> str:
        label = self.name or self._read.__qualname__
        return f"Atom({label}, mounted={self._mounted})"


class AtomFamily(Generic[K, T]):
    """Stable atom per key: the same key always yields the same atom."""

    def __init__(self, factory: Callable[[K], Atom[T]]):
        self._factory = factory
        self._atoms: dict[K, Atom[T]] = {}

    def __call__(self, key: K) -> Atom[T]:
        if (atom := self._atoms.get(key)) is None:
            atom = self._atoms[key] = self._factory(key)
        return atom

    def __contains__(self, key: object) -> bool:
        return key in self._atoms

    def __len__(self) -> int:
        return len(self._atoms)

    def keys(self) -> list[K]:
        return list(self._atoms)

    def evict(self, key: K) -> None:
        """Dispose and forget the atom for ``key``, if any."""
        if (atom := self._atoms.pop(key, None)) is not None:
            atom.dispose()

    def dispose(self) -> None:
        for atom in self._atoms.values():
            atom.dispose()
        self._atoms.clear()
