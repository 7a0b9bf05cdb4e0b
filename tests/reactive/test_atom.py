# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for Atom and AtomFamily."""

import logging

import pytest

from ylens.reactive import Atom, AtomFamily, never_equal


def _pushable(initial, **kwargs):
    """Atom plus a handle to push values into it."""
    handle = {}

    def read(ctx):
        handle["ctx"] = ctx
        return initial

    return Atom(read, **kwargs), handle


class TestAtom:
    """Lazy mount, caching and notification."""

    def test_lazy_mount(self):
        calls = []
        atom = Atom(lambda ctx: calls.append(1) or "v")
        assert not atom.mounted
        assert calls == []
        assert atom.get() == "v"
        assert atom.mounted
        atom.get()
        assert calls == [1]

    def test_cached_identity(self):
        atom = Atom(lambda ctx: {"a": 1})
        assert atom.get() is atom.get()

    def test_push_notifies(self):
        atom, handle = _pushable(1)
        seen = []
        atom.subscribe(seen.append)
        handle["ctx"].set_self(2)
        assert atom.get() == 2
        assert seen == [2]
        assert atom.recompute_count == 1

    def test_equal_push_is_silent(self):
        atom, handle = _pushable([1])
        seen = []
        atom.subscribe(seen.append)
        handle["ctx"].set_self([1])
        assert seen == []
        assert atom.recompute_count == 1

    def test_none_is_a_computed_value(self):
        atom, handle = _pushable(None)
        seen = []
        atom.subscribe(seen.append)
        handle["ctx"].set_self(None)
        assert seen == []
        handle["ctx"].set_self(0)
        assert seen == [0]

    def test_never_equal(self):
        atom, handle = _pushable("same", equals=never_equal)
        seen = []
        atom.subscribe(seen.append)
        handle["ctx"].set_self("same")
        assert seen == ["same"]

    def test_unsubscribe(self):
        atom, handle = _pushable(0)
        seen = []
        unsubscribe = atom.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        handle["ctx"].set_self(1)
        assert seen == []

    def test_listener_errors_are_logged(self, caplog):
        atom, handle = _pushable(0)
        seen = []

        def broken(_value):
            raise RuntimeError("listener failed")

        atom.subscribe(broken)
        atom.subscribe(seen.append)
        with caplog.at_level(logging.ERROR, logger="ylens.reactive.atom"):
            handle["ctx"].set_self(1)
        assert seen == [1]
        assert "listener failed" in caplog.text

    def test_dispose_runs_finalizers_in_reverse(self):
        order = []

        def read(ctx):
            ctx.add_finalizer(lambda: order.append("first"))
            ctx.add_finalizer(lambda: order.append("second"))
            return None

        atom = Atom(read)
        atom.get()
        atom.dispose()
        atom.dispose()
        assert order == ["second", "first"]
        assert not atom.mounted

    def test_finalizer_errors_are_suppressed(self):
        def read(ctx):
            ctx.add_finalizer(lambda: 1 / 0)
            return None

        atom = Atom(read)
        atom.get()
        atom.dispose()
        assert not atom.mounted

    def test_push_after_dispose_is_ignored(self):
        atom, handle = _pushable(0)
        atom.get()
        atom.dispose()
        handle["ctx"].set_self(5)
        assert atom.recompute_count == 0

    def test_failed_mount_propagates(self):
        def read(ctx):
            raise ValueError("boom")

        atom = Atom(read)
        with pytest.raises(ValueError):
            atom.get()
        assert not atom.mounted


class TestAtomFamily:
    """One atom per key."""

    def test_stable_per_key(self):
        family = AtomFamily(lambda key: Atom(lambda ctx: key * 2))
        assert family(2) is family(2)
        assert family(2) is not family(3)
        assert family(3).get() == 6
        assert 2 in family
        assert family.keys() == [2, 3]

    def test_evict(self):
        family = AtomFamily(lambda key: Atom(lambda ctx: key))
        atom = family("a")
        atom.get()
        family.evict("a")
        assert not atom.mounted
        assert "a" not in family
        family.evict("a")
