# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest
from pycrdt import Doc


@pytest.fixture
def doc():
    """A fresh, empty pycrdt document."""
    return Doc()


@pytest.fixture
def update_counter():
    """Attach to a document and count committed update events."""

    class _Counter:
        def __init__(self):
            self.count = 0
            self._subscriptions = []

        def attach(self, doc):
            self._subscriptions.append((doc, doc.observe(self._on_update)))
            return self

        def _on_update(self, _event):
            self.count += 1

        def close(self):
            for doc, subscription in self._subscriptions:
                doc.unobserve(subscription)
            self._subscriptions.clear()

    counter = _Counter()
    yield counter
    counter.close()
