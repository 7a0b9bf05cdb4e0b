# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for configuration module."""

import pytest
from pycrdt import Doc, Map
from pydantic import BaseModel, ValidationError

from ylens import YDocument
from ylens.config import LensSettings, settings


class Counter(BaseModel):
    total: int = 0
    history: list[int] = []


class TestLensSettings:
    """Tests for LensSettings."""

    def test_defaults(self):
        config = LensSettings(_env_file=None)
        assert config.ROOT_MAP_NAME == "root"
        assert config.NODE_ID_FIELD == "_id"
        assert config.LOG_LEVEL == "INFO"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("YLENS_ROOT_MAP_NAME", "state")
        monkeypatch.setenv("YLENS_NODE_ID_FIELD", "uid")
        config = LensSettings(_env_file=None)
        assert config.ROOT_MAP_NAME == "state"
        assert config.NODE_ID_FIELD == "uid"

    def test_frozen(self):
        config = LensSettings(_env_file=None)
        with pytest.raises(ValidationError):
            config.ROOT_MAP_NAME = "other"

    def test_empty_names_rejected(self):
        with pytest.raises(ValidationError):
            LensSettings(_env_file=None, ROOT_MAP_NAME="")

    def test_singleton(self):
        assert LensSettings._instance is settings


class TestSettingsInUse:
    def test_root_map_name(self):
        doc = Doc()
        YDocument.bind(Counter, doc)
        assert "history" in doc.get(settings.ROOT_MAP_NAME, type=Map)
