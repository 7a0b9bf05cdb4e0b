# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LensSettings(BaseSettings, frozen=True):
    """Settings for document binding, with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="YLENS_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ROOT_MAP_NAME: str = Field(
        default="root",
        min_length=1,
        description="Name of the top-level map every document is projected onto",
    )

    NODE_ID_FIELD: str = Field(
        default="_id",
        min_length=1,
        description="Reserved key holding the identity of a node-list element",
    )

    LOG_LEVEL: str = "INFO"

    # Class variable to store the singleton instance
    _instance: ClassVar[Any] = None


# Create a singleton instance
settings = LensSettings()
# Store the instance in the class variable for singleton pattern
LensSettings._instance = settings
