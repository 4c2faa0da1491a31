# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Cache configuration properties (pystash.cache.*)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from pystash.core.config import config_properties

EncoderName = Literal["pickle", "json"]


class EphemeralProperties(BaseModel):
    max_items: int = Field(default=0, ge=0)


class FileSystemProperties(BaseModel):
    path: str | None = None
    dir_split: int = Field(default=2, ge=0, le=16)
    file_permissions: int = 0o660
    dir_permissions: int = 0o770
    encoder: EncoderName = "pickle"


class SqliteProperties(BaseModel):
    path: str | None = None
    table: str = "pystash_cache"
    encoder: EncoderName = "pickle"


class RedisProperties(BaseModel):
    url: str | None = None
    prefix: str = "pystash"
    stale_grace: int = Field(default=300, ge=0)
    encoder: EncoderName = "pickle"


class CompositeProperties(BaseModel):
    """Composite layering, fastest first, e.g. ``["ephemeral", "filesystem"]``."""

    drivers: list[str] = Field(default_factory=list)


@config_properties(prefix="pystash.cache")
class CacheProperties(BaseModel):
    """Configuration for the cache subsystem.

    ``enabled: false`` (or ``PYSTASH_CACHE_ENABLED=false``) forces every item
    into the disabled state without touching application code.
    """

    enabled: bool = True
    driver: str = "auto"
    namespace: str | None = None
    default_ttl: float = Field(default=432000, gt=0)
    stampede_ttl: float = Field(default=30, gt=0)
    precompute_time: float = Field(default=40, ge=0)
    sleep_time: float = Field(default=500, ge=0, description="Milliseconds between SLEEP retries")
    sleep_attempts: int = Field(default=1, ge=0)
    invalidation: Literal["none", "old", "value", "sleep", "precompute"] = "precompute"

    ephemeral: EphemeralProperties = Field(default_factory=EphemeralProperties)
    filesystem: FileSystemProperties = Field(default_factory=FileSystemProperties)
    sqlite: SqliteProperties = Field(default_factory=SqliteProperties)
    redis: RedisProperties = Field(default_factory=RedisProperties)
    composite: CompositeProperties = Field(default_factory=CompositeProperties)

    def driver_options(self, name: str) -> dict[str, Any]:
        """Constructor options for the named driver, without unset values."""
        section = getattr(self, name, None)
        if not isinstance(section, BaseModel):
            return {}
        return section.model_dump(exclude_none=True)
