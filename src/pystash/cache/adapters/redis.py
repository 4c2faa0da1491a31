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
"""Redis-backed driver."""

from __future__ import annotations

import logging
import math
import re
import time
from collections.abc import Sequence
from typing import Any

from pystash.cache.adapters.encoders import Encoder, resolve_encoder
from pystash.cache.keys import key_index
from pystash.cache.record import Record
from pystash.kernel.exceptions import DriverUnavailableException

_logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisDriver:
    """Driver that delegates to a synchronous ``redis.Redis``-like client.

    Redis expires keys on its own, so the native TTL is set to the logical
    expiration plus ``stale_grace`` seconds. Expired-but-present records are
    what OLD and stampede-aware reads serve while one caller regenerates.
    """

    def __init__(
        self,
        client: Any,
        prefix: str = "pystash",
        encoder: Encoder | str | None = "pickle",
        stale_grace: int = 300,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._encoder = resolve_encoder(encoder)
        self._stale_grace = stale_grace

    @classmethod
    def from_url(cls, url: str, **options: Any) -> RedisDriver:
        try:
            import redis
        except ImportError as exc:
            raise DriverUnavailableException(
                "The 'redis' package is required for RedisDriver", context={"url": url}
            ) from exc
        return cls(redis.Redis.from_url(url), **options)

    def get_data(self, key: Sequence[str]) -> Record | None:
        name = self._name(key)
        raw = self._client.get(name)
        if raw is None:
            return None
        try:
            stored = self._encoder.decode(raw)
        except Exception:
            _logger.warning("Failed to deserialize cached value for key '%s'", name)
            return None
        return Record.from_driver(stored)

    def store_data(self, key: Sequence[str], data: Any, expiration: float | None) -> bool:
        name = self._name(key)
        raw = self._encoder.encode({"data": data, "expiration": expiration})
        if expiration is None:
            return bool(self._client.set(name, raw))

        ttl = math.ceil(expiration - time.time() + self._stale_grace)
        if ttl <= 0:
            self._client.delete(name)
            return True
        return bool(self._client.set(name, raw, ex=ttl))

    def clear(self, key: Sequence[str] | None = None) -> bool:
        pattern = f"{self._escape(self._prefix)}:{self._escape(key_index(key))}*"
        batch: list[Any] = []
        for name in self._client.scan_iter(match=pattern, count=500):
            batch.append(name)
            if len(batch) >= 500:
                self._client.delete(*batch)
                batch.clear()
        if batch:
            self._client.delete(*batch)
        return True

    def purge(self) -> bool:
        # Redis drops expired keys itself.
        return True

    def _name(self, key: Sequence[str]) -> str:
        return f"{self._prefix}:{key_index(key)}"

    @staticmethod
    def _escape(text: str) -> str:
        return _GLOB_SPECIAL.sub(r"\\\1", text)
