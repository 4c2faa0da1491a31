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
"""Settings and switches shared by every Item of a Pool."""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pystash.cache.expiration import RandomSource

if TYPE_CHECKING:
    from pystash.config.properties.cache import CacheProperties

DEFAULT_TTL = 432000  # five days
DEFAULT_STAMPEDE_TTL = 30
DEFAULT_PRECOMPUTE_TIME = 40
DEFAULT_SLEEP_TIME_MS = 500
DEFAULT_SLEEP_ATTEMPTS = 1


@dataclass
class CacheStats:
    """Running get() counters, usable for a hit/miss ratio."""

    calls: int = 0
    hits: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def misses(self) -> int:
        return self.calls - self.hits

    @property
    def hit_rate(self) -> float:
        """Hit rate as percentage (0-100)."""
        return (self.hits / self.calls * 100) if self.calls else 0.0

    def record(self, hit: bool) -> None:
        with self._lock:
            self.calls += 1
            if hit:
                self.hits += 1

    def reset(self) -> None:
        with self._lock:
            self.calls = 0
            self.hits = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "calls": self.calls,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hit_rate, 2),
        }


class CacheContext:
    """Defaults, kill switches, clock and stats for a family of Items.

    One context per Pool keeps tests and independent pools isolated from
    each other. ``disable_runtime()`` turns every Item sharing the context
    into an always-miss no-op until ``enable_runtime()``; ``force_disabled``
    is the configuration-level equivalent and cannot be lifted at runtime.
    """

    def __init__(
        self,
        *,
        default_ttl: float = DEFAULT_TTL,
        stampede_ttl: float = DEFAULT_STAMPEDE_TTL,
        precompute_time: float = DEFAULT_PRECOMPUTE_TIME,
        sleep_time_ms: float = DEFAULT_SLEEP_TIME_MS,
        sleep_attempts: int = DEFAULT_SLEEP_ATTEMPTS,
        force_disabled: bool = False,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
        rng: RandomSource | None = None,
    ) -> None:
        self.default_ttl = default_ttl
        self.stampede_ttl = stampede_ttl
        self.precompute_time = precompute_time
        self.sleep_time_ms = sleep_time_ms
        self.sleep_attempts = sleep_attempts
        self.force_disabled = force_disabled
        self.clock = clock
        self.sleep = sleep
        self.rng: RandomSource = rng or random.Random()
        self.stats = CacheStats()
        self._runtime_disabled = False

    @classmethod
    def from_properties(cls, properties: CacheProperties, **overrides: Any) -> CacheContext:
        kwargs: dict[str, Any] = {
            "default_ttl": properties.default_ttl,
            "stampede_ttl": properties.stampede_ttl,
            "precompute_time": properties.precompute_time,
            "sleep_time_ms": properties.sleep_time,
            "sleep_attempts": properties.sleep_attempts,
            "force_disabled": not properties.enabled,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def now(self) -> float:
        return self.clock()

    def disable_runtime(self) -> None:
        self._runtime_disabled = True

    def enable_runtime(self) -> None:
        self._runtime_disabled = False

    @property
    def runtime_disabled(self) -> bool:
        return self._runtime_disabled

    @property
    def is_disabled(self) -> bool:
        return self._runtime_disabled or self.force_disabled
