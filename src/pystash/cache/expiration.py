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
"""Stored expiration computation with randomized early expiry."""

from __future__ import annotations

import math
import numbers
import random
from datetime import datetime, timedelta
from typing import Any, Protocol

JITTER_RATIO = 0.15

TTL = int | float | timedelta | datetime | None


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def cache_time_for(ttl: Any, now: float, default_ttl: float) -> float:
    """Seconds between *now* and the requested expiration.

    Absolute datetimes (naive ones are taken as local time) and timedeltas
    are converted; ``None`` and non-numeric values fall back to *default_ttl*.
    """
    if isinstance(ttl, datetime):
        return ttl.timestamp() - now
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    if isinstance(ttl, bool) or not isinstance(ttl, numbers.Real):
        return float(default_ttl)
    return float(ttl)


def compute_expiration(
    ttl: TTL,
    now: float,
    default_ttl: float,
    rng: RandomSource | None = None,
) -> float:
    """Expiration timestamp for a write happening at *now*.

    Positive lifetimes are shortened by a random whole number of seconds in
    ``[0, floor(cache_time * 0.15)]``, drawn on every write, so entries
    written together do not all expire together.
    """
    cache_time = cache_time_for(ttl, now, default_ttl)
    expiration = now + cache_time

    if cache_time > 0:
        expiration -= (rng or random).randint(0, math.floor(cache_time * JITTER_RATIO))

    return expiration
