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
"""Shared fixtures for cache tests: a controllable clock and deterministic jitter."""

from __future__ import annotations

import re

import pytest

from pystash.cache.adapters.ephemeral import EphemeralDriver
from pystash.cache.adapters.redis import RedisDriver
from pystash.cache.adapters.sqlite import SqliteDriver
from pystash.cache.context import CacheContext
from pystash.cache.pool import Pool

START = 1_700_000_000.0


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    out, i = [], 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "*":
            out.append(".*")
        elif char == "?":
            out.append(".")
        else:
            out.append(re.escape(char))
        i += 1
    return re.compile("".join(out) + r"\Z", re.DOTALL)


class FakeRedis:
    """Minimal in-memory stub matching the redis.Redis interface."""

    def __init__(self) -> None:
        self._store: dict[str, bytes] = {}
        self.ttls: dict[str, int | None] = {}

    def get(self, key: str) -> bytes | None:
        return self._store.get(key)

    def set(self, key: str, value: bytes, ex: int | None = None) -> bool:
        self._store[key] = value
        self.ttls[key] = ex
        return True

    def delete(self, *keys: str | bytes) -> int:
        count = 0
        for k in keys:
            k = k.decode() if isinstance(k, bytes) else k
            if k in self._store:
                del self._store[k]
                self.ttls.pop(k, None)
                count += 1
        return count

    def scan_iter(self, match: str | None = None, count: int | None = None):
        regex = _glob_to_regex(match or "*")
        for key in list(self._store):
            if regex.match(key):
                yield key.encode()

    def keys(self) -> list[str]:
        return list(self._store)


class FakeClock:
    """Wall clock that only moves when told to; sleeping advances it."""

    def __init__(self, start: float = START) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class NoJitter:
    def randint(self, a: int, b: int) -> int:
        return a


class FailingDriver:
    """Driver whose every call raises."""

    def __init__(self) -> None:
        self.calls = 0

    def get_data(self, key):
        self.calls += 1
        raise ConnectionError("backend down")

    def store_data(self, key, data, expiration):
        self.calls += 1
        raise ConnectionError("backend down")

    def clear(self, key=None):
        self.calls += 1
        raise ConnectionError("backend down")

    def purge(self):
        self.calls += 1
        raise ConnectionError("backend down")


class RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def critical(self, event: str, **kw) -> None:
        self.events.append((event, kw))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context(clock: FakeClock) -> CacheContext:
    return CacheContext(clock=clock, sleep=clock.sleep, rng=NoJitter())


@pytest.fixture
def driver() -> EphemeralDriver:
    return EphemeralDriver()


@pytest.fixture
def pool(driver: EphemeralDriver, context: CacheContext) -> Pool:
    return Pool(driver, context=context)


@pytest.fixture
def redis_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(params=["ephemeral", "sqlite", "redis"])
def flat_driver(request, redis_client: FakeRedis):
    """Each driver that stores subtrees under a flattened key index."""
    if request.param == "ephemeral":
        yield EphemeralDriver()
    elif request.param == "sqlite":
        driver = SqliteDriver(":memory:")
        yield driver
        driver.close()
    else:
        yield RedisDriver(redis_client, prefix="test")


@pytest.fixture
def failing_driver() -> FailingDriver:
    return FailingDriver()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
