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
"""Tests for RedisDriver using a FakeRedis stub."""

from __future__ import annotations

import time

import pytest

from pystash.cache.adapters.redis import RedisDriver
from pystash.cache.ports.outbound import Driver
from pystash.cache.record import Record


@pytest.fixture
def client(redis_client):
    return redis_client


@pytest.fixture
def driver(client) -> RedisDriver:
    return RedisDriver(client, prefix="test", stale_grace=300)


class TestRedisDriver:
    def test_protocol_compliance(self, driver):
        assert isinstance(driver, Driver)

    def test_store_and_get(self, driver):
        expiration = time.time() + 60
        assert driver.store_data(["cache", "a"], {"return": "x"}, expiration) is True
        assert driver.get_data(["cache", "a"]) == Record({"return": "x"}, expiration)

    def test_get_missing(self, driver):
        assert driver.get_data(["cache", "nope"]) is None

    def test_keys_carry_prefix(self, driver, client):
        driver.store_data(["cache", "a"], 1, None)
        assert client.keys() == ["test:cache#a#"]

    def test_native_ttl_includes_stale_grace(self, driver, client):
        driver.store_data(["cache", "a"], 1, time.time() + 60)
        assert 359 <= client.ttls["test:cache#a#"] <= 361

    def test_no_expiration_means_no_native_ttl(self, driver, client):
        driver.store_data(["cache", "a"], 1, None)
        assert client.ttls["test:cache#a#"] is None

    def test_stale_records_remain_readable(self, driver):
        expiration = time.time() - 60
        driver.store_data(["cache", "a"], {"return": "stale"}, expiration)
        assert driver.get_data(["cache", "a"]) == Record({"return": "stale"}, expiration)

    def test_long_dead_records_are_deleted(self, driver, client):
        driver.store_data(["cache", "a"], 1, None)
        assert driver.store_data(["cache", "a"], 2, time.time() - 3600) is True
        assert client.keys() == []

    def test_clear_subtree(self, driver):
        driver.store_data(["cache", "a"], 1, None)
        driver.store_data(["cache", "a", "b"], 2, None)
        driver.store_data(["cache", "ab"], 3, None)

        assert driver.clear(["cache", "a"]) is True
        assert driver.get_data(["cache", "a"]) is None
        assert driver.get_data(["cache", "a", "b"]) is None
        assert driver.get_data(["cache", "ab"]) is not None

    def test_clear_escapes_glob_characters(self, driver):
        driver.store_data(["cache", "a*"], 1, None)
        driver.store_data(["cache", "abc"], 2, None)
        driver.clear(["cache", "a*"])
        assert driver.get_data(["cache", "a*"]) is None
        assert driver.get_data(["cache", "abc"]) is not None

    def test_clear_everything_keeps_other_prefixes(self, driver, client):
        other = RedisDriver(client, prefix="other")
        driver.store_data(["cache", "a"], 1, None)
        other.store_data(["cache", "a"], 1, None)

        assert driver.clear() is True
        assert client.keys() == ["other:cache#a#"]

    def test_purge_is_a_no_op(self, driver):
        assert driver.purge() is True

    def test_undecodable_value_is_a_miss(self, driver, client):
        client.set("test:cache#a#", b"garbage")
        assert driver.get_data(["cache", "a"]) is None

    def test_json_encoder(self, client):
        driver = RedisDriver(client, encoder="json")
        driver.store_data(["cache", "a"], {"return": [1, 2]}, None)
        assert driver.get_data(["cache", "a"]) == Record({"return": [1, 2]}, None)
