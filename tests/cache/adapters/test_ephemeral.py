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
"""Tests for EphemeralDriver and BlackHoleDriver."""

import threading
import time

import pytest

from pystash.cache.adapters.black_hole import BlackHoleDriver
from pystash.cache.adapters.ephemeral import EphemeralDriver
from pystash.cache.ports.outbound import Driver
from pystash.cache.record import Record
from pystash.kernel.exceptions import InvalidArgumentException


class TestEphemeralDriver:
    def test_protocol_compliance(self):
        assert isinstance(EphemeralDriver(), Driver)

    def test_store_and_get(self):
        driver = EphemeralDriver()
        assert driver.store_data(["cache", "a"], {"return": 1}, 10.0) is True
        assert driver.get_data(["cache", "a"]) == Record({"return": 1}, 10.0)

    def test_get_missing(self):
        assert EphemeralDriver().get_data(["cache", "nope"]) is None

    def test_clear_subtree(self):
        driver = EphemeralDriver()
        driver.store_data(["cache", "a"], 1, None)
        driver.store_data(["cache", "a", "b"], 2, None)
        driver.store_data(["cache", "ab"], 3, None)

        assert driver.clear(["cache", "a"]) is True
        assert driver.get_data(["cache", "a"]) is None
        assert driver.get_data(["cache", "a", "b"]) is None
        assert driver.get_data(["cache", "ab"]) is not None

    def test_clear_everything(self):
        driver = EphemeralDriver()
        driver.store_data(["cache", "a"], 1, None)
        driver.store_data(["sp", "a"], True, None)
        assert driver.clear() is True
        assert len(driver) == 0

    def test_clear_absent_subtree(self):
        assert EphemeralDriver().clear(["cache", "missing"]) is True

    def test_purge_drops_expired(self):
        driver = EphemeralDriver()
        driver.store_data(["cache", "old"], 1, time.time() - 10)
        driver.store_data(["cache", "new"], 2, time.time() + 60)
        driver.store_data(["cache", "forever"], 3, None)
        assert driver.purge() is True
        assert driver.get_data(["cache", "old"]) is None
        assert len(driver) == 2

    def test_max_items_evicts_oldest(self):
        driver = EphemeralDriver(max_items=2)
        driver.store_data(["cache", "a"], 1, None)
        driver.store_data(["cache", "b"], 2, None)
        driver.store_data(["cache", "c"], 3, None)
        assert driver.get_data(["cache", "a"]) is None
        assert driver.get_data(["cache", "c"]) is not None
        assert len(driver) == 2

    def test_overwrite_does_not_evict(self):
        driver = EphemeralDriver(max_items=2)
        driver.store_data(["cache", "a"], 1, None)
        driver.store_data(["cache", "b"], 2, None)
        driver.store_data(["cache", "a"], 10, None)
        assert driver.get_data(["cache", "b"]) is not None
        assert driver.get_data(["cache", "a"]).data == 10

    @pytest.mark.parametrize("max_items", [-1, 1.5, "10", True])
    def test_invalid_max_items(self, max_items):
        with pytest.raises(InvalidArgumentException, match="non-negative"):
            EphemeralDriver(max_items=max_items)

    def test_zero_max_items_is_unbounded(self):
        driver = EphemeralDriver(max_items=0)
        for i in range(10):
            driver.store_data(["cache", str(i)], i, None)
        assert len(driver) == 10
        assert driver.get_stats()["max_items"] is None

    def test_stats(self):
        driver = EphemeralDriver(max_items=5)
        driver.store_data(["cache", "a"], 1, None)
        assert driver.get_stats() == {"size": 1, "type": "ephemeral", "max_items": 5}

    def test_concurrent_writers(self):
        driver = EphemeralDriver(max_items=50)

        def write(offset):
            for i in range(200):
                driver.store_data(["cache", str(offset), str(i)], i, None)

        threads = [threading.Thread(target=write, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(driver) == 50


class TestBlackHoleDriver:
    def test_protocol_compliance(self):
        assert isinstance(BlackHoleDriver(), Driver)

    def test_accepts_everything_and_returns_nothing(self):
        driver = BlackHoleDriver()
        assert driver.store_data(["cache", "a"], 1, None) is True
        assert driver.get_data(["cache", "a"]) is None
        assert driver.clear(["cache", "a"]) is True
        assert driver.clear() is True
        assert driver.purge() is True
