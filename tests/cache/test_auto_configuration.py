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
"""Tests for building pools from configuration."""

import io
import logging

import pytest

from pystash.cache.adapters.composite import CompositeDriver
from pystash.cache.adapters.ephemeral import EphemeralDriver
from pystash.cache.adapters.filesystem import FileSystemDriver
from pystash.cache.adapters.sqlite import SqliteDriver
from pystash.cache.auto_configuration import CacheAutoConfiguration
from pystash.cache.invalidation import OldPolicy
from pystash.config.auto import AutoConfiguration
from pystash.config.properties.cache import CacheProperties
from pystash.core.config import Config
from pystash.kernel.exceptions import UnknownDriverException
from pystash.logging.structlog_adapter import StructlogAdapter


class RecordingLogging:
    def __init__(self) -> None:
        self.requested: list[str] = []
        self.configured: list[Config] = []

    def configure(self, config) -> None:
        self.configured.append(config)

    def get_logger(self, name):
        self.requested.append(name)
        return None

    def set_level(self, name, level) -> None:
        pass


def cache_config(**cache) -> Config:
    return Config({"pystash": {"cache": cache}})


class TestDriverDetection:
    def test_auto_without_redis_url_is_ephemeral(self):
        assert AutoConfiguration.detect_cache_driver(CacheProperties()) == "ephemeral"

    def test_auto_with_redis_url(self, monkeypatch):
        monkeypatch.setattr(AutoConfiguration, "is_available", staticmethod(lambda name: True))
        properties = CacheProperties(redis={"url": "redis://localhost:6379/0"})
        assert AutoConfiguration.detect_cache_driver(properties) == "redis"

    def test_auto_with_url_but_no_package(self, monkeypatch):
        monkeypatch.setattr(AutoConfiguration, "is_available", staticmethod(lambda name: False))
        properties = CacheProperties(redis={"url": "redis://localhost:6379/0"})
        assert AutoConfiguration.detect_cache_driver(properties) == "ephemeral"

    def test_explicit_driver_wins(self):
        assert AutoConfiguration.detect_cache_driver(CacheProperties(driver="sqlite")) == "sqlite"

    def test_is_available(self):
        assert AutoConfiguration.is_available("json") is True
        assert AutoConfiguration.is_available("surely_not_a_real_module_xyz") is False


class TestCacheAutoConfiguration:
    def test_defaults(self):
        pool = CacheAutoConfiguration().pool(Config({}))
        assert isinstance(pool.driver, EphemeralDriver)
        assert pool.namespace is None
        assert pool.context.default_ttl == 432000
        assert not pool.is_disabled()

    def test_library_defaults_file(self, tmp_path):
        pool = CacheAutoConfiguration().pool(Config.from_file(tmp_path / "missing.yaml"))
        assert isinstance(pool.driver, EphemeralDriver)
        assert pool.context.sleep_time_ms == 500

    def test_settings_reach_pool_and_context(self):
        config = cache_config(
            driver="sqlite",
            namespace="shop",
            default_ttl=60,
            stampede_ttl=5,
            precompute_time=10,
            sleep_time=100,
            sleep_attempts=3,
            invalidation="old",
        )
        pool = CacheAutoConfiguration().pool(config)
        assert isinstance(pool.driver, SqliteDriver)
        assert pool.namespace == "shop"
        assert pool.context.default_ttl == 60
        assert pool.context.stampede_ttl == 5
        assert pool.context.precompute_time == 10
        assert pool.context.sleep_time_ms == 100
        assert pool.context.sleep_attempts == 3
        assert pool.get_item("a")._policy == OldPolicy()

    def test_driver_options(self, tmp_path):
        config = cache_config(driver="filesystem", filesystem={"path": str(tmp_path), "dir_split": 1})
        pool = CacheAutoConfiguration().pool(config)
        assert isinstance(pool.driver, FileSystemDriver)
        assert pool.driver.root == tmp_path

    def test_composite_layers_get_their_options(self, tmp_path):
        config = cache_config(
            driver="composite",
            composite={"drivers": ["ephemeral", "filesystem"]},
            ephemeral={"max_items": 100},
            filesystem={"path": str(tmp_path)},
        )
        pool = CacheAutoConfiguration().pool(config)
        assert isinstance(pool.driver, CompositeDriver)
        fast, slow = pool.driver.drivers
        assert fast.get_stats()["max_items"] == 100
        assert slow.root == tmp_path

    def test_disabled_through_environment(self, monkeypatch):
        monkeypatch.setenv("PYSTASH_CACHE_ENABLED", "false")
        pool = CacheAutoConfiguration().pool(Config({}))
        assert pool.is_disabled()
        assert pool.get_item("a").set("v", 60) is False

    def test_context_overrides(self):
        def no_sleep(seconds):
            pass

        pool = CacheAutoConfiguration().pool(Config({}), sleep=no_sleep)
        assert pool.context.sleep is no_sleep

    def test_pool_logger_comes_from_logging_port(self):
        logging_port = RecordingLogging()
        CacheAutoConfiguration(logging=logging_port).pool(Config({}))
        assert logging_port.requested == ["pystash.cache"]

    def test_unknown_driver(self):
        with pytest.raises(UnknownDriverException):
            CacheAutoConfiguration().pool(cache_config(driver="memcache"))

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            CacheAutoConfiguration().pool(cache_config(default_ttl=-5))

    def test_logging_is_configured_before_the_logger_is_requested(self):
        logging_port = RecordingLogging()
        config = Config({"pystash": {"logging": {"format": "json"}}})
        CacheAutoConfiguration(logging=logging_port).pool(config)
        assert logging_port.configured == [config]

    def test_logging_settings_reach_the_library_logger(self):
        config = Config({"pystash": {"logging": {"level": {"root": "ERROR"}}}})
        CacheAutoConfiguration(logging=StructlogAdapter(stream=io.StringIO())).pool(config)
        assert logging.getLogger("pystash").level == logging.ERROR
