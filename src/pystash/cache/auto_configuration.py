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
"""Cache subsystem auto-configuration."""

from __future__ import annotations

from typing import Any

from pystash.cache.context import CacheContext
from pystash.cache.pool import Pool
from pystash.cache.ports.outbound import Driver
from pystash.cache.registry import DriverRegistry, default_registry
from pystash.config.auto import AutoConfiguration
from pystash.config.properties.cache import CacheProperties
from pystash.core.config import Config
from pystash.logging.port import LoggingPort
from pystash.logging.structlog_adapter import StructlogAdapter


class CacheAutoConfiguration:
    """Builds a ready-to-use :class:`Pool` from ``pystash.cache.*`` settings."""

    def __init__(self, registry: DriverRegistry | None = None, logging: LoggingPort | None = None) -> None:
        self._registry = registry or default_registry()
        self._logging: LoggingPort = logging or StructlogAdapter()

    def properties(self, config: Config) -> CacheProperties:
        return config.bind(CacheProperties)

    def driver(self, properties: CacheProperties) -> Driver:
        name = AutoConfiguration.detect_cache_driver(properties)
        options: dict[str, Any] = properties.driver_options(name)
        if name == "composite":
            for layer in options.get("drivers", []):
                options.setdefault(layer, properties.driver_options(layer))
        return self._registry.create(name, **options)

    def pool(self, config: Config, **context_overrides: Any) -> Pool:
        self._logging.configure(config)
        properties = self.properties(config)
        pool = Pool(
            self.driver(properties),
            context=CacheContext.from_properties(properties, **context_overrides),
            namespace=properties.namespace,
            logger=self._logging.get_logger("pystash.cache"),
        )
        pool.set_invalidation_method(properties.invalidation)
        return pool
