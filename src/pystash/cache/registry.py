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
"""Driver registry: driver names to factories."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from pystash.cache.adapters.black_hole import BlackHoleDriver
from pystash.cache.adapters.composite import CompositeDriver
from pystash.cache.adapters.ephemeral import EphemeralDriver
from pystash.cache.adapters.filesystem import FileSystemDriver
from pystash.cache.adapters.redis import RedisDriver
from pystash.cache.adapters.sqlite import SqliteDriver
from pystash.cache.ports.outbound import Driver
from pystash.config.auto import AutoConfiguration
from pystash.kernel.exceptions import (
    DriverUnavailableException,
    InvalidArgumentException,
    UnknownDriverException,
)

DriverFactory = Callable[..., Driver]


class DriverRegistry:
    """Builds drivers by name.

    Factories receive the driver's options as keyword arguments and either
    return a driver or raise :class:`DriverUnavailableException` when the
    backend cannot be used in this environment.
    """

    def __init__(self) -> None:
        self._factories: dict[str, DriverFactory] = {}

    def register(self, name: str, factory: DriverFactory) -> None:
        self._factories[name.lower()] = factory

    def unregister(self, name: str) -> None:
        self._factories.pop(name.lower(), None)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._factories

    def create(self, name: str, **options: Any) -> Driver:
        factory = self._factories.get(name.lower())
        if factory is None:
            raise UnknownDriverException(
                f"Unknown cache driver '{name}'", context={"available": self.names()}
            )
        try:
            inspect.signature(factory).bind(**options)
        except TypeError as exc:
            raise InvalidArgumentException(
                f"Invalid options for cache driver '{name}': {exc}", context={"options": sorted(options)}
            ) from exc
        return factory(**options)


def _redis_factory(url: str | None = None, client: Any = None, **options: Any) -> Driver:
    if client is not None:
        return RedisDriver(client, **options)
    if not AutoConfiguration.is_available("redis"):
        raise DriverUnavailableException("The 'redis' package is not installed")
    if not url:
        raise DriverUnavailableException("No Redis URL configured", code="REDIS_URL_MISSING")
    return RedisDriver.from_url(url, **options)


def default_registry() -> DriverRegistry:
    """A registry with every bundled driver."""
    registry = DriverRegistry()
    registry.register("ephemeral", EphemeralDriver)
    registry.register("blackhole", BlackHoleDriver)
    registry.register("filesystem", FileSystemDriver)
    registry.register("sqlite", SqliteDriver)
    registry.register("redis", _redis_factory)

    def composite(drivers: list[Any] | None = None, **layer_options: dict[str, Any]) -> Driver:
        """Layers given by name are built from this registry, with per-layer
        options taken from keyword arguments of the same name."""
        layers = [
            registry.create(layer, **layer_options.get(layer, {})) if isinstance(layer, str) else layer
            for layer in drivers or []
        ]
        return CompositeDriver(layers)

    registry.register("composite", composite)
    return registry
