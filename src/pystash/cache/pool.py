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
"""Pool: binds a driver, a namespace and a context, and hands out Items."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pystash.cache.adapters.ephemeral import EphemeralDriver
from pystash.cache.context import CacheContext
from pystash.cache.expiration import TTL
from pystash.cache.invalidation import MISSING, InvalidationPolicy, PrecomputePolicy
from pystash.cache.item import Item
from pystash.cache.keys import DATA_ROOT, STAMPEDE_ROOT, parse_key
from pystash.cache.ports.outbound import Driver
from pystash.kernel.exceptions import InvalidArgumentException, InvalidKeyException

DEFAULT_NAMESPACE = "default"

CacheKeyLike = str | Sequence[str]


class Pool:
    """Entry point for application code.

    Pools with different namespaces can share one driver without seeing
    each other's entries. When no driver is given the pool lives in process
    memory only.
    """

    def __init__(
        self,
        driver: Driver | None = None,
        *,
        context: CacheContext | None = None,
        namespace: str | None = None,
        logger: Any = None,
    ) -> None:
        self._driver: Driver = driver if driver is not None else EphemeralDriver()
        self._context = context or CacheContext()
        self._logger = logger
        self._namespace: str | None = None
        self._policy: InvalidationPolicy = PrecomputePolicy()
        self._deferred: list[tuple[Item, Any, TTL]] = []
        self._is_disabled = False
        self.set_namespace(namespace)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def get_item(self, key: CacheKeyLike) -> Item:
        segments = parse_key(key)
        if any(segment == "" for segment in segments):
            raise InvalidKeyException(
                "Invalid or empty node passed to get_item.",
                code="KEY_EMPTY_NODE",
                context={"key": repr(key)},
            )

        item = Item(
            self._driver,
            self._context,
            segments,
            namespace=self._namespace or DEFAULT_NAMESPACE,
            logger=self._logger,
            policy=self._policy,
        )
        if self._is_disabled:
            item.disable()
        return item

    def get_items(self, keys: Iterable[CacheKeyLike]) -> dict[str, Item]:
        """Items keyed by their display key, in request order."""
        items: dict[str, Item] = {}
        for key in keys:
            item = self.get_item(key)
            items[item.get_key() or ""] = item
        return items

    def has_item(self, key: CacheKeyLike) -> bool:
        return self.get_item(key).is_hit()

    def delete_item(self, key: CacheKeyLike) -> bool:
        return self.get_item(key).clear()

    def delete_items(self, keys: Iterable[CacheKeyLike]) -> bool:
        results = True
        for key in keys:
            results = self.delete_item(key) and results
        return results

    def save(self, item: Item, value: Any, ttl: TTL = None) -> bool:
        return item.set(value, ttl)

    def save_deferred(self, item: Item, value: Any, ttl: TTL = None) -> bool:
        """Queue a write until :meth:`commit`.

        Returns ``False`` without queueing when the pool is disabled.
        """
        if self.is_disabled():
            return False
        self._deferred.append((item, value, ttl))
        return True

    def commit(self) -> bool:
        """Write every deferred item; ``True`` only if all writes succeeded."""
        deferred, self._deferred = self._deferred, []
        results = True
        for item, value, ttl in deferred:
            results = self.save(item, value, ttl) and results
        return results

    # ------------------------------------------------------------------
    # Whole-pool maintenance
    # ------------------------------------------------------------------

    def clear(self) -> bool:
        """Drop every entry of this pool (the whole driver if no namespace)."""
        if self.is_disabled():
            return False

        try:
            if self._namespace is not None:
                namespace = self._namespace.lower()
                results = self._driver.clear([DATA_ROOT, namespace])
                results = self._driver.clear([STAMPEDE_ROOT, namespace]) and results
            else:
                results = self._driver.clear()
        except Exception as exc:
            self._is_disabled = True
            self._log_exception("Flushing cache pool caused exception.", exc)
            return False

        return bool(results)

    def purge(self) -> bool:
        """Ask the driver to drop expired entries."""
        if self.is_disabled():
            return False

        try:
            results = self._driver.purge()
        except Exception as exc:
            self._is_disabled = True
            self._log_exception("Purging cache pool caused exception.", exc)
            return False

        return bool(results)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def driver(self) -> Driver:
        return self._driver

    def set_driver(self, driver: Driver) -> None:
        self._driver = driver

    @property
    def context(self) -> CacheContext:
        return self._context

    @property
    def namespace(self) -> str | None:
        return self._namespace

    def set_namespace(self, namespace: str | None = None) -> None:
        if namespace is not None and not namespace.isalnum():
            raise InvalidArgumentException(
                "Namespace must be alphanumeric.", context={"namespace": namespace}
            )
        self._namespace = namespace

    def set_logger(self, logger: Any) -> None:
        self._logger = logger

    def set_invalidation_method(self, policy: Any = None, arg: Any = MISSING, arg2: Any = MISSING) -> None:
        """Default policy for items created by this pool."""
        self._policy = InvalidationPolicy.coerce(policy, arg, arg2) or PrecomputePolicy()

    def disable(self) -> None:
        self._is_disabled = True

    def is_disabled(self) -> bool:
        return self._is_disabled or self._context.is_disabled

    def _log_exception(self, message: str, exception: Exception) -> bool:
        if self._logger is None:
            return False
        self._logger.critical(message, exception=exception, namespace=self._namespace)
        return True
