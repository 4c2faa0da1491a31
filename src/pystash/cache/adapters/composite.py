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
"""Layered driver: fast drivers in front of slow ones."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from pystash.cache.ports.outbound import Driver
from pystash.cache.record import Record
from pystash.kernel.exceptions import InvalidArgumentException

_logger = logging.getLogger(__name__)


class CompositeDriver:
    """Chains drivers ordered from fastest to slowest.

    A read walks the chain until a driver has the key, then copies the
    record into every faster driver that missed. Writes go to all drivers,
    slowest first, so a faster layer never holds data the slower ones lack.
    """

    def __init__(self, drivers: Iterable[Driver]) -> None:
        self._drivers = list(drivers)
        if not self._drivers:
            raise InvalidArgumentException("CompositeDriver needs at least one driver.")

    @property
    def drivers(self) -> list[Driver]:
        return list(self._drivers)

    def get_data(self, key: Sequence[str]) -> Record | None:
        missed: list[Driver] = []
        last = len(self._drivers) - 1
        for position, driver in enumerate(self._drivers):
            try:
                record = Record.from_driver(driver.get_data(key))
            except Exception:
                if position == last:
                    raise
                _logger.warning(
                    "Composite layer %s failed to read key, trying next layer", type(driver).__name__,
                    exc_info=True,
                )
                record = None

            if record is not None:
                self._backfill(missed, key, record)
                return record
            missed.append(driver)
        return None

    def store_data(self, key: Sequence[str], data: Any, expiration: float | None) -> bool:
        results = True
        for driver in reversed(self._drivers):
            results = bool(driver.store_data(key, data, expiration)) and results
        return results

    def clear(self, key: Sequence[str] | None = None) -> bool:
        results = True
        for driver in reversed(self._drivers):
            results = bool(driver.clear(key)) and results
        return results

    def purge(self) -> bool:
        results = True
        for driver in reversed(self._drivers):
            results = bool(driver.purge()) and results
        return results

    @staticmethod
    def _backfill(missed: list[Driver], key: Sequence[str], record: Record) -> None:
        for driver in reversed(missed):
            try:
                driver.store_data(key, record.data, record.expiration)
            except Exception:
                _logger.warning("Composite back-fill into %s failed", type(driver).__name__, exc_info=True)
