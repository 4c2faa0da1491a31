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
"""In-process driver."""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence
from typing import Any

from pystash.cache.keys import key_index
from pystash.cache.record import Record
from pystash.kernel.exceptions import InvalidArgumentException


class EphemeralDriver:
    """Dictionary-backed driver that lives as long as the process.

    Suitable for development, testing and single-process applications, and
    as the fast front layer of a CompositeDriver. With ``max_items`` set, the
    oldest entries are evicted first once the limit is reached.
    """

    def __init__(self, max_items: int = 0) -> None:
        if not isinstance(max_items, int) or isinstance(max_items, bool) or max_items < 0:
            raise InvalidArgumentException(
                "max_items must be a non-negative integer.", context={"max_items": max_items}
            )
        self._max_items = max_items
        self._store: dict[str, Record] = {}
        self._lock = threading.RLock()

    def get_data(self, key: Sequence[str]) -> Record | None:
        with self._lock:
            return self._store.get(key_index(key))

    def store_data(self, key: Sequence[str], data: Any, expiration: float | None) -> bool:
        index = key_index(key)
        with self._lock:
            if self._max_items and index not in self._store:
                while len(self._store) >= self._max_items:
                    del self._store[next(iter(self._store))]
            self._store[index] = Record(data, expiration)
        return True

    def clear(self, key: Sequence[str] | None = None) -> bool:
        with self._lock:
            if not key:
                self._store.clear()
                return True
            prefix = key_index(key)
            for index in [i for i in self._store if i.startswith(prefix)]:
                del self._store[index]
        return True

    def purge(self) -> bool:
        now = time.time()
        with self._lock:
            expired = [i for i, r in self._store.items() if r.expiration is not None and r.expiration <= now]
            for index in expired:
                del self._store[index]
        return True

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {"size": len(self._store), "type": "ephemeral", "max_items": self._max_items or None}

    def __len__(self) -> int:
        return len(self._store)
