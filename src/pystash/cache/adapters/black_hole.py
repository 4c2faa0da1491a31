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
"""Driver that accepts everything and remembers nothing."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pystash.cache.record import Record


class BlackHoleDriver:
    """Every write succeeds, every read misses. Handy for switching caching off
    in one environment while keeping the calling code unchanged."""

    def get_data(self, key: Sequence[str]) -> Record | None:
        return None

    def store_data(self, key: Sequence[str], data: Any, expiration: float | None) -> bool:
        return True

    def clear(self, key: Sequence[str] | None = None) -> bool:
        return True

    def purge(self) -> bool:
        return True
