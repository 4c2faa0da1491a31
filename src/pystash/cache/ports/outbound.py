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
"""The storage contract every cache backend satisfies."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from pystash.cache.record import Record


@runtime_checkable
class Driver(Protocol):
    """Abstract storage backend.

    Keys are machine keys (see :mod:`pystash.cache.keys`). Drivers must
    round-trip ``data`` structurally, including ``None`` and ``False``, and
    report absence by returning ``None`` rather than raising.
    """

    def get_data(self, key: Sequence[str]) -> Record | None: ...

    def store_data(self, key: Sequence[str], data: Any, expiration: float | None) -> bool: ...

    def clear(self, key: Sequence[str] | None = None) -> bool: ...

    def purge(self) -> bool: ...
