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
"""The envelope drivers store and return."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

RETURN_FIELD = "return"
CREATED_FIELD = "created_on"


def make_payload(value: Any, created_on: float) -> dict[str, Any]:
    """Data section written by ``Item.set``."""
    return {RETURN_FIELD: value, CREATED_FIELD: created_on}


@dataclass(frozen=True)
class Record:
    """What a driver returns for a key: the stored data plus its expiration.

    ``expiration`` is a unix timestamp. A record without one is treated as
    already expired.
    """

    data: Any
    expiration: float | None = None

    @classmethod
    def from_driver(cls, raw: Any) -> Record | None:
        """Coerce a driver result, treating anything unrecognised as absent."""
        if isinstance(raw, Record):
            return raw
        if isinstance(raw, Mapping) and "data" in raw:
            return cls(raw["data"], raw.get("expiration"))
        return None

    def ttl(self, now: float) -> float:
        if self.expiration is None:
            return float("-inf")
        return self.expiration - now

    def is_expired(self, now: float) -> bool:
        return self.ttl(now) <= 0

    @property
    def value(self) -> Any:
        if isinstance(self.data, Mapping):
            return self.data.get(RETURN_FIELD)
        return None

    @property
    def created_on(self) -> float | None:
        if isinstance(self.data, Mapping):
            return self.data.get(CREATED_FIELD)
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "expiration": self.expiration}
