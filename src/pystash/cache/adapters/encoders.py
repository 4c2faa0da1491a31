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
"""Byte encoders for drivers that persist outside the process."""

from __future__ import annotations

import json
import pickle
from typing import Any, Protocol, runtime_checkable

from pystash.kernel.exceptions import InvalidArgumentException


@runtime_checkable
class Encoder(Protocol):
    def encode(self, value: Any) -> bytes: ...

    def decode(self, raw: bytes) -> Any: ...


class PickleEncoder:
    """Round-trips any picklable value. Only read caches you trust."""

    def encode(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def decode(self, raw: bytes) -> Any:
        return pickle.loads(raw)


class JsonEncoder:
    """JSON-compatible values only; tuples come back as lists."""

    def encode(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":")).encode("utf-8")

    def decode(self, raw: bytes) -> Any:
        return json.loads(raw)


_ENCODERS: dict[str, type[PickleEncoder] | type[JsonEncoder]] = {
    "pickle": PickleEncoder,
    "json": JsonEncoder,
}


def resolve_encoder(encoder: Encoder | str | None) -> Encoder:
    """Accept an encoder instance, a registered name, or ``None`` (pickle)."""
    if encoder is None:
        return PickleEncoder()
    if isinstance(encoder, str):
        try:
            return _ENCODERS[encoder]()
        except KeyError:
            raise InvalidArgumentException(
                f"Unknown encoder '{encoder}'", context={"available": sorted(_ENCODERS)}
            ) from None
    return encoder
