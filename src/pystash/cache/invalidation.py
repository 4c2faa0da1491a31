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
"""Invalidation policies: what ``Item.get`` does with stale data.

Each policy is its own frozen dataclass carrying only the arguments it
understands. The integer codes (and ``[code, arg, arg2]`` lists) accepted by
older call sites are converted with :meth:`InvalidationPolicy.coerce`.
"""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar


class Invalidation(IntEnum):
    NONE = 0
    """Stale data is a plain miss."""

    OLD = 1
    """Serve stale data while another item regenerates it."""

    VALUE = 2
    """Serve a caller-supplied value while another item regenerates."""

    SLEEP = 3
    """Wait for the regenerating item, then re-check."""

    PRECOMPUTE = 4
    """Elect one caller to regenerate shortly before real expiration."""


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def _numeric(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    return float(value)


@dataclass(frozen=True)
class InvalidationPolicy:
    method: ClassVar[Invalidation] = Invalidation.NONE

    @classmethod
    def coerce(cls, policy: Any = None, arg: Any = MISSING, arg2: Any = MISSING) -> InvalidationPolicy | None:
        """Build a policy from any accepted spelling.

        ``None`` means "use the item's default". Unknown codes become
        :class:`NonePolicy`.
        """
        if policy is None:
            return None
        if isinstance(policy, InvalidationPolicy):
            return policy
        if isinstance(policy, Sequence) and not isinstance(policy, str):
            parts = list(policy) + [MISSING, MISSING, MISSING]
            return cls.coerce(parts[0] if parts[0] is not MISSING else Invalidation.NONE, parts[1], parts[2])
        if isinstance(policy, str):
            try:
                policy = Invalidation[policy.upper()]
            except KeyError:
                return NonePolicy()

        try:
            method = Invalidation(policy)
        except (ValueError, TypeError):
            return NonePolicy()

        if method is Invalidation.OLD:
            return OldPolicy()
        if method is Invalidation.VALUE:
            return ValuePolicy(arg)
        if method is Invalidation.SLEEP:
            attempts = _numeric(arg2)
            return SleepPolicy(_numeric(arg), int(attempts) if attempts is not None else None)
        if method is Invalidation.PRECOMPUTE:
            return PrecomputePolicy(_numeric(arg))
        return NonePolicy()


@dataclass(frozen=True)
class NonePolicy(InvalidationPolicy):
    method: ClassVar[Invalidation] = Invalidation.NONE


@dataclass(frozen=True)
class OldPolicy(InvalidationPolicy):
    method: ClassVar[Invalidation] = Invalidation.OLD


@dataclass(frozen=True)
class ValuePolicy(InvalidationPolicy):
    """``ValuePolicy()`` without a fallback behaves as a miss while locked."""

    method: ClassVar[Invalidation] = Invalidation.VALUE
    fallback: Any = MISSING

    @property
    def has_fallback(self) -> bool:
        return self.fallback is not MISSING


@dataclass(frozen=True)
class SleepPolicy(InvalidationPolicy):
    """``None`` fields take the context defaults (500 ms, one attempt)."""

    method: ClassVar[Invalidation] = Invalidation.SLEEP
    sleep_ms: float | None = None
    attempts: int | None = None


@dataclass(frozen=True)
class PrecomputePolicy(InvalidationPolicy):
    """``lead_time`` in seconds; ``None`` takes the context default (40 s)."""

    method: ClassVar[Invalidation] = Invalidation.PRECOMPUTE
    lead_time: float | None = None
