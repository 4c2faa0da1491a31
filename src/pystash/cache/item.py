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
"""Per-request cache handle and the invalidation state machine."""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from datetime import datetime, timezone
from types import TracebackType
from typing import Any

from pystash.cache.context import CacheContext
from pystash.cache.expiration import TTL, compute_expiration
from pystash.cache.invalidation import (
    MISSING,
    InvalidationPolicy,
    NonePolicy,
    OldPolicy,
    PrecomputePolicy,
    SleepPolicy,
    ValuePolicy,
)
from pystash.cache.keys import CacheKey
from pystash.cache.ports.outbound import Driver
from pystash.cache.record import Record, make_payload
from pystash.kernel.exceptions import LogicException

_WAIT = object()


class Item:
    """A single cache entry as seen by one caller.

    Items are cheap, short-lived and not shared between threads. All backend
    failures are absorbed here: the error is logged (when a logger is
    attached), the item disables itself, and the call returns the safe
    default (``None`` for reads, ``False`` for writes).

    Typical regeneration flow::

        item = pool.get_item("users/42/profile")
        profile = item.get(OldPolicy())
        if item.is_miss():
            with item:
                item.lock()
                profile = load_profile(42)
                item.set(profile, 3600)
    """

    def __init__(
        self,
        driver: Driver,
        context: CacheContext | None = None,
        key: str | Sequence[str] | None = None,
        *,
        namespace: str | None = None,
        logger: Any = None,
        policy: InvalidationPolicy | None = None,
    ) -> None:
        self._driver = driver
        self._context = context or CacheContext()
        self._logger = logger
        self._policy: InvalidationPolicy = policy or NonePolicy()
        self._key: CacheKey | None = None
        self._is_hit: bool | None = None
        self._stampede_running = False
        self._cache_enabled = True
        if key is not None:
            self.set_key(key, namespace)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def set_key(self, key: str | Sequence[str], namespace: str | None = None) -> None:
        if self._key is not None:
            raise LogicException("Item key is already set", context={"key": str(self._key)})
        self._key = CacheKey.parse(key, namespace)

    def get_key(self) -> str | None:
        return str(self._key) if self._key is not None else None

    def set_logger(self, logger: Any) -> None:
        self._logger = logger

    def set_invalidation_method(self, policy: Any = None, arg: Any = MISSING, arg2: Any = MISSING) -> None:
        """Default policy for ``get()`` calls made without one."""
        self._policy = InvalidationPolicy.coerce(policy, arg, arg2) or NonePolicy()

    @property
    def stampede_running(self) -> bool:
        return self._stampede_running

    # ------------------------------------------------------------------
    # Switches
    # ------------------------------------------------------------------

    def disable(self) -> bool:
        """Stop all IO for the rest of this item's life."""
        self._cache_enabled = False
        return True

    def is_disabled(self) -> bool:
        return not self._cache_enabled or self._context.is_disabled

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, policy: Any = None, arg: Any = MISSING, arg2: Any = MISSING) -> Any:
        """Return the cached value, or ``None``.

        ``None`` is also a valid cached value; use :meth:`is_miss` to tell a
        miss from a stored ``None``. *policy* may be an
        :class:`InvalidationPolicy`, an :class:`Invalidation` code followed by
        its arguments, or a ``[code, arg, arg2]`` list.
        """
        try:
            value = self._execute_get(policy, arg, arg2)
        except Exception as exc:
            self._is_hit = False
            self._log_exception("Retrieving from cache caused exception.", exc)
            self.disable()
            value = None
        self._context.stats.record(bool(self._is_hit))
        return value

    def _execute_get(self, policy: Any, arg: Any, arg2: Any) -> Any:
        self._is_hit = False

        if self.is_disabled() or self._key is None:
            return None

        invalidation = InvalidationPolicy.coerce(policy, arg, arg2) or self._policy

        if isinstance(invalidation, SleepPolicy):
            sleep_ms = (
                invalidation.sleep_ms if invalidation.sleep_ms is not None else self._context.sleep_time_ms
            )
            attempts = (
                invalidation.attempts if invalidation.attempts is not None else self._context.sleep_attempts
            )
        else:
            sleep_ms, attempts = 0.0, 0

        while True:
            outcome = self._evaluate(invalidation)
            if outcome is not _WAIT:
                return outcome
            if attempts <= 0:
                self._is_hit = False
                return None
            self._context.sleep(sleep_ms / 1000)
            attempts -= 1

    def _evaluate(self, policy: InvalidationPolicy) -> Any:
        """One pass of the state machine against a freshly fetched record.

        Sets ``_is_hit`` and returns the value to hand back, or ``_WAIT``
        when a SLEEP policy should back off and re-check.
        """
        record = self._fetch_record()
        now = self._context.now()

        if record is not None and (ttl := record.ttl(now)) > 0:
            self._is_hit = True
            if isinstance(policy, PrecomputePolicy):
                lead_time = policy.lead_time if policy.lead_time is not None else self._context.precompute_time
                if ttl < lead_time:
                    # still valid; one caller misses early to refresh it
                    self._is_hit = self._stampede_flag_active()
            return record.value

        self._is_hit = False
        if isinstance(policy, NonePolicy):
            return None

        if not self._stampede_flag_active():
            return None

        if isinstance(policy, OldPolicy):
            if record is None:
                return None
            self._is_hit = True
            return record.value

        if isinstance(policy, ValuePolicy):
            if not policy.has_fallback:
                return None
            self._is_hit = True
            return policy.fallback

        if isinstance(policy, SleepPolicy):
            return _WAIT

        return None

    def is_miss(self) -> bool:
        """True when the last ``get()`` did not produce usable data.

        Runs a ``get()`` with the default policy if none has happened yet.
        """
        if self._is_hit is None:
            self.get()

        if self.is_disabled():
            return True

        return not self._is_hit

    def is_hit(self) -> bool:
        return not self.is_miss()

    def get_creation(self) -> datetime | None:
        """When the stored value was written, or ``None`` if nothing is stored."""
        record = self._safe_fetch()
        created_on = record.created_on if record is not None else None
        if created_on is None:
            return None
        return datetime.fromtimestamp(created_on, tz=timezone.utc)

    def get_expiration(self) -> datetime | None:
        record = self._safe_fetch()
        if record is None or record.expiration is None:
            return None
        return datetime.fromtimestamp(record.expiration, tz=timezone.utc)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, value: Any, ttl: TTL = None) -> bool:
        """Store *value* for *ttl* seconds (or until a datetime).

        Without *ttl* the context default (five days) applies. If this item
        holds the stampede lock, the lock is released before writing.
        """
        try:
            return self._execute_set(value, ttl)
        except Exception as exc:
            self._log_exception("Setting value in cache caused exception.", exc)
            self.disable()
            return False

    def _execute_set(self, value: Any, ttl: TTL) -> bool:
        if self.is_disabled() or self._key is None:
            return False

        now = self._context.now()
        expiration = compute_expiration(ttl, now, self._context.default_ttl, self._context.rng)

        if self._stampede_running:
            self._driver.clear(self._key.stampede_key())
            self._stampede_running = False

        return bool(self._driver.store_data(self._key.machine_key(), make_payload(value, now), expiration))

    def extend(self, ttl: TTL = None) -> bool:
        """Re-store the current value with a new lifetime."""
        record = self._safe_fetch()
        if record is None:
            return False

        return self.set(record.value, ttl)

    def lock(self, ttl: float | None = None) -> bool:
        """Claim regeneration of this key for *ttl* seconds.

        Other items see the stampede flag and apply their invalidation
        policy. This is a best-effort hint, not mutual exclusion.
        """
        if self.is_disabled() or self._key is None:
            return False

        lifetime = ttl if isinstance(ttl, numbers.Real) and not isinstance(ttl, bool) else None
        expiration = self._context.now() + (lifetime if lifetime is not None else self._context.stampede_ttl)

        try:
            stored = bool(self._driver.store_data(self._key.stampede_key(), True, expiration))
        except Exception as exc:
            self._log_exception("Setting stampede flag caused exception.", exc)
            self.disable()
            return False

        self._stampede_running = stored
        return stored

    def release(self) -> bool:
        """Drop the stampede flag if this item still holds it."""
        if not self._stampede_running or self._key is None:
            return False

        self._stampede_running = False
        try:
            return bool(self._driver.clear(self._key.stampede_key()))
        except Exception as exc:
            self._log_exception("Releasing stampede flag caused exception.", exc)
            self.disable()
            return False

    def clear(self) -> bool:
        """Delete this entry and every entry below it."""
        try:
            if self.is_disabled() or self._key is None:
                return False
            return bool(self._driver.clear(self._key.machine_key()))
        except Exception as exc:
            self._log_exception("Clearing cache caused exception.", exc)
            self.disable()
            return False

    # ------------------------------------------------------------------
    # Scoped lock release
    # ------------------------------------------------------------------

    def __enter__(self) -> Item:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __del__(self) -> None:
        # an item dropped while holding the lock must not block others until the flag expires
        if getattr(self, "_stampede_running", False):
            self.release()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fetch_record(self) -> Record | None:
        assert self._key is not None
        return Record.from_driver(self._driver.get_data(self._key.machine_key()))

    def _safe_fetch(self) -> Record | None:
        if self.is_disabled() or self._key is None:
            return None
        try:
            return self._fetch_record()
        except Exception as exc:
            self._log_exception("Retrieving from cache caused exception.", exc)
            self.disable()
            return None

    def _stampede_flag_active(self) -> bool:
        """Another item holds an unexpired lock on this key."""
        assert self._key is not None
        flag = Record.from_driver(self._driver.get_data(self._key.stampede_key()))
        if flag is None or not flag.data:
            return False
        return flag.expiration is None or flag.expiration > self._context.now()

    def _log_exception(self, message: str, exception: Exception) -> bool:
        if self._logger is None:
            return False
        self._logger.critical(message, exception=exception, key=self.get_key())
        return True

    def __repr__(self) -> str:
        return f"Item(key={self.get_key()!r}, hit={self._is_hit!r})"
