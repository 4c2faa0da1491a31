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
"""Caching decorators for plain functions."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from pystash.cache.expiration import TTL
from pystash.cache.pool import Pool

F = TypeVar("F", bound=Callable[..., Any])


def _resolve_key(func: Callable[..., Any], key: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    bound = inspect.signature(func).bind(*args, **kwargs)
    bound.apply_defaults()
    return key.format(**bound.arguments)


def cached(
    pool: Pool,
    key: str,
    ttl: TTL = None,
    policy: Any = None,
    lock: bool = True,
) -> Callable[[F], F]:
    """Serve the return value from *pool*, computing it on a miss.

    The `key` parameter supports format-string interpolation with function
    argument names: ``key="users/{user_id}/profile"`` expands ``{user_id}``
    from the call. With ``lock=True`` a miss claims the stampede flag while
    the function runs, so concurrent callers follow *policy* instead of
    recomputing too.

    Args:
        pool: Pool to read from and write to.
        key: Key template with {param} placeholders.
        ttl: Lifetime of stored results; the pool default when omitted.
        policy: Invalidation policy for the read.
        lock: Whether a miss takes the stampede flag.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            item = pool.get_item(_resolve_key(func, key, args, kwargs))
            value = item.get(policy)
            if item.is_hit():
                return value

            with item:
                if lock:
                    item.lock()
                result = func(*args, **kwargs)
                item.set(result, ttl)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def cache_put(pool: Pool, key: str, ttl: TTL = None) -> Callable[[F], F]:
    """Always run the function and store its result under *key*."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = func(*args, **kwargs)
            pool.get_item(_resolve_key(func, key, args, kwargs)).set(result, ttl)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def cache_evict(pool: Pool, key: str = "", all_entries: bool = False) -> Callable[[F], F]:
    """Clear a key's subtree (or the whole pool) after the function returns.

    Args:
        pool: Pool to clear.
        key: Key template with {param} placeholders. Ignored when *all_entries* is ``True``.
        all_entries: When ``True``, clear the entire pool after execution.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = func(*args, **kwargs)
            if all_entries:
                pool.clear()
            else:
                pool.delete_item(_resolve_key(func, key, args, kwargs))
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
