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
"""Hierarchical cache keys.

A key is a path of string segments (``users/42/profile``). Drivers never see
the raw path: they receive a *machine key*, the lower-cased segments behind a
reserved root tag (``cache`` for data, ``sp`` for stampede flags) and, for
pooled items, the pool namespace. Every machine key is a prefix of the
machine keys of its descendants, which is what subtree clearing relies on.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pystash.kernel.exceptions import InvalidKeyException

DATA_ROOT = "cache"
STAMPEDE_ROOT = "sp"
LITERAL_PREFIX = "@"

MachineKey = list[str]


def md5_hex(segment: str) -> str:
    return hashlib.md5(segment.encode("utf-8"), usedforsecurity=False).hexdigest()


def parse_key(key: str | Sequence[str]) -> list[str]:
    """Split a ``/``-separated string (or validate a sequence) into segments.

    Leading and trailing slashes are ignored, so ``"/a/b/"`` and ``"a/b"``
    name the same entry. The empty string is the root of the tree.
    """
    if isinstance(key, str):
        stripped = key.strip("/")
        return stripped.split("/") if stripped else []

    if isinstance(key, Sequence):
        segments = list(key)
        for segment in segments:
            if not isinstance(segment, str):
                raise InvalidKeyException(
                    f"Key segments must be strings, got {type(segment).__name__}",
                    code="KEY_TYPE",
                    context={"key": repr(key)},
                )
        return segments

    raise InvalidKeyException(
        f"Key must be a string or a sequence of strings, got {type(key).__name__}",
        code="KEY_TYPE",
    )


def normalize(segments: Sequence[str], hash_fn: Callable[[str], str] = md5_hex) -> list[str]:
    """Hash every segment except ``@``-prefixed ones, which stay readable."""
    return [segment if segment.startswith(LITERAL_PREFIX) else hash_fn(segment) for segment in segments]


def to_machine_key(segments: Sequence[str], root: str = DATA_ROOT) -> MachineKey:
    return [root, *(segment.lower() for segment in segments)]


def to_display_string(segments: Sequence[str]) -> str:
    return "/".join(segments)


def stampede_key(machine_key: Sequence[str]) -> MachineKey:
    """Same path, root swapped to the stampede namespace."""
    return [STAMPEDE_ROOT, *machine_key[1:]]


def key_index(machine_key: Sequence[str] | None) -> str:
    """Flatten a machine key into a string whose prefixes are its ancestors.

    Each segment is terminated by ``#``. Literal ``%`` and ``#`` inside a
    segment are percent-escaped first, so the terminator only ever appears
    at segment boundaries: ``["a#b"]`` neither collides with ``["a", "b"]``
    nor looks like a child of ``["a"]``.
    """
    if not machine_key:
        return ""
    return "".join(segment.replace("%", "%25").replace("#", "%23") + "#" for segment in machine_key)


@dataclass(frozen=True)
class CacheKey:
    """Immutable key bound to an Item."""

    segments: tuple[str, ...]
    namespace: str | None = None

    @classmethod
    def parse(cls, key: str | Sequence[str], namespace: str | None = None) -> CacheKey:
        return cls(tuple(parse_key(key)), namespace)

    @property
    def path(self) -> list[str]:
        """Segments as seen below the root tag, namespace first."""
        return [self.namespace, *self.segments] if self.namespace else list(self.segments)

    def machine_key(self) -> MachineKey:
        return to_machine_key(self.path, DATA_ROOT)

    def stampede_key(self) -> MachineKey:
        return to_machine_key(self.path, STAMPEDE_ROOT)

    def __str__(self) -> str:
        return to_display_string(self.segments)
