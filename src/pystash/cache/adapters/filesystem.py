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
"""File-per-key driver."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pystash.cache.adapters.encoders import Encoder, resolve_encoder
from pystash.cache.keys import LITERAL_PREFIX, normalize
from pystash.cache.record import Record
from pystash.kernel.exceptions import InvalidArgumentException, InvalidKeyException

_logger = logging.getLogger(__name__)

FILE_EXTENSION = ".cache"


class FileSystemDriver:
    """Stores each record as one file below a root directory.

    Segments are hashed and spread over ``dir_split`` levels of two-character
    directories, so ``["cache", "users", "42"]`` becomes something like
    ``cache/9b/c6/9bc65c...7c/a1/d0/a1d0c6...4a.cache``. The children of a
    key live in a directory named like the key's file, which lets ``clear``
    drop a whole subtree with one ``rmtree``. ``@``-prefixed segments are
    kept readable as plain directory names.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] | None = None,
        dir_split: int = 2,
        file_permissions: int = 0o660,
        dir_permissions: int = 0o770,
        encoder: Encoder | str | None = "pickle",
    ) -> None:
        if not isinstance(dir_split, int) or isinstance(dir_split, bool) or not 0 <= dir_split <= 16:
            raise InvalidArgumentException(
                "dir_split must be an integer between 0 and 16.", context={"dir_split": dir_split}
            )
        self._root = Path(path) if path else Path(tempfile.gettempdir()) / "pystash"
        self._dir_split = dir_split
        self._file_permissions = file_permissions
        self._dir_permissions = dir_permissions
        self._encoder = resolve_encoder(encoder)
        self._root.mkdir(mode=dir_permissions, parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def get_data(self, key: Sequence[str]) -> Record | None:
        path = self._file_for(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        return self._decode(path, raw)

    def store_data(self, key: Sequence[str], data: Any, expiration: float | None) -> bool:
        path = self._file_for(key)
        path.parent.mkdir(mode=self._dir_permissions, parents=True, exist_ok=True)
        raw = self._encoder.encode({"data": data, "expiration": expiration})

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(raw)
            os.chmod(tmp_name, self._file_permissions)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return True

    def clear(self, key: Sequence[str] | None = None) -> bool:
        if not key:
            for child in self._root.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink(missing_ok=True)
            return True

        base = self._base_for(key)
        base.with_name(base.name + FILE_EXTENSION).unlink(missing_ok=True)
        if base.is_dir():
            shutil.rmtree(base)
        return True

    def purge(self) -> bool:
        now = time.time()
        for directory, _dirs, files in os.walk(self._root, topdown=False):
            current = Path(directory)
            for name in files:
                if not name.endswith(FILE_EXTENSION):
                    continue
                path = current / name
                try:
                    raw = path.read_bytes()
                except FileNotFoundError:
                    continue
                record = self._decode(path, raw)
                if record is None or (record.expiration is not None and record.is_expired(now)):
                    path.unlink(missing_ok=True)
            if current != self._root and not any(current.iterdir()):
                current.rmdir()
        return True

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _base_for(self, key: Sequence[str]) -> Path:
        root, *segments = key
        path = self._root / self._safe_name(root, key)
        for segment in normalize(segments):
            if segment.startswith(LITERAL_PREFIX):
                path = path / self._safe_name(segment, key)
            else:
                for level in range(self._dir_split):
                    path = path / segment[level * 2 : level * 2 + 2]
                path = path / segment
        return path

    def _file_for(self, key: Sequence[str]) -> Path:
        base = self._base_for(key)
        return base.with_name(base.name + FILE_EXTENSION)

    @staticmethod
    def _safe_name(segment: str, key: Sequence[str]) -> str:
        if not segment or segment in (".", "..") or "/" in segment or "\\" in segment or "\0" in segment:
            raise InvalidKeyException(
                "Key segment cannot be used as a directory name.",
                code="KEY_UNSAFE_PATH",
                context={"segment": segment, "key": list(key)},
            )
        return segment

    def _decode(self, path: Path, raw: bytes) -> Record | None:
        try:
            stored = self._encoder.decode(raw)
        except Exception:
            _logger.warning("Discarding undecodable cache file '%s'", path)
            return None
        return Record.from_driver(stored)
