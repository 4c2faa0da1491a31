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
"""SQLite driver built on SQLAlchemy Core."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Column, Float, LargeBinary, MetaData, String, Table, create_engine, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from pystash.cache.adapters.encoders import Encoder, resolve_encoder
from pystash.cache.keys import key_index
from pystash.cache.record import Record

_logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class SqliteDriver:
    """Keeps records in a single ``(key, data, expiration)`` table.

    Keys are stored as their flattened index so a subtree is a ``LIKE
    'prefix%'`` away. Pass ``":memory:"`` for a private in-process database
    or an existing *engine* to share a connection pool.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] = MEMORY,
        table: str = "pystash_cache",
        encoder: Encoder | str | None = "pickle",
        engine: Engine | None = None,
    ) -> None:
        if engine is None:
            if str(path) == MEMORY:
                engine = create_engine(
                    "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
                )
            else:
                engine = create_engine(f"sqlite:///{os.fspath(path)}")
        self._engine = engine
        self._encoder = resolve_encoder(encoder)

        self._metadata = MetaData()
        self._table = Table(
            table,
            self._metadata,
            Column("key", String, primary_key=True),
            Column("data", LargeBinary, nullable=False),
            Column("expiration", Float, nullable=True, index=True),
        )
        self._metadata.create_all(self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_data(self, key: Sequence[str]) -> Record | None:
        stmt = select(self._table.c.data, self._table.c.expiration).where(
            self._table.c.key == key_index(key)
        )
        with self._engine.connect() as conn:
            row = conn.execute(stmt).first()
        if row is None:
            return None
        try:
            data = self._encoder.decode(row.data)
        except Exception:
            _logger.warning("Discarding undecodable cache row for key '%s'", key_index(key))
            return None
        return Record(data, row.expiration)

    def store_data(self, key: Sequence[str], data: Any, expiration: float | None) -> bool:
        raw = self._encoder.encode(data)
        stmt = sqlite_insert(self._table).values(key=key_index(key), data=raw, expiration=expiration)
        stmt = stmt.on_conflict_do_update(
            index_elements=[self._table.c.key],
            set_={"data": stmt.excluded.data, "expiration": stmt.excluded.expiration},
        )
        with self._engine.begin() as conn:
            conn.execute(stmt)
        return True

    def clear(self, key: Sequence[str] | None = None) -> bool:
        stmt = delete(self._table)
        if key:
            stmt = stmt.where(self._table.c.key.startswith(key_index(key), autoescape=True))
        with self._engine.begin() as conn:
            conn.execute(stmt)
        return True

    def purge(self) -> bool:
        stmt = delete(self._table).where(self._table.c.expiration <= time.time())
        with self._engine.begin() as conn:
            conn.execute(stmt)
        return True

    def close(self) -> None:
        self._engine.dispose()
