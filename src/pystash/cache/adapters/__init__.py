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
"""Cache driver implementations."""

from pystash.cache.adapters.black_hole import BlackHoleDriver
from pystash.cache.adapters.composite import CompositeDriver
from pystash.cache.adapters.encoders import Encoder, JsonEncoder, PickleEncoder, resolve_encoder
from pystash.cache.adapters.ephemeral import EphemeralDriver
from pystash.cache.adapters.filesystem import FileSystemDriver
from pystash.cache.adapters.redis import RedisDriver
from pystash.cache.adapters.sqlite import SqliteDriver

__all__ = [
    "BlackHoleDriver",
    "CompositeDriver",
    "Encoder",
    "EphemeralDriver",
    "FileSystemDriver",
    "JsonEncoder",
    "PickleEncoder",
    "RedisDriver",
    "SqliteDriver",
    "resolve_encoder",
]
