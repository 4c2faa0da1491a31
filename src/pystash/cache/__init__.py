"""PyStash Cache — hierarchical cache with stampede protection."""

from pystash.cache.adapters.black_hole import BlackHoleDriver
from pystash.cache.adapters.composite import CompositeDriver
from pystash.cache.adapters.ephemeral import EphemeralDriver
from pystash.cache.adapters.filesystem import FileSystemDriver
from pystash.cache.adapters.redis import RedisDriver
from pystash.cache.adapters.sqlite import SqliteDriver
from pystash.cache.auto_configuration import CacheAutoConfiguration
from pystash.cache.context import CacheContext, CacheStats
from pystash.cache.decorators import cache_evict, cache_put, cached
from pystash.cache.invalidation import (
    Invalidation,
    InvalidationPolicy,
    NonePolicy,
    OldPolicy,
    PrecomputePolicy,
    SleepPolicy,
    ValuePolicy,
)
from pystash.cache.item import Item
from pystash.cache.pool import Pool
from pystash.cache.ports.outbound import Driver
from pystash.cache.record import Record
from pystash.cache.registry import DriverRegistry, default_registry

__all__ = [
    "BlackHoleDriver",
    "CacheAutoConfiguration",
    "CacheContext",
    "CacheStats",
    "CompositeDriver",
    "Driver",
    "DriverRegistry",
    "EphemeralDriver",
    "FileSystemDriver",
    "Invalidation",
    "InvalidationPolicy",
    "Item",
    "NonePolicy",
    "OldPolicy",
    "Pool",
    "PrecomputePolicy",
    "Record",
    "RedisDriver",
    "SleepPolicy",
    "SqliteDriver",
    "ValuePolicy",
    "cache_evict",
    "cache_put",
    "cached",
    "default_registry",
]
