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
"""Provider detection for optional storage backends."""

from __future__ import annotations

import importlib

import structlog

from pystash.config.properties.cache import CacheProperties

logger = structlog.get_logger("pystash.config.auto")


class AutoConfiguration:
    """Detect available storage providers by checking importable packages."""

    @staticmethod
    def is_available(module_name: str) -> bool:
        """Check if a Python package is importable."""
        try:
            importlib.import_module(module_name)
            return True
        except ImportError:
            return False

    @staticmethod
    def detect_cache_driver(properties: CacheProperties) -> str:
        """Resolve ``driver: auto`` to a concrete driver name.

        Redis wins when the client library is installed and a URL is
        configured; everything else runs on the in-process driver.
        """
        if properties.driver != "auto":
            return properties.driver
        if properties.redis.url and AutoConfiguration.is_available("redis"):
            logger.debug("cache_driver_detected", driver="redis")
            return "redis"
        logger.debug("cache_driver_detected", driver="ephemeral")
        return "ephemeral"
