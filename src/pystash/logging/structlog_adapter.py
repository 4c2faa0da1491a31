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
"""StructlogAdapter — default LoggingPort implementation using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

from pystash.core.config import Config

LIBRARY_LOGGER = "pystash"

# Shared by structlog-originated events and records from plain stdlib loggers
# under ``pystash`` (the file-system and composite drivers log that way).
_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


class StructlogAdapter:
    """Logging adapter backed by structlog, scoped to the ``pystash`` logger tree.

    ``configure`` installs one handler on the ``pystash`` stdlib logger and
    leaves the root logger and the global structlog configuration alone.
    Settings read:

    - ``pystash.logging.format``: ``console`` or ``json``
    - ``pystash.logging.level.root``: level of the ``pystash`` logger
    - ``pystash.logging.level.<logger>``: per-module overrides
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        levels = dict(config.get_section("pystash.logging.level"))
        self._root_level = str(levels.pop("root", "INFO")).upper()
        self._module_levels = {name: str(level).upper() for name, level in levels.items()}
        self._format = str(config.get("pystash.logging.format", "console")).lower()

        self._install_handler()
        self.set_level(LIBRARY_LOGGER, self._root_level)
        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.wrap_logger(
            logging.getLogger(name),
            processors=[
                *_PRE_CHAIN,
                structlog.processors.StackInfoRenderer(),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
        )

    def set_level(self, name: str, level: str) -> None:
        """Set the log level for a specific stdlib logger."""
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.INFO))

    def _renderer(self) -> structlog.types.Processor:
        if self._format == "json":
            return structlog.processors.JSONRenderer(default=repr)
        return structlog.dev.ConsoleRenderer()

    def _install_handler(self) -> None:
        library = logging.getLogger(LIBRARY_LOGGER)
        for handler in list(library.handlers):
            if handler.get_name() == LIBRARY_LOGGER:
                library.removeHandler(handler)

        handler = logging.StreamHandler(self._stream or sys.stdout)
        handler.set_name(LIBRARY_LOGGER)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    self._renderer(),
                ],
                foreign_pre_chain=_PRE_CHAIN,
            )
        )
        library.addHandler(handler)
