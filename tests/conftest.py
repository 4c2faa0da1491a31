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
"""Keeps logging configuration made by one test from leaking into the next."""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_pystash_loggers():
    manager = logging.Logger.manager
    names = ["pystash", *(name for name in manager.loggerDict if name.startswith("pystash."))]
    saved = {}
    for name in names:
        logger = logging.getLogger(name)
        saved[name] = (logger.level, list(logger.handlers))
    yield
    for name in list(manager.loggerDict):
        if name != "pystash" and not name.startswith("pystash."):
            continue
        logger = logging.getLogger(name)
        level, handlers = saved.get(name, (logging.NOTSET, []))
        logger.setLevel(level)
        logger.handlers[:] = handlers
