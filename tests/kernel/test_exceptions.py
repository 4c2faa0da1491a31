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
"""Tests for PyStash kernel exception hierarchy."""

from pystash.kernel.exceptions import (
    DriverException,
    DriverUnavailableException,
    InfrastructureException,
    InvalidArgumentException,
    InvalidKeyException,
    LogicException,
    PyStashException,
    UnknownDriverException,
)


class TestPyStashException:
    def test_basic_creation(self):
        exc = PyStashException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_error_code(self):
        exc = PyStashException("bad key", code="KEY_TYPE")
        assert exc.code == "KEY_TYPE"

    def test_with_context(self):
        exc = PyStashException("unknown driver", code="DRIVER", context={"driver": "memcache"})
        assert exc.context["driver"] == "memcache"

    def test_context_defaults_to_empty_dict(self):
        exc = PyStashException("test")
        exc.context["key"] = "value"
        assert PyStashException("test2").context == {}


class TestExceptionHierarchy:
    def test_argument_errors(self):
        assert issubclass(InvalidArgumentException, PyStashException)
        assert issubclass(InvalidKeyException, InvalidArgumentException)
        assert issubclass(UnknownDriverException, InvalidArgumentException)

    def test_logic_error(self):
        assert issubclass(LogicException, PyStashException)
        assert not issubclass(LogicException, InvalidArgumentException)

    def test_infrastructure_errors(self):
        assert issubclass(InfrastructureException, PyStashException)
        assert issubclass(DriverException, InfrastructureException)
        assert issubclass(DriverUnavailableException, InfrastructureException)
