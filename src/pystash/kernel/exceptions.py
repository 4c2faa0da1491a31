"""Unified exception hierarchy for PyStash.

All library exceptions inherit from PyStashException, enabling unified
error handling across modules.

Categories:
- InvalidArgumentException: API misuse detected at the call site (bad keys,
  bad options, unknown drivers). Never retried.
- LogicException: an operation was attempted in a state that does not allow it.
- InfrastructureException: storage backend failures. Items catch these (and
  any other backend error) at their boundary and degrade to "always miss".
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class PyStashException(Exception):
    """Base exception for all PyStash errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "KEY_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration Exceptions
# =============================================================================


class InvalidArgumentException(PyStashException):
    """An argument passed to the cache API is invalid."""


class InvalidKeyException(InvalidArgumentException):
    """A cache key is malformed (wrong type or empty segment)."""


class UnknownDriverException(InvalidArgumentException):
    """No driver is registered under the requested name."""


class LogicException(PyStashException):
    """Operation is not permitted in the current state."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(PyStashException):
    """Storage backend failures."""


class DriverException(InfrastructureException):
    """A driver failed while reading, writing or deleting data."""


class DriverUnavailableException(InfrastructureException):
    """The requested driver cannot be constructed in this environment."""
