# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PathTree exceptions.

Every error raised by the library derives from ConfigError. Each subclass
names its error kind in the ``kind`` class attribute, so callers can either
catch the specific class or inspect ``exc.kind``.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base exception for PathTree errors."""

    kind = 'ConfigError'


class MalformedPathError(ConfigError, ValueError):
    """Raised when a path does not match the active path grammar."""

    kind = 'MalformedPath'


class InvalidGrammarError(ConfigError, ValueError):
    """Raised when a separator or allowed character makes the grammar invalid."""

    kind = 'InvalidGrammar'


class NotAnObjectError(ConfigError, TypeError):
    """Raised when the element at a path exists but is not a JSON object."""

    kind = 'NotAnObject'


class WrongTypeError(ConfigError, TypeError):
    """Raised when the element at a path is not of the requested JSON kind."""

    kind = 'WrongType'


class PathConflictError(ConfigError):
    """Raised when an intermediate path segment is not a JSON object."""

    kind = 'PathConflict'


class NotFoundError(ConfigError, KeyError):
    """Raised when removing a path with no element."""

    kind = 'NotFound'

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ''


class UnsupportedError(ConfigError):
    """Raised when reloading a tree that has no backing source."""

    kind = 'Unsupported'


class SourceUnavailableError(ConfigError):
    """Raised when the backing file or stream cannot be read or parsed."""

    kind = 'SourceUnavailable'
