# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-PathTree - Path-addressed access to JSON documents.

A lightweight, zero-dependency library for reading and writing a JSON
object document through dotted (or custom-separator) paths, with typed
accessors, sub-document views and thread-safe mutation.
"""

__version__ = "0.1.0"

from .exceptions import (
    ConfigError,
    InvalidGrammarError,
    MalformedPathError,
    NotAnObjectError,
    NotFoundError,
    PathConflictError,
    SourceUnavailableError,
    UnsupportedError,
    WrongTypeError,
)
from .grammar import (
    DEFAULT_ALLOWED_CHARACTERS,
    DEFAULT_SEPARATOR,
    PathGrammar,
    verify_path,
)
from .locking import ReadWriteLock
from .node import JSON_NULL, JsonNull
from .serializer import JsonSerializer
from .sources import FileNameSource, FileSource, Source, StreamSource
from .tree import PathTree

__all__ = [
    # Core classes
    "PathTree",
    "PathGrammar",
    "JsonSerializer",
    "ReadWriteLock",
    # Nodes
    "JSON_NULL",
    "JsonNull",
    # Sources
    "Source",
    "FileSource",
    "FileNameSource",
    "StreamSource",
    # Grammar helpers
    "DEFAULT_SEPARATOR",
    "DEFAULT_ALLOWED_CHARACTERS",
    "verify_path",
    # Exceptions
    "ConfigError",
    "MalformedPathError",
    "InvalidGrammarError",
    "NotAnObjectError",
    "WrongTypeError",
    "PathConflictError",
    "NotFoundError",
    "UnsupportedError",
    "SourceUnavailableError",
]
