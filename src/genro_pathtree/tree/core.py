# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PathTree - path-addressed access to a JSON object document.

This module provides the PathTree class, which owns one JSON object and
exposes reads, writes and removals addressed by separator-delimited paths.

Key Features:
    - **Path grammar**: configurable separator and allowed special characters,
      every path validated before use
    - **Autocreate**: set() creates missing intermediate objects
    - **Typed accessors**: get_string, get_integer, get_long, get_double,
      get_boolean, get_array with defaults
    - **Sub-trees**: independent copies rooted at a nested object
    - **Thread safety**: one re-entrant reader/writer lock per tree
    - **Reload**: re-read the document from its file or stream

Absence is always reported as None. A JSON null stored in the document
also reads as None, unless ``allow_null=True`` is passed to get_element(),
which reports it as JSON_NULL.

Example:
    Basic usage::

        tree = PathTree()
        tree.set('server.http.port', 8080)
        tree.set('server.http.host', 'localhost')

        tree.get_integer('server.http.port')    # 8080
        tree.get_string('server.tls.cert')      # None
        tree.get_keys(deep=True)
        # ['server', 'server.http', 'server.http.port', 'server.http.host']

    From a file::

        tree = PathTree(Path('settings.json'))
        ...
        tree.reload()
"""

from __future__ import annotations

import logging
import math
from contextlib import AbstractContextManager
from pathlib import Path
from typing import IO, Any, Iterable, Iterator

from ..exceptions import (
    MalformedPathError,
    NotAnObjectError,
    NotFoundError,
    PathConflictError,
    UnsupportedError,
    WrongTypeError,
)
from ..grammar import PathGrammar
from ..locking import ReadWriteLock
from ..node import (
    JSON_NULL,
    deep_copy,
    is_array,
    is_boolean,
    is_number,
    is_object,
    is_string,
    json_equal,
)
from ..serializer import JsonSerializer, default_serializer
from ..sources import Source, parse_document, source_for

logger = logging.getLogger(__name__)


def _wrap_integer(value: int | float, bits: int) -> int:
    """Truncate toward zero and keep the low ``bits`` bits as a signed int."""
    value = int(value)
    span = 1 << bits
    value &= span - 1
    if value >= span >> 1:
        value -= span
    return value


class PathTree:
    """A JSON object document accessed by paths.

    PathTree provides:
    - get_element(path) / tree[path]: read a node (deep copy)
    - set(path, value) / tree[path] = value: write with autocreate
    - remove(path) / del tree[path]: delete a node
    - get_sub_tree(path): independent tree rooted at a nested object
    - typed getters, get_keys(deep) and get_values(deep)

    All public methods are safe to call from several threads. Readers
    share the tree's lock, writers hold it exclusively.

    Example:
        >>> tree = PathTree({'a': {'b': 1, 'c': 'x'}})
        >>> tree.get_string('a.c')
        'x'
        >>> tree.get_keys(deep=True)
        ['a', 'a.b', 'a.c']
    """

    __slots__ = ('_root', '_grammar', '_source', '_serializer', '_lock')

    def __init__(
        self,
        source: dict | PathTree | Path | str | IO[Any] | None = None,
        separator: str | None = None,
        allowed_special_characters: Iterable[str] | None = None,
        serializer: JsonSerializer | None = None,
    ) -> None:
        """Initialize a PathTree.

        Args:
            source: Optional initial document. Can be:
                - dict: used as the document (copied), no backing source
                - PathTree: copy of another tree, grammar inherited
                - pathlib.Path or str: JSON file to read, reloadable
                - readable file object: JSON stream to read, reloadable
            separator: Path separator. Defaults to '.', or to the grammar
                of a PathTree source. A default allowed character equal to
                the separator is dropped from the allowed set.
            allowed_special_characters: Extra characters allowed in path
                segments, in addition to the defaults ('-', '+', '_', '$').
            serializer: JSON serializer, shared default if omitted.

        Raises:
            InvalidGrammarError: If the separator is invalid or among the
                allowed special characters.
            SourceUnavailableError: If the file or stream cannot be read,
                is empty or is not JSON.
            NotAnObjectError: If the document is not a JSON object.
            TypeError: If the source type is not supported.

        Example:
            >>> PathTree({'a': 1})
            >>> PathTree(Path('config.json'), separator='/')
            >>> PathTree(io.StringIO('{"a": 1}'))
            >>> PathTree(allowed_special_characters={'@'})
        """
        self._lock = ReadWriteLock()
        self._serializer = serializer
        if isinstance(source, PathTree) and serializer is None:
            self._serializer = source.serializer
        if self._serializer is None:
            self._serializer = default_serializer
        self._grammar = self._initial_grammar(source, separator, allowed_special_characters)
        self._source: Source | None = None
        self._root: dict[str, Any] = {}

        if source is not None:
            self._load_source(source)

    @staticmethod
    def _initial_grammar(
        source: Any,
        separator: str | None,
        allowed: Iterable[str] | None,
    ) -> PathGrammar:
        base = source.grammar if isinstance(source, PathTree) else PathGrammar()
        if separator is None and allowed is None:
            return base
        chars = set(base.allowed)
        if separator is not None:
            chars.discard(separator)
        if allowed is not None:
            chars.update(allowed)
        return PathGrammar(base.separator if separator is None else separator, chars)

    def _load_source(self, source: dict | PathTree | Path | str | IO[Any]) -> None:
        """Load the initial document.

        Raises:
            TypeError: If source is not a dict, PathTree, path, or stream.
        """
        if isinstance(source, PathTree):
            self._root = source.as_dict()
            return
        if isinstance(source, dict):
            self._root = self._serializer.to_json(source)
            return
        descriptor = source_for(source)
        if descriptor is None:
            raise TypeError(
                "source must be dict, PathTree, path, or readable stream, "
                f"not {type(source).__name__}"
            )
        self._root = descriptor.read(self._serializer)
        self._source = descriptor
        logger.debug("Loaded %d root key(s) from %s source", len(self._root), descriptor.kind)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> PathTree:
        """Build a reloadable tree from a JSON file."""
        return cls(Path(path), **kwargs)

    @classmethod
    def from_stream(cls, stream: IO[Any], **kwargs: Any) -> PathTree:
        """Build a reloadable tree from a readable file object."""
        return cls(stream, **kwargs)

    @classmethod
    def from_string(cls, text: str | bytes, **kwargs: Any) -> PathTree:
        """Build a tree from JSON text. The tree has no backing source."""
        tree = cls(**kwargs)
        tree._root = parse_document(text, '<string>', tree._serializer)
        return tree

    @classmethod
    def _from_document(
        cls,
        document: dict[str, Any],
        grammar: PathGrammar,
        serializer: JsonSerializer,
    ) -> PathTree:
        """Wrap an already owned document without copying or validating it."""
        tree = cls(serializer=serializer)
        tree._grammar = grammar
        tree._root = document
        return tree

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        with self._lock.read_locked():
            return f"PathTree({list(self._root)})"

    def __str__(self) -> str:
        return self.to_json()

    def __len__(self) -> int:
        """Return the number of root keys."""
        with self._lock.read_locked():
            return len(self._root)

    def __iter__(self) -> Iterator[str]:
        """Iterate over a snapshot of the root keys."""
        return iter(self.get_keys())

    def __contains__(self, key: str) -> bool:
        """Check if a root-level key exists, same as contains_key().

        The key is not parsed as a path, so keys the grammar rejects are
        simply reported missing.
        """
        return self.contains_key(key)

    def __getitem__(self, path: str) -> Any:
        """Get the element at a path.

        Raises:
            KeyError: If no element exists at the path.

        Example:
            >>> tree['server.http.port']
            8080
        """
        element = self.get_element(path, allow_null=True)
        if element is None:
            raise KeyError(path)
        return None if element is JSON_NULL else element

    def __setitem__(self, path: str, value: Any) -> None:
        self.set(path, value)

    def __delitem__(self, path: str) -> None:
        self.remove(path)

    def __add__(self, other: PathTree) -> PathTree:
        """Merge two trees' root keys; keys of the left operand win.

        The result has the left operand's grammar and no backing source.
        """
        if not isinstance(other, PathTree):
            return NotImplemented
        merged = other.as_dict()
        merged.update(self.as_dict())
        return PathTree._from_document(merged, self.grammar, self._serializer)

    # ==================== Properties ====================

    @property
    def grammar(self) -> PathGrammar:
        """The active path grammar."""
        with self._lock.read_locked():
            return self._grammar

    @property
    def separator(self) -> str:
        """The path separator."""
        with self._lock.read_locked():
            return self._grammar.separator

    @separator.setter
    def separator(self, separator: str) -> None:
        """Change the path separator.

        The separator must be a single character that is not an ASCII
        word character (letter, digit or underscore), otherwise a path
        such as "a_b" could not be told apart from two segments.

        Raises:
            InvalidGrammarError: If the separator is not a single non-word
                character or is an allowed special character. The grammar
                is left unchanged.
        """
        with self._lock.write_locked():
            self._grammar = self._grammar.with_separator(separator)
            logger.debug("Path separator set to %r", separator)

    @property
    def allowed_special_characters(self) -> frozenset[str]:
        """Special characters allowed in path segments."""
        with self._lock.read_locked():
            return self._grammar.allowed

    @property
    def source(self) -> Source | None:
        """The backing source descriptor, or None."""
        with self._lock.read_locked():
            return self._source

    @property
    def serializer(self) -> JsonSerializer:
        return self._serializer

    def read_locked(self) -> AbstractContextManager[None]:
        """Context manager holding this tree's read lock.

        Use it to run several reads against one consistent document.
        """
        return self._lock.read_locked()

    def write_locked(self) -> AbstractContextManager[None]:
        """Context manager holding this tree's write lock.

        Public methods called inside the block re-enter the lock, so a
        read-modify-write sequence runs without interleaved writers.

        Example:
            >>> with tree.write_locked():
            ...     tree.set('hits', tree.get_integer('hits', 0) + 1)
        """
        return self._lock.write_locked()

    # ==================== Grammar ====================

    def add_allowed_special_character(self, char: str) -> bool:
        """Allow a character in path segments.

        Returns:
            True if the character was added, False if it was already allowed.

        Raises:
            InvalidGrammarError: If the character is the separator or not a
                single character. The grammar is left unchanged.
        """
        with self._lock.write_locked():
            if char in self._grammar.allowed:
                return False
            self._grammar = self._grammar.with_allowed(self._grammar.allowed | {char})
            logger.debug("Allowed special character %r added", char)
            return True

    def remove_allowed_special_character(self, char: str) -> bool:
        """Disallow a character in path segments.

        Returns:
            True if the character was removed, False if it was not allowed.
        """
        with self._lock.write_locked():
            if char not in self._grammar.allowed:
                return False
            self._grammar = self._grammar.with_allowed(self._grammar.allowed - {char})
            logger.debug("Allowed special character %r removed", char)
            return True

    # ==================== Path Utilities ====================

    def _segments(self, path: str) -> list[str]:
        """Validate a path and split it. Lock must be held."""
        self._grammar.validate(path)
        return self._grammar.split(path)

    def _htraverse(self, segments: list[str], allow_null: bool = False) -> Any:
        """Walk the document along segments. Lock must be held.

        Returns:
            The node itself (not a copy). None when a segment is missing,
            null, or a non-object is met before the last segment. A null
            at the last segment gives JSON_NULL when ``allow_null``.
        """
        node: Any = self._root
        last = len(segments) - 1
        for i, segment in enumerate(segments):
            if segment not in node:
                return None
            child = node[segment]
            if child is None:
                return JSON_NULL if allow_null and i == last else None
            if i == last:
                return child
            if not is_object(child):
                return None
            node = child
        return node

    # ==================== Core API ====================

    def get_element(self, path: str, allow_null: bool = False) -> Any:
        """Get a copy of the element at a path.

        Args:
            path: Path to the element. Empty path returns the whole document.
            allow_null: Report a JSON null as JSON_NULL instead of None.

        Returns:
            A deep copy of the element, or None if there is none.

        Raises:
            MalformedPathError: If the path does not match the grammar.

        Example:
            >>> tree.get_element('a')       # {'b': 1, 'c': 'x'}
            >>> tree.get_element('a.z')     # None
        """
        with self._lock.read_locked():
            return deep_copy(self._htraverse(self._segments(path), allow_null))

    def set(self, path: str, value: Any) -> None:
        """Set a value at a path, creating intermediate objects as needed.

        Missing or null intermediate segments become empty objects. The
        call is all-or-nothing: the value is converted and the path is
        checked before the document is touched.

        Args:
            path: Path to set. Empty path replaces the whole document.
            value: Any value the serializer can convert to JSON.

        Raises:
            MalformedPathError: If the path does not match the grammar.
            PathConflictError: If an intermediate segment holds a
                non-object value.
            NotAnObjectError: If replacing the document with a non-object.
            TypeError: If the value has no JSON representation.

        Example:
            >>> tree = PathTree()
            >>> tree.set('x.y.z', 5)
            >>> tree.as_dict()
            {'x': {'y': {'z': 5}}}
        """
        node_value = self._serializer.to_json(value)
        with self._lock.write_locked():
            segments = self._segments(path)
            if not segments:
                if not is_object(node_value):
                    raise NotAnObjectError(
                        f"Document root must be a JSON object, not {type(node_value).__name__}"
                    )
                self._root = node_value
                return

            # check the existing part of the path before creating anything
            parent = self._root
            missing_from = None
            for i, segment in enumerate(segments[:-1]):
                child = parent.get(segment)
                if child is None:
                    missing_from = i
                    break
                if not is_object(child):
                    raise PathConflictError(
                        f"'{self._grammar.join(segments[:i + 1])}' is not an object, "
                        f"cannot set '{path}'"
                    )
                parent = child

            if missing_from is not None:
                for segment in segments[missing_from:-1]:
                    parent[segment] = {}
                    parent = parent[segment]
            parent[segments[-1]] = node_value

    def remove(self, path: str) -> None:
        """Remove the element at a path.

        A key holding JSON null counts as an element and can be removed.

        Raises:
            MalformedPathError: If the path is malformed or empty.
            NotFoundError: If no element exists at the path.
            PathConflictError: If the parent of the path is not an object.
        """
        with self._lock.write_locked():
            segments = self._segments(path)
            if not segments:
                raise MalformedPathError("Cannot remove the document root")
            if self._htraverse(segments, allow_null=True) is None:
                raise NotFoundError(f"No element at '{path}'")
            parent = self._htraverse(segments[:-1])
            if not is_object(parent):
                raise PathConflictError(f"Parent of '{path}' is not an object")
            del parent[segments[-1]]

    def get_sub_tree(self, path: str) -> PathTree | None:
        """Return an independent tree rooted at a copy of a nested object.

        The sub-tree keeps this tree's grammar and serializer. Changes to
        either tree afterwards do not affect the other.

        Returns:
            The sub-tree, or None if there is no element at the path.

        Raises:
            MalformedPathError: If the path does not match the grammar.
            NotAnObjectError: If the element is not a JSON object.
        """
        with self._lock.read_locked():
            element = self._htraverse(self._segments(path))
            if element is None:
                return None
            if not is_object(element):
                raise NotAnObjectError(f"The element at '{path}' is not a JSON object")
            return PathTree._from_document(deep_copy(element), self._grammar, self._serializer)

    # ==================== Typed Getters ====================

    def get_string(
        self,
        path: str,
        default: str | None = None,
        force_conversion: bool = False,
    ) -> str | None:
        """Get a string.

        Args:
            path: Path to the element.
            default: Returned when there is no element.
            force_conversion: Return the JSON text of a non-string element
                instead of raising.

        Raises:
            WrongTypeError: If the element is not a string (and no
                conversion was requested).
        """
        element = self.get_element(path)
        if element is None:
            return default
        if is_string(element):
            return element
        if force_conversion:
            return self._serializer.dumps(element)
        raise WrongTypeError(f"The element at '{path}' is not a string")

    def _get_number(self, path: str) -> int | float | None:
        element = self.get_element(path)
        if element is None or is_number(element):
            return element
        raise WrongTypeError(f"The element at '{path}' is not a number")

    def get_integer(self, path: str, default: int | None = None) -> int | None:
        """Get a number as a signed 32-bit integer.

        Floats are truncated toward zero and values outside the range keep
        their low 32 bits.

        Raises:
            WrongTypeError: If the element is not a number.
        """
        number = self._get_number(path)
        if number is None:
            return default
        try:
            return _wrap_integer(number, 32)
        except (OverflowError, ValueError) as exc:
            raise WrongTypeError(f"The number at '{path}' is not finite") from exc

    def get_long(self, path: str, default: int | None = None) -> int | None:
        """Get a number as a signed 64-bit integer.

        Raises:
            WrongTypeError: If the element is not a number.
        """
        number = self._get_number(path)
        if number is None:
            return default
        try:
            return _wrap_integer(number, 64)
        except (OverflowError, ValueError) as exc:
            raise WrongTypeError(f"The number at '{path}' is not finite") from exc

    def get_double(self, path: str, default: float | None = None) -> float | None:
        """Get a number as a float.

        Raises:
            WrongTypeError: If the element is not a number.
        """
        number = self._get_number(path)
        if number is None:
            return default
        try:
            return float(number)
        except OverflowError:
            return math.inf if number > 0 else -math.inf

    def get_boolean(self, path: str, default: bool | None = None) -> bool | None:
        """Get a boolean.

        Raises:
            WrongTypeError: If the element is not a boolean.
        """
        element = self.get_element(path)
        if element is None:
            return default
        if is_boolean(element):
            return element
        raise WrongTypeError(f"The element at '{path}' is not a boolean")

    def get_array(self, path: str, default: list | None = None) -> list | None:
        """Get a copy of an array.

        Raises:
            WrongTypeError: If the element is not an array.
        """
        element = self.get_element(path)
        if element is None:
            return default
        if is_array(element):
            return element
        raise WrongTypeError(f"The element at '{path}' is not an array")

    # ==================== Iteration ====================

    def _iter_entries(
        self, node: dict[str, Any], prefix: str, deep: bool
    ) -> Iterator[tuple[str, Any]]:
        """Yield (path, node) pairs in document order. Lock must be held."""
        separator = self._grammar.separator
        for key, value in node.items():
            path = f"{prefix}{separator}{key}" if prefix else key
            yield path, value
            if deep and is_object(value):
                yield from self._iter_entries(value, path, deep)

    def get_keys(self, deep: bool = False) -> list[str]:
        """Return the keys of the document in document order.

        Args:
            deep: Also descend into nested objects (never into arrays),
                giving each nested key its full path.

        Example:
            >>> tree = PathTree({'a': {'b': 1, 'c': 'x'}})
            >>> tree.get_keys()
            ['a']
            >>> tree.get_keys(deep=True)
            ['a', 'a.b', 'a.c']
        """
        with self._lock.read_locked():
            return [path for path, _ in self._iter_entries(self._root, '', deep)]

    def get_values(self, deep: bool = False) -> dict[str, Any]:
        """Return a mapping of path to element copy, in document order.

        Args:
            deep: Also descend into nested objects, as in get_keys().
        """
        with self._lock.read_locked():
            return {
                path: deep_copy(value)
                for path, value in self._iter_entries(self._root, '', deep)
            }

    def walk(self) -> Iterator[tuple[str, Any]]:
        """Iterate over (path, element) pairs of a deep snapshot.

        Example:
            >>> for path, value in tree.walk():
            ...     print(path, value)
        """
        return iter(self.get_values(deep=True).items())

    # ==================== Conversion ====================

    def as_dict(self) -> dict[str, Any]:
        """Return a deep copy of the whole document."""
        with self._lock.read_locked():
            return deep_copy(self._root)

    def to_json(self) -> str:
        """Return the document as compact JSON text."""
        return self.dumps()

    def dumps(self, indent: int | None = None) -> str:
        """Return the document as JSON text.

        Args:
            indent: Indentation; the serializer's default if omitted.
        """
        with self._lock.read_locked():
            return self._serializer.dumps(self._root, indent=indent)

    def contains_key(self, key: str) -> bool:
        """Check if a root-level key exists (no path traversal)."""
        with self._lock.read_locked():
            return key in self._root

    def contains_value(self, value: Any) -> bool:
        """Check if a root-level element equals the JSON form of ``value``."""
        node_value = self._serializer.to_json(value)
        with self._lock.read_locked():
            return any(
                json_equal(v, node_value) for v in self._root.values()
            )

    # ==================== Reload ====================

    def reload(self) -> None:
        """Replace the document with a fresh read of the backing source.

        The write lock is held while reading, so other threads wait for a
        slow file or stream. On failure the document is left unchanged.

        Raises:
            UnsupportedError: If the tree has no backing source.
            SourceUnavailableError: If the source can no longer be read.
            NotAnObjectError: If the source no longer holds a JSON object.
        """
        with self._lock.write_locked():
            if self._source is None:
                raise UnsupportedError("Cannot reload a tree without a backing source")
            self._root = self._source.read(self._serializer)
            logger.debug("Reloaded %d root key(s) from %s source", len(self._root), self._source.kind)

