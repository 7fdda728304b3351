# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path grammar for PathTree.

A grammar is the pair (separator, allowed special characters). A path is
one or more segments joined by exactly one separator, where every segment
is a run of ASCII word characters or allowed special characters:

    config.database.host        # default grammar
    build-targets.x86_64        # '-' and '_' are allowed by default
    a/b/c                       # PathGrammar(separator='/')

Leading, trailing or doubled separators denote empty segments and never
validate. The empty path is valid and addresses the document root.
"""

from __future__ import annotations

import re
from typing import Iterable

from .exceptions import InvalidGrammarError, MalformedPathError

DEFAULT_SEPARATOR = '.'
DEFAULT_ALLOWED_CHARACTERS = frozenset({'-', '+', '_', '$'})

_WORD_CHAR = re.compile(r'\w', re.ASCII)


def check_length(value: str, length: int, empty_check: bool = False) -> None:
    """Check that ``value`` is a string of exactly ``length`` characters.

    Raises:
        InvalidGrammarError: If the value is empty (when ``empty_check``)
            or has a different length.
    """
    if not isinstance(value, str):
        raise InvalidGrammarError(
            f"Expected a string, not {type(value).__name__}"
        )
    if empty_check and not value:
        raise InvalidGrammarError("Value cannot be empty")
    if len(value) != length:
        raise InvalidGrammarError(
            f"Expected {length} character(s), got {value!r}"
        )


def verify_no_conflict(separator: str, allowed: Iterable[str]) -> bool:
    """Return True if the separator is not one of the allowed characters."""
    return separator not in set(allowed)


def compile_path_pattern(separator: str, allowed: Iterable[str]) -> re.Pattern[str]:
    """Compile the matcher for paths of the given grammar.

    Conflicts between separator and allowed characters are not checked
    here, see verify_no_conflict().
    """
    chars = ''.join(re.escape(c) for c in sorted(allowed))
    segment = rf'[\w{chars}]+'
    return re.compile(rf'{segment}(?:{re.escape(separator)}{segment})*', re.ASCII)


def verify_path(path: str, separator: str, allowed: Iterable[str]) -> None:
    """Validate a path against an ad-hoc grammar.

    Raises:
        InvalidGrammarError: If separator and allowed characters conflict.
        MalformedPathError: If the path does not match.
    """
    PathGrammar(separator, allowed).validate(path)


class PathGrammar:
    """Immutable (separator, allowed characters) pair with its compiled matcher.

    Changing either field means building a new grammar; see with_separator()
    and with_allowed().

    Example:
        >>> grammar = PathGrammar('/', {'-'})
        >>> grammar.split('a/b-c')
        ['a', 'b-c']
        >>> grammar.is_valid('a//b')
        False
    """

    __slots__ = ('_separator', '_allowed', '_pattern')

    def __init__(
        self,
        separator: str = DEFAULT_SEPARATOR,
        allowed: Iterable[str] = DEFAULT_ALLOWED_CHARACTERS,
    ) -> None:
        """Initialize and compile a PathGrammar.

        Args:
            separator: Single non-word character separating segments.
            allowed: Extra single characters permitted inside segments.

        Raises:
            InvalidGrammarError: If the separator is not a single non-word
                character, an allowed entry is not a single character, or
                the separator is among the allowed characters.
        """
        check_length(separator, 1, empty_check=True)
        if _WORD_CHAR.match(separator):
            raise InvalidGrammarError(
                f"Separator {separator!r} cannot be a word character"
            )
        allowed = frozenset(allowed)
        for char in allowed:
            check_length(char, 1, empty_check=True)
        if not verify_no_conflict(separator, allowed):
            raise InvalidGrammarError(
                f"Separator {separator!r} is an allowed special character"
            )
        self._separator = separator
        self._allowed = allowed
        self._pattern = compile_path_pattern(separator, allowed)

    def __repr__(self) -> str:
        return (
            f"PathGrammar({self._separator!r}, "
            f"{''.join(sorted(self._allowed))!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathGrammar):
            return NotImplemented
        return (self._separator, self._allowed) == (other._separator, other._allowed)

    def __hash__(self) -> int:
        return hash((self._separator, self._allowed))

    @property
    def separator(self) -> str:
        """The segment separator."""
        return self._separator

    @property
    def allowed(self) -> frozenset[str]:
        """Special characters allowed inside segments."""
        return self._allowed

    @property
    def pattern(self) -> re.Pattern[str]:
        """The compiled path matcher."""
        return self._pattern

    def with_separator(self, separator: str) -> PathGrammar:
        """Return a grammar with a different separator and the same allowed set."""
        return PathGrammar(separator, self._allowed)

    def with_allowed(self, allowed: Iterable[str]) -> PathGrammar:
        """Return a grammar with a different allowed set and the same separator."""
        return PathGrammar(self._separator, allowed)

    def is_valid(self, path: str) -> bool:
        """True if the path is empty or fully matches the grammar."""
        return not path or self._pattern.fullmatch(path) is not None

    def validate(self, path: str) -> None:
        """Validate a path.

        Raises:
            MalformedPathError: If the path is not a string, or is non-empty
                and does not fully match the grammar.
        """
        if not isinstance(path, str):
            raise MalformedPathError(
                f"Path must be a string, not {type(path).__name__}"
            )
        if not self.is_valid(path):
            raise MalformedPathError(
                f"Malformed path {path!r}, could not match {self._pattern.pattern}"
            )

    def split(self, path: str) -> list[str]:
        """Split a validated path into its segments ('' gives [])."""
        if not path:
            return []
        return path.split(self._separator)

    def join(self, segments: Iterable[str]) -> str:
        """Join segments into a path."""
        return self._separator.join(segments)
