# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""JSON node helpers.

Documents are plain Python JSON values: dict, list, str, int, float, bool
and None. ``None`` means absent on the public API; a JSON null that was
explicitly requested with ``allow_null=True`` is reported as JSON_NULL.
"""

from __future__ import annotations

import copy
from typing import Any


class JsonNull:
    """Marker for a JSON null value, distinct from an absent element.

    There is only one instance, JSON_NULL. It is falsy and compares equal
    only to itself.

    Example:
        >>> tree = PathTree({'a': None})
        >>> tree.get_element('a') is None
        True
        >>> tree.get_element('a', allow_null=True) is JSON_NULL
        True
    """

    __slots__ = ()
    _instance: JsonNull | None = None

    def __new__(cls) -> JsonNull:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'JSON_NULL'

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> JsonNull:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> JsonNull:
        return self

    def __reduce__(self) -> str:
        return 'JSON_NULL'


JSON_NULL = JsonNull()


def is_object(node: Any) -> bool:
    """True for a JSON object."""
    return isinstance(node, dict)


def is_array(node: Any) -> bool:
    """True for a JSON array."""
    return isinstance(node, list)


def is_string(node: Any) -> bool:
    return isinstance(node, str)


def is_boolean(node: Any) -> bool:
    return isinstance(node, bool)


def is_number(node: Any) -> bool:
    """True for a JSON number (bool is not a number)."""
    return isinstance(node, (int, float)) and not isinstance(node, bool)


def deep_copy(node: Any) -> Any:
    """Copy a node so the caller cannot alias the document's internals."""
    if isinstance(node, (dict, list)):
        return copy.deepcopy(node)
    return node


def json_equal(left: Any, right: Any) -> bool:
    """Compare two nodes as JSON values.

    Unlike ==, booleans never equal numbers at any depth, so {'flag': 1}
    does not match {'flag': True}. Integers and floats compare by value.
    """
    if is_boolean(left) or is_boolean(right):
        return is_boolean(left) and is_boolean(right) and left == right
    if is_object(left):
        return (
            is_object(right)
            and left.keys() == right.keys()
            and all(json_equal(left[k], right[k]) for k in left)
        )
    if is_array(left):
        return (
            is_array(right)
            and len(left) == len(right)
            and all(json_equal(a, b) for a, b in zip(left, right))
        )
    if is_object(right) or is_array(right):
        return False
    return left == right
