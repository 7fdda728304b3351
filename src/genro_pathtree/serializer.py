# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""JSON serialization capability used by PathTree.

JsonSerializer is stateless apart from its output options, so a single
instance can be shared by any number of trees. A tree takes its serializer
as a constructor argument; tests may pass a fake with the same methods.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from .node import JSON_NULL


class JsonSerializer:
    """Convert Python values to JSON nodes and JSON text to nodes.

    Attributes:
        indent: Indentation used by dumps() when none is given.
        ensure_ascii: Escape non-ASCII characters in dumps().
    """

    def __init__(self, indent: int | None = None, ensure_ascii: bool = False) -> None:
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def to_json(self, value: Any) -> Any:
        """Return the JSON node representation of ``value``.

        The result never shares containers with ``value``. Mappings become
        objects (keys converted with str()), tuples and sets become arrays,
        dataclasses and plain objects become objects of their fields, enums
        become their value.

        Raises:
            TypeError: If a value has no JSON representation.
        """
        if value is None or value is JSON_NULL:
            return None
        if isinstance(value, (str, bool, int, float)):
            return value
        if isinstance(value, Enum):
            return self.to_json(value.value)
        if isinstance(value, Mapping):
            return {str(k): self.to_json(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.to_json(v) for v in value]
        if isinstance(value, (set, frozenset)):
            return [self.to_json(v) for v in value]
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {
                f.name: self.to_json(getattr(value, f.name))
                for f in dataclasses.fields(value)
            }
        as_dict = getattr(value, 'as_dict', None)
        if callable(as_dict):
            return self.to_json(as_dict())
        if hasattr(value, '__dict__') and not isinstance(value, type):
            return {
                k: self.to_json(v)
                for k, v in vars(value).items()
                if not k.startswith('_')
            }
        raise TypeError(
            f"Object of type {type(value).__name__} has no JSON representation"
        )

    def parse(self, text: str | bytes) -> Any:
        """Parse JSON text into a node.

        Raises:
            json.JSONDecodeError: If the text is not valid JSON.
        """
        return json.loads(text)

    def dumps(self, node: Any, indent: int | None = None) -> str:
        """Serialize a node to JSON text.

        Without indentation the output is compact (no whitespace after
        separators), keys kept in document order.
        """
        indent = self.indent if indent is None else indent
        separators = (',', ':') if indent is None else (',', ': ')
        return json.dumps(
            node,
            indent=indent,
            separators=separators,
            ensure_ascii=self.ensure_ascii,
        )


default_serializer = JsonSerializer()
