# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Backing sources a PathTree document can be loaded and reloaded from.

A source descriptor remembers where a document came from:

- FileSource: a ``pathlib.Path``
- FileNameSource: a file name given as ``str``
- StreamSource: a readable file object (text or binary)

A tree built directly from a dict has no source and cannot be reloaded.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from .exceptions import NotAnObjectError, SourceUnavailableError

if TYPE_CHECKING:
    from .serializer import JsonSerializer

logger = logging.getLogger(__name__)


def parse_document(text: str | bytes, origin: str, serializer: JsonSerializer) -> dict[str, Any]:
    """Parse source text, which must hold a JSON object."""
    if not text or not text.strip():
        raise SourceUnavailableError(f"Input is empty: {origin}")
    try:
        document = serializer.parse(text)
    except ValueError as exc:
        # JSONDecodeError, or UnicodeDecodeError for bytes
        raise SourceUnavailableError(f"Invalid JSON in {origin}: {exc}") from exc
    if not isinstance(document, dict):
        raise NotAnObjectError(
            f"Top level of {origin} is {type(document).__name__}, not a JSON object"
        )
    return document


class Source:
    """Base class of source descriptors."""

    kind = 'none'

    def read(self, serializer: JsonSerializer) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class FileSource(Source):
    """Document read from a path object."""

    path: Path
    encoding: str = 'utf-8'

    kind = 'file'

    def _read_text(self) -> str:
        try:
            with open(self.path, encoding=self.encoding) as fp:
                return fp.read()
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read {self.path}: {exc}") from exc

    def read(self, serializer: JsonSerializer) -> dict[str, Any]:
        logger.debug("Reading JSON document from %s", self.path)
        return parse_document(self._read_text(), str(self.path), serializer)


@dataclass(frozen=True)
class FileNameSource(FileSource):
    """Document read from a file name."""

    path: str  # type: ignore[assignment]

    kind = 'file_name'


@dataclass(frozen=True)
class StreamSource(Source):
    """Document read from a file object.

    Seekable streams are rewound before every read, so reload() sees the
    whole content again. A non-seekable stream only yields what is left,
    which is usually nothing once the first load consumed it.
    """

    stream: IO[Any]

    kind = 'stream'

    def read(self, serializer: JsonSerializer) -> dict[str, Any]:
        origin = getattr(self.stream, 'name', None) or repr(self.stream)
        logger.debug("Reading JSON document from stream %s", origin)
        try:
            seekable = getattr(self.stream, 'seekable', None)
            if seekable is not None and seekable():
                self.stream.seek(0)
            text = self.stream.read()
        except (OSError, ValueError) as exc:
            # closed files raise ValueError
            raise SourceUnavailableError(f"Cannot read stream {origin}: {exc}") from exc
        return parse_document(text, str(origin), serializer)


def source_for(obj: Any) -> Source | None:
    """Return the source descriptor for a constructor argument, if it has one.

    Raises:
        ValueError: If given an empty file name.
    """
    if isinstance(obj, Source):
        return obj
    if isinstance(obj, str):
        if not obj:
            raise ValueError("File name cannot be empty")
        return FileNameSource(obj)
    if isinstance(obj, os.PathLike):
        return FileSource(Path(obj))
    if callable(getattr(obj, 'read', None)):
        return StreamSource(obj)
    return None
